"""Read-only data sources."""

from .code_engine_function import CodeEngineFunctionDataSource
from .image_export_job import ImageExportJobDataSource
from .instance_group_managers import InstanceGroupManagersDataSource

__all__ = [
    "CodeEngineFunctionDataSource",
    "ImageExportJobDataSource",
    "InstanceGroupManagersDataSource",
]
