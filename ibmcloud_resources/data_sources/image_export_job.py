"""Data source reading an image export job."""

from ..core.identifiers import join_id
from ..resources.base import (
    Attribute,
    AttributeType,
    DataSource,
    ResourceData,
    ResourceSchema,
)


class ImageExportJobDataSource(DataSource):
    """Look up one export job of a VPC image."""

    type_name = "ibm_is_image_export_job"

    async def get_schema(self) -> ResourceSchema:
        string = Attribute(type=AttributeType.STRING, computed=True)
        return ResourceSchema(
            type_name=self.type_name,
            description="Export job of a VPC image to Cloud Object Storage",
            kind=self.kind,
            attributes={
                "image": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="The image identifier.",
                ),
                "image_export_job": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="The image export job identifier.",
                ),
                "completed_at": string,
                "created_at": string,
                "encrypted_data_key": string,
                "format": string,
                "href": string,
                "name": string,
                "resource_type": string,
                "started_at": string,
                "status": string,
                "status_reasons": Attribute(
                    type=AttributeType.LIST,
                    computed=True,
                    elements={"code": string, "message": string, "more_info": string},
                ),
                "storage_bucket": Attribute(
                    type=AttributeType.LIST,
                    computed=True,
                    elements={"crn": string, "name": string},
                ),
                "storage_href": string,
                "storage_object": Attribute(
                    type=AttributeType.LIST,
                    computed=True,
                    elements={"name": string},
                ),
            },
        )

    async def read(self, data: ResourceData) -> None:
        for key in ("image", "image_export_job"):
            if not data.get_ok(key)[1]:
                raise self._invalid("read", f"Required parameter {key} is not defined")

        image_id = data.get("image")
        job_id = data.get("image_export_job")
        vpc = self.session.vpc_client()
        job = self._call(
            "read", "get_image_export_job", vpc.get_image_export_job, image_id, job_id
        )

        data.set_id(join_id(image_id, job_id))
        # Optional timestamps and key are absent until the job reaches that point
        for key in ("completed_at", "encrypted_data_key", "started_at"):
            if job.get(key) is not None:
                data.set(key, job[key])
        for key in ("created_at", "format", "href", "name", "resource_type", "status",
                    "storage_href"):
            data.set(key, job.get(key))

        data.set(
            "status_reasons",
            [
                {
                    "code": reason.get("code"),
                    "message": reason.get("message"),
                    "more_info": reason.get("more_info"),
                }
                for reason in job.get("status_reasons") or []
            ],
        )
        bucket = job.get("storage_bucket")
        data.set(
            "storage_bucket",
            [{"crn": bucket.get("crn"), "name": bucket.get("name")}] if bucket else [],
        )
        storage_object = job.get("storage_object")
        data.set(
            "storage_object",
            [{"name": storage_object.get("name")}] if storage_object else [],
        )
