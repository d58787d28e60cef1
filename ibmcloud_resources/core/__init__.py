"""
Shared control flow for resource handlers.

Pagination, status polling, composite identifiers and tag synchronisation
used across the VPC and Code Engine handlers.
"""

from .identifiers import join_id, split_id
from .pagination import list_all, next_start
from .polling import wait_for_state
from .tags import ACCESS_TAG_TYPE, USER_TAG_TYPE, read_tags, update_tags

__all__ = [
    "join_id",
    "split_id",
    "list_all",
    "next_start",
    "wait_for_state",
    "read_tags",
    "update_tags",
    "USER_TAG_TYPE",
    "ACCESS_TAG_TYPE",
]
