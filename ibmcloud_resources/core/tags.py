"""
Global tagging helpers.

User and access tags live in the global tagging service, keyed by CRN.
Callers treat every failure here as a warning: a resource that exists but
could not be tagged is still a successfully created resource.
"""

import logging
from typing import Any, Iterable, List, Optional

from ibm_cloud_sdk_core import ApiException

from ..errors import TagSyncError

logger = logging.getLogger(__name__)

USER_TAG_TYPE = "user"
ACCESS_TAG_TYPE = "access"

# Upper bound accepted by the tagging service for list_tags
_TAG_PAGE_LIMIT = 1000


def read_tags(
    client: Any,
    crn: str,
    tag_type: str = USER_TAG_TYPE,
    env_tags: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Read the tags attached to ``crn``.

    Environment tags are left out of the returned user tags so they never
    appear as a difference against the configured tags.
    """
    try:
        response = client.list_tags(
            attached_to=crn, tag_type=tag_type, limit=_TAG_PAGE_LIMIT
        )
    except ApiException as e:
        raise TagSyncError(
            f"Error listing {tag_type} tags for {crn}: {e.message}", step="list_tags"
        )

    names = [item["name"] for item in response.get_result().get("items", [])]
    if tag_type == USER_TAG_TYPE and env_tags:
        hidden = set(env_tags)
        names = [name for name in names if name not in hidden]
    return sorted(names)


def update_tags(
    client: Any,
    crn: str,
    old: Optional[Iterable[str]],
    new: Optional[Iterable[str]],
    tag_type: str = USER_TAG_TYPE,
    env_tags: Optional[Iterable[str]] = None,
) -> None:
    """
    Detach tags no longer wanted and attach the new ones.

    Environment tags are always part of the wanted set for user tags.
    """
    old_set = set(old or [])
    new_set = set(new or [])
    if tag_type == USER_TAG_TYPE and env_tags:
        new_set.update(env_tags)

    remove = sorted(old_set - new_set)
    add = sorted(new_set - old_set)
    resources = [{"resource_id": crn}]

    if remove:
        try:
            client.detach_tag(resources=resources, tag_names=remove, tag_type=tag_type)
        except ApiException as e:
            raise TagSyncError(
                f"Error detaching {tag_type} tags {remove} from {crn}: {e.message}",
                step="detach_tag",
            )

    if add:
        try:
            client.attach_tag(resources=resources, tag_names=add, tag_type=tag_type)
        except ApiException as e:
            raise TagSyncError(
                f"Error attaching {tag_type} tags {add} to {crn}: {e.message}",
                step="attach_tag",
            )

    logger.debug(
        "Synchronised tags",
        extra={"crn": crn, "tag_type": tag_type, "added": add, "removed": remove},
    )
