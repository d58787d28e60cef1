"""
Cursor based pagination over VPC collection responses.

VPC list calls return a page of items plus an optional ``next.href``. The
``start`` query parameter of that link is the cursor for the following page.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Set

from ibm_cloud_sdk_core import get_query_param

from ..errors import RemoteCallError

logger = logging.getLogger(__name__)


def next_start(collection: Dict[str, Any]) -> Optional[str]:
    """Get the cursor for the page after ``collection``, or None when done."""
    next_link = collection.get("next") or {}
    href = next_link.get("href")
    if not href:
        return None
    start = get_query_param(href, "start")
    return start or None


def list_all(
    fetch: Callable[[Optional[str]], Dict[str, Any]], items_key: str
) -> List[Dict[str, Any]]:
    """
    Collect every item from a paginated collection.

    Args:
        fetch: Callable returning one collection page for a cursor
            (None for the first page)
        items_key: Key of the item list inside each page

    Returns:
        All items, pages appended in the order the server returned them

    Raises:
        RemoteCallError: The server returned a cursor it had already returned
    """
    items: List[Dict[str, Any]] = []
    start: Optional[str] = None
    seen: Set[str] = set()
    pages = 0

    while True:
        page = fetch(start)
        pages += 1
        items.extend(page.get(items_key) or [])
        start = next_start(page)
        if not start:
            break
        if start in seen:
            raise RemoteCallError(
                f"Pagination of {items_key} returned cursor {start!r} twice",
                step="list_all",
            )
        seen.add(start)

    logger.debug(
        "Listed collection",
        extra={"items_key": items_key, "pages": pages, "item_count": len(items)},
    )
    return items
