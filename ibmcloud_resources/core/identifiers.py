"""Composite identifiers built from parent and child ids."""

from typing import List

from ..errors import MalformedIdentifierError

SEPARATOR = "/"


def join_id(*parts: str) -> str:
    """Join identifier components with ``/``."""
    for part in parts:
        if not part:
            raise MalformedIdentifierError("one or more empty segments")
        if SEPARATOR in part:
            raise MalformedIdentifierError(
                f"segment {part!r} contains the separator {SEPARATOR!r}"
            )
    return SEPARATOR.join(parts)


def split_id(identifier: str, count: int) -> List[str]:
    """
    Split a composite identifier into exactly ``count`` non-empty segments.

    Raises:
        MalformedIdentifierError: On a wrong segment count or an empty segment
    """
    parts = identifier.split(SEPARATOR)
    if len(parts) != count:
        raise MalformedIdentifierError(
            f"incorrect number of segments in {identifier!r}: "
            f"expected {count}, got {len(parts)}"
        )
    if any(not part for part in parts):
        raise MalformedIdentifierError(
            f"one or more empty segments in {identifier!r}"
        )
    return parts
