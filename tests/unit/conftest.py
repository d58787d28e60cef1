"""
Unit test specific fixtures and configurations.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture
def no_sleep():
    """Replace poll sleeps with a mock recording the requested durations."""
    with patch(
        "ibmcloud_resources.core.polling._pause", new_callable=AsyncMock
    ) as pause:
        yield pause
