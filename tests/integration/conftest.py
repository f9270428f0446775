from __future__ import annotations

import httpx
import pytest

from requestable.transport import HttpxTransport
from tests.integration.mock_target import app


@pytest.fixture
def mock_transport():
    transport = HttpxTransport(base_transport=httpx.ASGITransport(app=app))
    yield transport
    transport.close()
