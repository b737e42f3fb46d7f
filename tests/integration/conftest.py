"""Integration test fixtures.

Builds on the temporary site and AppState from tests/conftest.py and adds an
httpx client wired to the Starlette app through the ASGI transport. The
lifespan is not run, so no background flush task is started.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from dromedary.server import create_app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from dromedary.state import AppState


@pytest.fixture()
async def client(app_state: AppState) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(app_state)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://localhost",
    ) as client:
        yield client
