from __future__ import annotations

import pytest

from fakes import ManualTicker, RecordingSink


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
