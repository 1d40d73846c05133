"""Unit tests for SessionTable lookups and lifecycle guards."""
import asyncio
from unittest.mock import MagicMock

import pytest

from app.sessions import SessionNotFound, SessionTable
from app.transports import _is_initialize


def test_unknown_session_raises():
    table = SessionTable(MagicMock())
    with pytest.raises(SessionNotFound):
        table.get("missing")
    assert len(table) == 0


def test_create_requires_running_table():
    table = SessionTable(MagicMock())
    with pytest.raises(RuntimeError):
        asyncio.run(table.create())


def test_is_initialize():
    assert _is_initialize(b'{"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}')
    assert not _is_initialize(b'{"jsonrpc": "2.0", "id": 1, "method": "tools/list"}')
    assert not _is_initialize(b'[{"method": "initialize"}]')
    assert not _is_initialize(b"not json")
    assert not _is_initialize(b"")
