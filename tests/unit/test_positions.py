# tests/unit/test_positions.py
"""Unit tests for positions infrastructure."""
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_account.infrastructure.positions_repository import PositionsRepository


def _make_pos_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", 1)
    row.market_id = kwargs.get("market_id", 1)
    row.option_id = kwargs.get("option_id", 10)
    row.user_address = kwargs.get("user_address", "alice")
    row.amount = kwargs.get("amount", Decimal("30"))
    row.status = kwargs.get("status", "pending")
    row.claimed = kwargs.get("claimed", False)
    row.created_at = datetime.now(UTC)
    row.settled_at = kwargs.get("settled_at")
    row.market_status = kwargs.get("market_status", "open")
    row.winning_option_id = kwargs.get("winning_option_id")
    return row


@pytest.mark.asyncio
async def test_create_position_inserts_pending_unclaimed() -> None:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchone.return_value = _make_pos_row()
    db.execute.return_value = result_mock

    position = await PositionsRepository().create_position(db, 1, 10, "alice", Decimal("30"))

    assert position.status == "pending"
    assert position.claimed is False
    sql = str(db.execute.call_args.args[0])
    assert "'pending', FALSE" in sql


@pytest.mark.asyncio
async def test_list_by_user_joins_market_state() -> None:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchall.return_value = [
        _make_pos_row(id=2, market_status="resolved", winning_option_id=10),
        _make_pos_row(id=1),
    ]
    db.execute.return_value = result_mock

    views = await PositionsRepository().list_by_user(db, "alice")

    assert [v.position.id for v in views] == [2, 1]
    assert views[0].needs_settlement is True
    assert views[1].needs_settlement is False
    assert db.execute.call_args.args[1] == {"user_address": "alice"}


@pytest.mark.asyncio
async def test_list_unclaimed_locks_rows() -> None:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchall.return_value = [_make_pos_row()]
    db.execute.return_value = result_mock

    positions = await PositionsRepository().list_unclaimed_for_update(db, 1, "alice")

    assert len(positions) == 1
    sql = str(db.execute.call_args.args[0])
    assert "claimed = FALSE" in sql
    assert "FOR UPDATE" in sql


@pytest.mark.asyncio
async def test_settle_market_positions_classifies_in_sql() -> None:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchall.return_value = [
        _make_pos_row(id=1, status="won"),
        _make_pos_row(id=2, option_id=11, status="lost"),
    ]
    db.execute.return_value = result_mock
    settled_at = datetime.now(UTC)

    settled = await PositionsRepository().settle_market_positions(db, 1, 10, settled_at)

    assert [p.status for p in settled] == ["won", "lost"]
    params = db.execute.call_args.args[1]
    assert params == {"market_id": 1, "winning_option_id": 10, "settled_at": settled_at}


@pytest.mark.asyncio
async def test_settle_position_returns_none_when_already_settled() -> None:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchone.return_value = None
    db.execute.return_value = result_mock

    result = await PositionsRepository().settle_position(db, 1, "won", datetime.now(UTC))

    assert result is None
    assert "status = 'pending'" in str(db.execute.call_args.args[0])


@pytest.mark.asyncio
async def test_mark_claimed_returns_rowcount() -> None:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.rowcount = 2
    db.execute.return_value = result_mock

    assert await PositionsRepository().mark_claimed(db, [1, 2]) == 2
    assert db.execute.call_args.args[1] == {"position_ids": [1, 2]}


@pytest.mark.asyncio
async def test_mark_claimed_empty_is_noop() -> None:
    db = AsyncMock()

    assert await PositionsRepository().mark_claimed(db, []) == 0
    db.execute.assert_not_called()
