"""Tests for pm_market request validation and response shaping."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.pm_market.application.schemas import CreateMarketRequest, MarketOut
from src.pm_market.domain.models import Market, MarketOption, MarketWithDetail

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


def _payload(**overrides) -> dict:
    payload = {
        "question": "Who wins the final?",
        "closeTime": "2026-06-01T10:00:00Z",
        "creatorId": "0xcreator",
        "options": ["India", "Australia"],
    }
    payload.update(overrides)
    return payload


class TestCreateMarketRequest:
    def test_camel_case_accepted(self) -> None:
        req = CreateMarketRequest.model_validate(_payload(bannerUrl="https://x/b.png"))
        assert req.creator_id == "0xcreator"
        assert req.banner_url == "https://x/b.png"
        assert req.close_time == datetime(2026, 6, 1, 10, 0, tzinfo=UTC)

    def test_snake_case_accepted(self) -> None:
        req = CreateMarketRequest(
            question="Q", close_time=NOW, creator_id="c", options=["Yes"]
        )
        assert req.options == ["Yes"]
        assert req.description is None
        assert req.category is None

    def test_labels_are_stripped_and_order_kept(self) -> None:
        req = CreateMarketRequest.model_validate(_payload(options=[" B ", "A", "C"]))
        assert req.options == ["B", "A", "C"]

    def test_empty_option_list_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateMarketRequest.model_validate(_payload(options=[]))

    def test_blank_label_rejected(self) -> None:
        with pytest.raises(ValidationError, match="blank"):
            CreateMarketRequest.model_validate(_payload(options=["India", "   "]))

    def test_missing_close_time_rejected(self) -> None:
        payload = _payload()
        del payload["closeTime"]
        with pytest.raises(ValidationError):
            CreateMarketRequest.model_validate(payload)


class TestMarketOut:
    def _detail(self, **market_kwargs) -> MarketWithDetail:
        fields = dict(
            id=5, question="Q", description="", category="Cricket", banner_url=None,
            close_time=NOW + timedelta(days=1), creator_id="c", status="open",
            winning_option_id=None, total_liquidity=Decimal("100"), created_at=NOW,
        )
        fields.update(market_kwargs)
        options = [
            MarketOption(id=6, market_id=5, text="A", total_staked=Decimal("30")),
            MarketOption(id=7, market_id=5, text="B", total_staked=Decimal("70")),
        ]
        return MarketWithDetail(market=Market(**fields), options=options, total_positions=2)

    def test_amounts_as_six_digit_strings(self) -> None:
        out = MarketOut.from_domain(self._detail(), NOW)
        assert out.total_liquidity == "100.000000"
        assert [o.total_staked for o in out.options] == ["30.000000", "70.000000"]
        assert out.total_positions == 2

    def test_is_open_derived_from_close_time(self) -> None:
        assert MarketOut.from_domain(self._detail(), NOW).is_open is True
        later = NOW + timedelta(days=2)
        assert MarketOut.from_domain(self._detail(), later).is_open is False

    def test_resolved_market(self) -> None:
        out = MarketOut.from_domain(
            self._detail(status="resolved", winning_option_id=6), NOW
        )
        assert out.is_open is False
        assert out.winning_option_id == 6
