"""Request schema validation for staking, resolving and market creation."""

import base64
import json
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.pm_clearing.application.schemas import ResolveRequest
from src.pm_market.application.schemas import CreateMarketRequest, cursor_decode
from src.pm_stake.application.schemas import PlaceStakeRequest


class TestPlaceStakeRequest:
    def test_valid(self) -> None:
        req = PlaceStakeRequest(stance=True, points_staked=30)
        assert req.stance is True
        assert req.points_staked == 30

    @pytest.mark.parametrize(
        "payload",
        [
            {"stance": "true", "points_staked": 30},
            {"stance": 1, "points_staked": 30},
            {"stance": True, "points_staked": 0},
            {"stance": True, "points_staked": -1},
            {"stance": True, "points_staked": True},
            {"stance": True, "points_staked": "30"},
            {"stance": True, "points_staked": 2.5},
            {"stance": True},
        ],
    )
    def test_rejects_malformed(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            PlaceStakeRequest(**payload)


class TestResolveRequest:
    def test_strict_bool(self) -> None:
        assert ResolveRequest(outcome=False).outcome is False
        with pytest.raises(ValidationError):
            ResolveRequest(outcome="yes")


class TestCreateMarketRequest:
    def test_naive_deadline_is_utc(self) -> None:
        req = CreateMarketRequest(title="x", resolution_deadline=datetime(2031, 1, 1, 9, 0))
        assert req.resolution_deadline.tzinfo is UTC

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateMarketRequest(title="", resolution_deadline=datetime(2031, 1, 1, tzinfo=UTC))


@pytest.mark.parametrize("cursor", [None, "garbage", "e30="])
def test_bad_cursor_decodes_to_first_page(cursor: str | None) -> None:
    assert cursor_decode(cursor) == (None, None)


def _cursor(payload: dict) -> str:
    return base64.b64encode(json.dumps(payload).encode()).decode()


@pytest.mark.parametrize(
    "payload",
    [{"ts": "x", "id": "y"}, {"ts": 12, "id": "y"}, {"ts": "2031-01-01T00:00:00+00:00", "id": 5}],
)
def test_malformed_cursor_fields_decode_to_first_page(payload: dict) -> None:
    assert cursor_decode(_cursor(payload)) == (None, None)


def test_valid_cursor_decodes() -> None:
    cursor = _cursor({"ts": "2031-01-01T00:00:00+00:00", "id": "m1"})
    assert cursor_decode(cursor) == ("2031-01-01T00:00:00+00:00", "m1")
