"""Error codes and HTTP statuses are part of the API contract."""

import pytest

from src.pm_common.errors import (
    AccountNotFoundError,
    AlreadyVotedError,
    AppError,
    InsufficientPointsError,
    InternalError,
    InvalidMarketError,
    InvalidStakeError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
    NotMarketOwnerError,
    ResolutionTooEarlyError,
    TransientStorageError,
    UserNotFoundError,
)


@pytest.mark.parametrize(
    ("error", "code", "status"),
    [
        (UserNotFoundError("u1"), 1006, 404),
        (InsufficientPointsError(50, 10), 2001, 422),
        (AccountNotFoundError("u1"), 2002, 404),
        (MarketNotFoundError("m1"), 3001, 404),
        (MarketAlreadyResolvedError("m1"), 3002, 409),
        (InvalidMarketError("bad"), 3003, 422),
        (InvalidStakeError("bad"), 4001, 422),
        (AlreadyVotedError("m1"), 4002, 409),
        (NotMarketOwnerError("m1"), 4003, 403),
        (ResolutionTooEarlyError("m1", "2030-01-01T00:00:00+00:00"), 4004, 422),
        (TransientStorageError(), 9001, 503),
        (InternalError(), 9002, 500),
    ],
)
def test_code_and_status(error: AppError, code: int, status: int) -> None:
    assert isinstance(error, AppError)
    assert error.code == code
    assert error.http_status == status


def test_insufficient_points_message_has_amounts() -> None:
    err = InsufficientPointsError(required=50, available=10)
    assert "50" in err.message
    assert "10" in err.message


def test_message_is_exception_str() -> None:
    err = AlreadyVotedError("mkt-1")
    assert str(err) == err.message
    assert "mkt-1" in err.message
