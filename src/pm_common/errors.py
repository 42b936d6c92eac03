"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account / points
  3xxx: Market
  4xxx: Stake / resolution
  9xxx: System

Every 2xxx-4xxx error is a deterministic business-rule rejection: it is
surfaced to the caller verbatim and never retried. TransientStorageError is
the only class that is safe to retry.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1006, f"User not found: {user_id}", 404)


# --- 2xxx: Account ---

class InsufficientPointsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient points: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Point account not found for user {user_id}", 404)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketAlreadyResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market has already been resolved: {market_id}", 409)


class InvalidMarketError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid market: {detail}", 422)


# --- 4xxx: Stake / resolution ---

class InvalidStakeError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid stake: {detail}", 422)


class AlreadyVotedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4002, f"You have already voted on market {market_id}", 409)


class NotMarketOwnerError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            4003, f"Only the market owner can resolve market {market_id}", 403
        )


class ResolutionTooEarlyError(AppError):
    def __init__(self, market_id: str, deadline: str) -> None:
        super().__init__(
            4004,
            f"Resolution deadline for market {market_id} has not passed yet ({deadline})",
            422,
        )


# --- 9xxx: System ---

class TransientStorageError(AppError):
    def __init__(self, detail: str = "Storage temporarily unavailable, retry the request") -> None:
        super().__init__(9001, detail, 503)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
