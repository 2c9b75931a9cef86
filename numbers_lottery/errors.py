"""Typed lottery errors, mapped to HTTP statuses by the API layer."""

from dataclasses import dataclass


@dataclass(eq=False)
class LotteryError(Exception):
    """Base class for every error the lottery reports to a caller."""

    code: str
    message: str
    status_code: int

    def __str__(self) -> str:
        return self.message


class AuthenticationRequiredError(LotteryError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(code="unauthorized", message=message, status_code=401)


class AdminRequiredError(LotteryError):
    def __init__(self, message: str = "Admin privileges required.") -> None:
        super().__init__(code="forbidden", message=message, status_code=403)


class PendingTicketCapError(LotteryError):
    """Raised when the global or per-user pending-ticket cap is reached."""

    def __init__(self, scope: str, limit: int) -> None:
        if scope == "global":
            message = f"Maximum of {limit} pending tickets reached. Try later."
        else:
            message = f"You already have {limit} pending tickets."
        super().__init__(code="pending_cap_reached", message=message, status_code=429)
        self.scope = scope
        self.limit = limit


class OpenDrawConflictError(LotteryError):
    def __init__(self, draw_id: str) -> None:
        super().__init__(
            code="draw_open",
            message="There is already an active draw awaiting tickets.",
            status_code=400,
        )
        self.draw_id = draw_id


class DrawNotDiscardableError(LotteryError):
    def __init__(self, draw_id: str) -> None:
        super().__init__(
            code="draw_filled",
            message=f"Draw {draw_id} already has tickets and cannot be discarded.",
            status_code=409,
        )
        self.draw_id = draw_id


class LedgerIntegrityError(LotteryError):
    """The persisted ledger breaks an invariant that normal operation never breaks."""

    def __init__(self, message: str) -> None:
        super().__init__(code="ledger_integrity", message=message, status_code=409)


class DrawNotFoundError(LotteryError):
    def __init__(self, draw_id: str) -> None:
        super().__init__(code="not_found", message="Draw not found.", status_code=404)
        self.draw_id = draw_id


class StorageCorruptedError(LotteryError):
    def __init__(self, path: str) -> None:
        super().__init__(
            code="storage_corrupted",
            message=f"Stored document at {path} is corrupted",
            status_code=500,
        )
        self.path = path
