"""Pydantic schemas for the lottery ledger and its API responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from numbers_lottery.services.numbers import validate_numbers


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase keys on disk and on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Ledger document ---

class Draw(CamelModel):
    id: str
    numbers: list[int]
    date: datetime

    @field_validator("numbers")
    @classmethod
    def check_numbers(cls, value: list[int]) -> list[int]:
        return validate_numbers(value)


class Ticket(CamelModel):
    id: str
    user_id: str
    numbers: list[int]
    draw_id: str | None = None
    purchased_at: datetime

    @field_validator("numbers")
    @classmethod
    def check_numbers(cls, value: list[int]) -> list[int]:
        return validate_numbers(value)


class Ledger(CamelModel):
    draws: list[Draw] = Field(default_factory=list)
    tickets: list[Ticket] = Field(default_factory=list)

    def pending_tickets(self) -> list[Ticket]:
        return [t for t in self.tickets if t.draw_id is None]

    def find_draw(self, draw_id: str) -> Draw | None:
        return next((d for d in self.draws if d.id == draw_id), None)

    def unfilled_draws(self) -> list[Draw]:
        """Draws that no ticket references."""
        referenced = {t.draw_id for t in self.tickets if t.draw_id is not None}
        return [d for d in self.draws if d.id not in referenced]


# --- Service results ---

class TicketResult(CamelModel):
    ticket_id: str
    numbers: list[int]
    matches: int
    prize: str


class DrawResults(CamelModel):
    draw: Draw
    my_results: list[TicketResult]


class TicketPage(CamelModel):
    page: int
    limit: int
    total: int
    tickets: list[Ticket]


# --- API responses ---

class TicketResponse(CamelModel):
    ok: bool = True
    message: str
    ticket: Ticket


class TicketPageResponse(CamelModel):
    ok: bool = True
    page: int
    limit: int
    total_tickets: int
    tickets: list[Ticket]


class DrawResponse(CamelModel):
    ok: bool = True
    message: str
    draw: Draw


class DrawListResponse(CamelModel):
    ok: bool = True
    draws: list[Draw]


class ResultsResponse(CamelModel):
    ok: bool = True
    draw: Draw
    my_results: list[TicketResult]


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    ok: bool = False
    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str
    ledger_write_pending: bool
    scheduler_jobs: list[dict]
