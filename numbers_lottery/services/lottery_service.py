"""Lottery ledger: ticket issuance, draw execution and result matching.

Every mutation runs inside the write serializer slot for the ledger store and
loads the ledger there, so each commit is computed from the latest committed
document. Reads load the ledger directly and never wait on the queue.
"""

import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from loguru import logger

from numbers_lottery.errors import (
    AdminRequiredError,
    DrawNotDiscardableError,
    DrawNotFoundError,
    LedgerIntegrityError,
    OpenDrawConflictError,
    PendingTicketCapError,
)
from numbers_lottery.schemas.lottery import (
    Draw,
    DrawResults,
    Ticket,
    TicketPage,
    TicketResult,
)
from numbers_lottery.services.access_policy import AccessPolicy, Identity
from numbers_lottery.services.numbers import count_matches, generate_numbers, prize_for
from numbers_lottery.storage.repository import LedgerRepository
from numbers_lottery.storage.serializer import WriteSerializer


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LotteryLimits:
    max_pending_tickets: int = 1000
    max_pending_per_user: int = 100


class LotteryLedger:
    """Use-cases over the ticket/draw ledger."""

    def __init__(
        self,
        repository: LedgerRepository,
        serializer: WriteSerializer,
        policy: AccessPolicy | None = None,
        limits: LotteryLimits | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.serializer = serializer
        self.policy = policy or AccessPolicy()
        self.limits = limits or LotteryLimits()
        self._rng = rng or random.Random()
        self._clock = clock

    # --- Tickets ---

    async def issue_ticket(self, user_id: str) -> Ticket:
        """Buy a ticket with random numbers; it stays pending until the next draw."""

        async def _write() -> Ticket:
            ledger = await self.repository.load()

            pending = ledger.pending_tickets()
            if len(pending) >= self.limits.max_pending_tickets:
                logger.info("Ticket refused for {}: global pending cap reached", user_id)
                raise PendingTicketCapError("global", self.limits.max_pending_tickets)

            mine = [t for t in pending if t.user_id == user_id]
            if len(mine) >= self.limits.max_pending_per_user:
                logger.info("Ticket refused for {}: per-user pending cap reached", user_id)
                raise PendingTicketCapError("user", self.limits.max_pending_per_user)

            ticket = Ticket(
                id=str(uuid.uuid4()),
                user_id=user_id,
                numbers=generate_numbers(self._rng),
                draw_id=None,
                purchased_at=self._clock(),
            )
            ledger.tickets.append(ticket)
            await self.repository.save(ledger)
            return ticket

        ticket = await self.serializer.enqueue(self.repository.store_id, _write)
        logger.info("Ticket {} issued to {}: {}", ticket.id, user_id, ticket.numbers)
        return ticket

    async def list_my_tickets(self, user_id: str, page: int = 1, limit: int = 20) -> TicketPage:
        page = max(1, page)
        limit = max(1, limit)

        ledger = await self.repository.load()
        mine = [t for t in ledger.tickets if t.user_id == user_id]
        start = (page - 1) * limit
        return TicketPage(
            page=page,
            limit=limit,
            total=len(mine),
            tickets=mine[start:start + limit],
        )

    # --- Draws ---

    async def execute_draw(
        self, identity: Identity | None, *, require_pending: bool = False
    ) -> Draw | None:
        """Create a draw and assign every pending ticket to it (admin only).

        With ``require_pending`` nothing is created while no ticket is pending,
        and None is returned instead of the draw.
        """
        if not self.policy.is_admin(identity):
            raise AdminRequiredError()

        async def _write() -> tuple[Draw, int] | None:
            ledger = await self.repository.load()

            unfilled = ledger.unfilled_draws()
            if len(unfilled) > 1:
                ids = ", ".join(d.id for d in unfilled)
                logger.error("Ledger has {} unfilled draws: {}", len(unfilled), ids)
                raise LedgerIntegrityError(f"Multiple draws have no tickets assigned: {ids}")
            if unfilled:
                raise OpenDrawConflictError(unfilled[0].id)
            if require_pending and not ledger.pending_tickets():
                return None

            draw = Draw(
                id=str(uuid.uuid4()),
                numbers=generate_numbers(self._rng),
                date=self._clock(),
            )
            ledger.draws.append(draw)

            assigned = 0
            for ticket in ledger.tickets:
                if ticket.draw_id is None:
                    ticket.draw_id = draw.id
                    assigned += 1

            await self.repository.save(ledger)
            return draw, assigned

        result = await self.serializer.enqueue(self.repository.store_id, _write)
        if result is None:
            logger.info("Draw by {} skipped: no pending tickets", identity.id)
            return None

        draw, assigned = result
        logger.info(
            "Draw {} executed by {}: {} ({} tickets assigned)",
            draw.id, identity.id, draw.numbers, assigned,
        )
        return draw

    async def discard_draw(self, identity: Identity | None, draw_id: str) -> Draw:
        """Remove a draw that has no tickets, so a new draw can be run (admin only)."""
        if not self.policy.is_admin(identity):
            raise AdminRequiredError()

        async def _write() -> Draw:
            ledger = await self.repository.load()

            draw = ledger.find_draw(draw_id)
            if draw is None:
                raise DrawNotFoundError(draw_id)
            if any(t.draw_id == draw_id for t in ledger.tickets):
                raise DrawNotDiscardableError(draw_id)

            ledger.draws = [d for d in ledger.draws if d.id != draw_id]
            await self.repository.save(ledger)
            return draw

        draw = await self.serializer.enqueue(self.repository.store_id, _write)
        logger.info("Draw {} discarded by {}", draw.id, identity.id)
        return draw

    async def list_draws(self) -> list[Draw]:
        """All draws, newest first; equal dates keep creation order."""
        ledger = await self.repository.load()
        return sorted(ledger.draws, key=lambda d: d.date, reverse=True)

    async def get_results(self, draw_id: str, user_id: str) -> DrawResults:
        """Score the caller's own tickets on one draw."""
        ledger = await self.repository.load()

        draw = ledger.find_draw(draw_id)
        if draw is None:
            raise DrawNotFoundError(draw_id)

        results = []
        for ticket in ledger.tickets:
            if ticket.user_id != user_id or ticket.draw_id != draw_id:
                continue
            matches = count_matches(ticket.numbers, draw.numbers)
            results.append(TicketResult(
                ticket_id=ticket.id,
                numbers=ticket.numbers,
                matches=matches,
                prize=prize_for(matches),
            ))

        return DrawResults(draw=draw, my_results=results)
