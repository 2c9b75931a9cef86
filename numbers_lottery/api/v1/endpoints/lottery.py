"""Lottery API endpoints: tickets, draws and results."""

from fastapi import APIRouter, Depends, Query, status

from numbers_lottery.api.deps import get_identity, get_ledger, get_settings, require_admin
from numbers_lottery.config import Settings
from numbers_lottery.schemas.lottery import (
    DrawListResponse,
    DrawResponse,
    ResultsResponse,
    TicketPageResponse,
    TicketResponse,
)
from numbers_lottery.services.access_policy import Identity
from numbers_lottery.services.lottery_service import LotteryLedger

router = APIRouter()


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def buy_ticket(
    identity: Identity = Depends(get_identity),
    ledger: LotteryLedger = Depends(get_ledger),
):
    """Buy a ticket for the next draw."""
    ticket = await ledger.issue_ticket(identity.id)
    return TicketResponse(message="Ticket purchased successfully.", ticket=ticket)


@router.get("/tickets", response_model=TicketPageResponse)
async def my_tickets(
    page: int = Query(1, description="1-based page, values below 1 are clamped"),
    limit: int | None = Query(None, description="page size, defaults to TICKETS_PAGE_SIZE"),
    identity: Identity = Depends(get_identity),
    ledger: LotteryLedger = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
):
    """List the caller's tickets in purchase order."""
    result = await ledger.list_my_tickets(
        identity.id, page=page, limit=limit if limit is not None else settings.TICKETS_PAGE_SIZE,
    )
    return TicketPageResponse(
        page=result.page,
        limit=result.limit,
        total_tickets=result.total,
        tickets=result.tickets,
    )


@router.post("/draw", response_model=DrawResponse, status_code=status.HTTP_201_CREATED)
async def run_draw(
    identity: Identity = Depends(require_admin),
    ledger: LotteryLedger = Depends(get_ledger),
):
    """Run a draw and assign every pending ticket to it (admin)."""
    draw = await ledger.execute_draw(identity)
    return DrawResponse(message="New draw created.", draw=draw)


@router.delete("/draws/{draw_id}", response_model=DrawResponse)
async def discard_draw(
    draw_id: str,
    identity: Identity = Depends(require_admin),
    ledger: LotteryLedger = Depends(get_ledger),
):
    """Discard a draw that never received tickets (admin)."""
    draw = await ledger.discard_draw(identity, draw_id)
    return DrawResponse(message="Draw discarded.", draw=draw)


@router.get("/draws", response_model=DrawListResponse)
async def list_draws(ledger: LotteryLedger = Depends(get_ledger)):
    """All draws, most recent first."""
    return DrawListResponse(draws=await ledger.list_draws())


@router.get("/results/{draw_id}", response_model=ResultsResponse)
async def results(
    draw_id: str,
    identity: Identity = Depends(get_identity),
    ledger: LotteryLedger = Depends(get_ledger),
):
    """The caller's own results on one draw."""
    outcome = await ledger.get_results(draw_id, identity.id)
    return ResultsResponse(draw=outcome.draw, my_results=outcome.my_results)
