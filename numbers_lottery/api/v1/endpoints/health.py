"""Health check endpoint."""

from fastapi import APIRouter, Request

from numbers_lottery.schemas.lottery import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    state = request.app.state
    scheduler = getattr(state, "scheduler", None)
    jobs = scheduler.status() if scheduler is not None else []
    return HealthResponse(
        status="ok",
        ledger_write_pending=state.serializer.pending(state.ledger.repository.store_id),
        scheduler_jobs=jobs,
    )
