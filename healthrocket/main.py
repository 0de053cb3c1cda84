"""Main FastAPI application."""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException

from .api.models import (
    BoardEntryResponse,
    BoardResponse,
    BoostResponse,
    CompleteBoostResponse,
    CompletionResponse,
    ProgressResponse,
    StreakResponse,
    TodayResponse,
    WeekResponse,
)
from .boosts.errors import (
    AlreadyCompleted,
    BoostError,
    BoostNotFound,
    DailyLimitExceeded,
    DataUnavailable,
)
from .boosts.board import BoardEntry
from .boosts.models import CompletedBoost, StreakState
from .config import settings
from .service import BoostService, build_service

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Health Rocket Boosts",
    description="Daily boost, burn streak and weekly reset accounting",
    version="1.0.0",
)

_service: Optional[BoostService] = None


def get_service() -> BoostService:
    """Build the service on first use."""
    global _service
    if _service is None:
        _service = build_service(settings)
    return _service


def http_error(error: BoostError) -> HTTPException:
    """Map a boost error to an HTTP error."""
    if isinstance(error, BoostNotFound):
        status_code = 404
    elif isinstance(error, (DailyLimitExceeded, AlreadyCompleted)):
        status_code = 409
    else:
        status_code = 503

    return HTTPException(
        status_code=status_code,
        detail={
            "error": type(error).__name__,
            "message": error.message,
            "retryable": error.retryable,
        },
    )


def _completion(c: CompletedBoost) -> CompletionResponse:
    return CompletionResponse(
        boost_id=c.boost_id,
        category=c.category,
        completed_at=c.completed_at,
        completed_date=c.completed_date,
    )


def _streak(s: StreakState) -> StreakResponse:
    return StreakResponse(
        length=s.length,
        carried=s.carried,
        active_today=s.active_today,
        next_milestone=s.next_milestone,
        next_bonus=s.next_bonus,
        days_to_milestone=s.days_to_milestone,
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Health Rocket Boosts",
        "version": "1.0.0",
        "endpoints": {
            "boosts": "/api/boosts",
            "today": "/api/users/{user_id}/boosts/today",
            "week": "/api/users/{user_id}/boosts/week",
            "streak": "/api/users/{user_id}/streak",
            "progress": "/api/users/{user_id}/progress",
            "board": "/api/users/{user_id}/board",
            "complete": "/api/users/{user_id}/boosts/{boost_id}/complete",
            "status": "/status",
        },
    }


@app.get("/status")
async def status(service: BoostService = Depends(get_service)):
    """Server status endpoint."""
    return {
        "status": "running",
        "version": "1.0.0",
        "timestamp": service.coordinator.clock().isoformat(),
        "reference_timezone": settings.reference_timezone,
        "daily_boost_cap": service.daily.daily_cap,
        "boosts": len(service.catalog),
    }


@app.get("/api/boosts", response_model=list[BoostResponse])
async def list_boosts(
    category: Optional[str] = None,
    service: BoostService = Depends(get_service),
):
    """Boost catalog, optionally for a single category."""
    boosts = service.catalog.by_category(category) if category else list(service.catalog)
    return [
        BoostResponse(
            id=b.id,
            name=b.name,
            category=b.category,
            fuel_points=b.fuel_points,
            tier=b.tier,
            estimated_time=b.estimated_time,
        )
        for b in boosts
    ]


@app.get("/api/users/{user_id}/boosts/today", response_model=TodayResponse)
async def today_endpoint(user_id: str, service: BoostService = Depends(get_service)):
    """
    Boosts completed today and slots left.

    A read failure returns an empty selection with available=false so the
    client can show a retry instead of an error page.
    """
    now = service.coordinator.clock()
    selection = await service.daily.today_or_empty(user_id, now)
    window = service.weekly.window(now)

    return TodayResponse(
        user_id=user_id,
        day=selection.day,
        completions=[_completion(c) for c in selection.completions],
        remaining=selection.remaining,
        fuel_points=selection.fuel_points,
        available=selection.available,
        days_until_reset=window.days_until_reset,
    )


@app.get("/api/users/{user_id}/boosts/week", response_model=WeekResponse)
async def week_endpoint(user_id: str, service: BoostService = Depends(get_service)):
    """Current weekly window and the boosts completed in it."""
    now = service.coordinator.clock()
    try:
        completions = await service.weekly.weekly_completions(user_id, now)
    except DataUnavailable as e:
        raise http_error(e)
    window = service.weekly.window(now)

    return WeekResponse(
        user_id=user_id,
        week_start=window.start,
        days_until_reset=window.days_until_reset,
        completions=[_completion(c) for c in completions],
    )


@app.get("/api/users/{user_id}/streak", response_model=StreakResponse)
async def streak_endpoint(user_id: str, service: BoostService = Depends(get_service)):
    """Current burn streak and the next milestone."""
    try:
        state = await service.streak(user_id, service.coordinator.clock())
    except DataUnavailable as e:
        raise http_error(e)
    return _streak(state)


@app.get("/api/users/{user_id}/progress", response_model=ProgressResponse)
async def progress_endpoint(user_id: str, service: BoostService = Depends(get_service)):
    """Fuel points earned from boosts and the resulting level."""
    try:
        total, level = await service.progress(user_id)
    except DataUnavailable as e:
        raise http_error(e)
    return ProgressResponse(
        user_id=user_id,
        fuel_points=total,
        level=level.level,
        points_into_level=level.points_into_level,
        next_level_points=level.next_level_points,
    )


def _board_entry(e: BoardEntry) -> BoardEntryResponse:
    return BoardEntryResponse(
        boost_id=e.boost_id,
        completed_at=e.completed_at,
        confirmed=e.confirmed,
    )


@app.get("/api/users/{user_id}/board", response_model=BoardResponse)
async def board_endpoint(user_id: str, service: BoostService = Depends(get_service)):
    """
    Today's and this week's boosts as a client board shows them.

    Read failures are reported in the error field rather than as an HTTP
    error, so the client can offer a manual retry.
    """
    board = service.board(user_id)
    try:
        await board.refresh(service.coordinator.clock())
        return BoardResponse(
            user_id=user_id,
            selected=[_board_entry(e) for e in board.selected],
            weekly=[_board_entry(e) for e in board.weekly_entries],
            remaining=board.remaining,
            fuel_points=board.fuel_points_today,
            days_until_reset=board.days_until_reset,
            error=board.error,
        )
    finally:
        board.close()


@app.post(
    "/api/users/{user_id}/boosts/{boost_id}/complete",
    response_model=CompleteBoostResponse,
)
async def complete_endpoint(
    user_id: str,
    boost_id: str,
    service: BoostService = Depends(get_service),
):
    """Complete a boost for today."""
    logger.info(f"Completion request from {user_id}: {boost_id}")
    try:
        result = await service.coordinator.complete(user_id, boost_id)
    except BoostError as e:
        raise http_error(e)

    return CompleteBoostResponse(
        boost_id=result.completion.boost_id,
        category=result.category,
        points_earned=result.points_earned,
        bonus_points=result.bonus_points,
        remaining=result.remaining,
        streak=_streak(result.streak),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
