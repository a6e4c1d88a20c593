#!/usr/bin/env python3
"""
Admin endpoints - score cache statistics, recompute trigger and change
notifications from the subsystems that own students and listings.
"""

import uuid
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.app_context import AppContext
from database.uow import Repositories
from ..config import get_config
from ..dependencies import get_context, get_repositories
from ..services.change_service import ChangeNotificationService
from ..models.responses import (
    ChangeNotificationResponse,
    EngineConfigResponse,
    QueueStats,
    RecomputeResponse,
    ScoreStats,
    StatsResponse,
)

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/match-engine/admin", tags=["admin"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": str(exc)}
    )


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    tenant_id: Optional[uuid.UUID] = Query(default=None, description="Restrict to one tenant"),
    repos: Repositories = Depends(get_repositories),
    context: AppContext = Depends(get_context),
):
    """
    Score cache and recompute queue statistics.

    Queue ``pending`` includes items currently claimed by a worker;
    ``processed`` counts completed recomputes.
    """
    stats = context.recompute_service.get_stats(repos, tenant_id)
    return StatsResponse(
        scores=ScoreStats(**stats['scores']),
        queue=QueueStats(**stats['queue']),
    )


@router.post("/recompute", response_model=RecomputeResponse, response_model_by_alias=True)
@limiter.limit(get_config().web.recompute_rate_limit)
def trigger_recompute(
    request: Request,
    tenant_id: Optional[uuid.UUID] = Query(default=None, description="Restrict to one tenant"),
    repos: Repositories = Depends(get_repositories),
    context: AppContext = Depends(get_context),
):
    """
    Enqueue every stale score for recomputation.

    Scores past their TTL are flagged stale first. Returns immediately;
    the worker drains the queue in the background.
    """
    count = context.recompute_service.recompute_all(repos, tenant_id=tenant_id)
    repos.session.commit()
    logger.info(f"Manual recompute requested (tenant={tenant_id or 'all'}): {count} stale")
    return RecomputeResponse(scores_marked_stale=count)


@router.get("/config", response_model=EngineConfigResponse, response_model_by_alias=True)
def get_engine_config(context: AppContext = Depends(get_context)):
    """Active signal weights and scoring thresholds."""
    scoring = context.config.scoring
    availability = context.config.availability
    return EngineConfigResponse(
        weights_version=scoring.weights.version,
        signal_weights=scoring.weights.as_dict(),
        weights_fingerprint=scoring.weights.fingerprint(),
        ttl_hours=scoring.ttl_hours,
        neutral_score=scoring.neutral_score,
        base_weekly_capacity=availability.base_weekly_capacity,
        low_threshold=availability.low_threshold,
        high_threshold=availability.high_threshold,
    )


def get_change_service(
    repos: Repositories = Depends(get_repositories),
    context: AppContext = Depends(get_context),
) -> ChangeNotificationService:
    return ChangeNotificationService(repos, context.tracker)


@router.post("/notify/student/{student_id}", response_model=ChangeNotificationResponse)
def notify_student_changed(
    student_id: uuid.UUID,
    service: ChangeNotificationService = Depends(get_change_service),
):
    """A student's skills, interests or engagements changed: rescore their candidates."""
    return service.student_changed(student_id)


@router.delete("/notify/student/{student_id}", response_model=ChangeNotificationResponse)
def notify_student_deleted(
    student_id: uuid.UUID,
    service: ChangeNotificationService = Depends(get_change_service),
):
    """A student was deleted: cancel their pending recomputes."""
    return service.student_deleted(student_id)


@router.post("/notify/listing/{listing_id}", response_model=ChangeNotificationResponse)
def notify_listing_changed(
    listing_id: uuid.UUID,
    service: ChangeNotificationService = Depends(get_change_service),
):
    """A listing's requirements changed: rescore its candidate students."""
    return service.listing_changed(listing_id)


@router.delete("/notify/listing/{listing_id}", response_model=ChangeNotificationResponse)
def notify_listing_deleted(
    listing_id: uuid.UUID,
    service: ChangeNotificationService = Depends(get_change_service),
):
    """A listing was deleted: cancel its pending recomputes."""
    return service.listing_deleted(listing_id)
