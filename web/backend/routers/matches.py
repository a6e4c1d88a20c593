#!/usr/bin/env python3
"""
Match endpoints - ranked scores for a listing or a student.
"""

import uuid
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from database.uow import Repositories
from ..config import get_config
from ..dependencies import get_repositories
from ..services.match_service import MatchService
from ..models.responses import ListingMatch, StudentMatch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/match-engine/matches", tags=["matches"])


def _effective_limit(limit: Optional[int]) -> int:
    return limit if limit is not None else get_config().web.default_match_limit


@router.get("/listing/{listing_id}", response_model=List[ListingMatch], response_model_by_alias=True)
def get_listing_matches(
    listing_id: uuid.UUID,
    limit: Optional[int] = Query(default=None, ge=1, le=500, description="Maximum results to return"),
    repos: Repositories = Depends(get_repositories),
):
    """
    Students ranked for a listing, highest composite score first.

    Stale scores are returned with ``isStale`` set. Eligible students
    without a score are enqueued for computation and omitted here.
    """
    service = MatchService(repos)
    return service.get_listing_matches(listing_id, _effective_limit(limit))


@router.get("/student/{student_id}", response_model=List[StudentMatch], response_model_by_alias=True)
def get_student_matches(
    student_id: uuid.UUID,
    limit: Optional[int] = Query(default=None, ge=1, le=500, description="Maximum results to return"),
    repos: Repositories = Depends(get_repositories),
):
    """Listings ranked for a student."""
    service = MatchService(repos)
    return service.get_student_matches(student_id, _effective_limit(limit))
