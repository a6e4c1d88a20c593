#!/usr/bin/env python3
"""
Schedule endpoints - the caller's schedule entries and weekly availability.
"""

import uuid
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.app_context import AppContext
from database.uow import Repositories
from ..dependencies import get_context, get_current_student_id, get_repositories
from ..services.schedule_service import ScheduleService
from ..models.requests import ScheduleCreate
from ..models.responses import (
    AvailabilityWindowOut,
    DeleteResponse,
    ScheduleOut,
    SportSeasonOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/match-engine", tags=["schedules"])


def get_schedule_service(
    repos: Repositories = Depends(get_repositories),
    context: AppContext = Depends(get_context),
) -> ScheduleService:
    return ScheduleService(repos, context.tracker, context.engine)


@router.get("/schedules", response_model=List[ScheduleOut], response_model_by_alias=True)
def list_schedules(
    student_id: uuid.UUID = Depends(get_current_student_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.list_schedules(student_id)


@router.post("/schedules", response_model=ScheduleOut, response_model_by_alias=True, status_code=201)
def create_schedule(
    payload: ScheduleCreate,
    student_id: uuid.UUID = Depends(get_current_student_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    """
    Add a schedule entry for the calling student.

    The student's existing scores are marked stale and recomputation is
    enqueued before the response is returned.
    """
    return service.create_schedule(student_id, payload)


# Declared before /schedules/{schedule_id} routes so "availability" is not parsed as an id
@router.get(
    "/schedules/availability",
    response_model=List[AvailabilityWindowOut],
    response_model_by_alias=True,
)
def get_availability(
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    student_id: uuid.UUID = Depends(get_current_student_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    """
    Weekly availability projection for the calling student.

    Defaults to today through six months out. Weeks start on Monday.
    """
    return service.get_availability(student_id, start_date, end_date)


@router.delete("/schedules/{schedule_id}", response_model=DeleteResponse)
def delete_schedule(
    schedule_id: uuid.UUID,
    student_id: uuid.UUID = Depends(get_current_student_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    service.delete_schedule(student_id, schedule_id)
    return DeleteResponse(success=True, message=f"Schedule {schedule_id} deleted")


@router.get("/sport-seasons", response_model=List[SportSeasonOut], response_model_by_alias=True)
def list_sport_seasons(service: ScheduleService = Depends(get_schedule_service)):
    """Sport season catalog."""
    return service.list_sport_seasons()
