from datetime import date, timedelta

from app.api.v1.endpoints.schedule.common import *
from app.core.timezone_utils import get_today_in_gym_timezone
from app.services.occurrence import occurrence_dates
from app.services.schedule import class_template_service
from app.schemas.schedule import (
    ClassTemplateCreate,
    ClassTemplateUpdate,
    ClassReassign,
    ReassignmentResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    OccurrenceDates,
)

router = APIRouter()


@router.get("", response_model=List[ClassTemplate])
def get_classes(
    active_only: bool = True,
    day_of_week: Optional[int] = Query(None, ge=0, le=6, description="0 = Sunday ... 6 = Saturday"),
    room_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Class Templates

    Retrieves class templates ordered by start time (then id).

    Args:
        active_only (bool, optional): Only return non-deleted templates. Defaults to True.
        day_of_week (int, optional): Filter by weekday (0 = Sunday).
        room_id (int, optional): Filter by room.
        skip (int, optional): Number of records to skip for pagination.
        limit (int, optional): Maximum number of records to return.

    Returns:
        List[ClassTemplate]: Templates with their occurrence estimate.
    """
    templates = class_template_service.list_templates(
        db,
        active_only=active_only,
        day_of_week=day_of_week,
        room_id=room_id,
        skip=skip,
        limit=limit,
    )
    return [template_response(t) for t in templates]


@router.post("", response_model=ClassTemplate, status_code=status.HTTP_201_CREATED)
def create_class(
    template_in: ClassTemplateCreate = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Create Class Template

    Creates a recurring or one-time class. When `start_date` is omitted the first
    date on or after today (gym timezone) matching `day_of_week` is used.

    Returns:
        ClassTemplate: The newly created template.

    Raises:
        HTTPException 400: Invalid time or date range, or coach without trainer role.
        HTTPException 404: Discipline, room, track or coach not found.
        HTTPException 422: Payload validation error.
    """
    try:
        template = class_template_service.create_template(db, template_in)
    except ScheduleError as e:
        raise http_error(e)
    return template_response(template)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_classes(
    request: BulkDeleteRequest = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Bulk Delete Class Templates

    Permanently deletes the selected templates together with their reservations.
    Unlike `DELETE /classes/{id}` this is a hard delete. Unknown ids are ignored.

    Returns:
        BulkDeleteResponse: Number of deleted templates.
    """
    deleted = class_template_service.bulk_delete(db, request.template_ids)
    return BulkDeleteResponse(deleted_count=deleted)


@router.get("/{class_id}", response_model=ClassTemplate)
def get_class(
    class_id: int = Path(..., description="ID of the class template"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Class Template

    Soft-deleted templates are still returned (with `is_active = false`).

    Raises:
        HTTPException 404: Template not found.
    """
    try:
        template = class_template_service.get_template(db, class_id)
    except ScheduleError as e:
        raise http_error(e)
    return template_response(template)


@router.put("/{class_id}", response_model=ClassTemplate)
def update_class(
    class_id: int = Path(..., description="ID of the class template"),
    template_in: ClassTemplateUpdate = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Update Class Template

    Partial update. Times and the recurrence window are validated against the
    resulting values.

    Raises:
        HTTPException 400: Resulting start/end times or dates are inconsistent.
        HTTPException 404: Template or referenced row not found.
    """
    try:
        template = class_template_service.update_template(db, class_id, template_in)
    except ScheduleError as e:
        raise http_error(e)
    return template_response(template)


@router.delete("/{class_id}", response_model=ClassTemplate)
def delete_class(
    class_id: int = Path(..., description="ID of the class template"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Delete Class Template (soft)

    Sets `is_active = false`; the template stops producing occurrences but can
    still be retrieved by id.

    Raises:
        HTTPException 404: Template not found.
    """
    try:
        template = class_template_service.delete_template(db, class_id)
    except ScheduleError as e:
        raise http_error(e)
    return template_response(template)


@router.patch("/{class_id}/reassign", response_model=ReassignmentResponse)
def reassign_class(
    class_id: int = Path(..., description="ID of the class template"),
    move: ClassReassign = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Reassign Class (drag and drop)

    Moves the template to another weekday and/or room. The change applies to
    every past and future occurrence. The response includes the impact computed
    before the write so the client can warn about retroactive effects.

    Raises:
        HTTPException 400: day_of_week outside 0..6.
        HTTPException 404: Template or room not found; the client should refresh its grid.
    """
    try:
        template, impact = class_template_service.reassign_with_impact(
            db, class_id, move.day_of_week, move.room_id
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{e}. Recarga el horario: los datos mostrados están desactualizados",
        )
    except ScheduleError as e:
        raise http_error(e)
    return ReassignmentResponse(template=template_response(template), impact=impact)


@router.get("/{class_id}/occurrences", response_model=OccurrenceDates)
def get_class_occurrences(
    class_id: int = Path(..., description="ID of the class template"),
    start_date: Optional[date] = Query(None, description="Defaults to today (gym timezone)"),
    end_date: Optional[date] = Query(None, description="Defaults to start_date + 90 days"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Occurrence Dates

    Lists the dates in the range on which the template produces an occurrence.

    Raises:
        HTTPException 400: start_date after end_date.
        HTTPException 404: Template not found.
    """
    start_date = start_date or get_today_in_gym_timezone()
    end_date = end_date or start_date + timedelta(days=min(90, (date.max - start_date).days))
    try:
        template = class_template_service.get_template(db, class_id)
        dates = occurrence_dates(template, start_date, end_date)
    except ScheduleError as e:
        raise http_error(e)
    return OccurrenceDates(
        class_id=class_id,
        start_date=start_date,
        end_date=end_date,
        dates=dates,
        count=len(dates),
    )
