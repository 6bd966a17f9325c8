from app.api.v1.endpoints.schedule.common import *
from app.schemas.grid import ScheduleGrid
from app.services.schedule_grid import schedule_grid_service

router = APIRouter()


@router.get("", response_model=ScheduleGrid)
def get_schedule_grid(
    view_mode: str = Query("week", description="day | week | month"),
    anchor: Optional[date] = Query(None, description="Date used to compute the default range (defaults to today)"),
    start_date: Optional[date] = Query(None, description="Explicit range start (requires end_date)"),
    end_date: Optional[date] = Query(None, description="Explicit range end (requires start_date)"),
    room_id: Optional[int] = Query(None, description="Only show classes in this room"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Schedule Grid

    Builds the day, week or month grid from the active class templates. Day and
    week views return one cell per room per day (classes without a room are
    listed under `unassigned` on the first room's cell); month view returns one
    cell per day capped to a few classes with an `overflow_count`.

    Week ranges run Monday to Sunday around `anchor`.

    Returns:
        ScheduleGrid: Days with their cells and occurrences, including reservation counts.

    Raises:
        HTTPException 400: Unknown view mode, inverted or oversized range.
    """
    try:
        grid = schedule_grid_service.get_grid(
            db,
            view_mode=view_mode,
            anchor=anchor,
            start_date=start_date,
            end_date=end_date,
            room_id=room_id,
        )
    except ScheduleError as e:
        raise http_error(e)
    return ScheduleGrid.model_validate(grid)
