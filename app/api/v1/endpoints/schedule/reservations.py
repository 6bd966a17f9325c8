from app.api.v1.endpoints.schedule.common import *
from app.schemas.reservation import Reservation, ReservationCreate, OccurrenceReservations
from app.services.reservation import reservation_service

router = APIRouter()


@router.post("", response_model=Reservation, status_code=status.HTTP_201_CREATED)
def create_reservation(
    reservation_in: ReservationCreate = Body(...),
    db: Session = Depends(get_db)
) -> Any:
    """
    Create Reservation

    Books a spot for a member in one occurrence (class, date). Capacity and
    duplicate checks are performed atomically in the database.

    Raises:
        HTTPException 404: Class or member not found, or the class has no occurrence on that date.
        HTTPException 409: Class is full or the member already holds a reservation.
    """
    try:
        return reservation_service.create_reservation(
            db,
            member_id=reservation_in.member_id,
            class_id=reservation_in.class_id,
            reservation_date=reservation_in.reservation_date,
        )
    except ScheduleError as e:
        raise http_error(e)


@router.post("/{reservation_id}/cancel", response_model=Reservation)
def cancel_reservation(
    reservation_id: int = Path(..., description="ID of the reservation"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Cancel Reservation

    Idempotent: cancelling an already cancelled reservation returns it unchanged.

    Raises:
        HTTPException 404: Reservation not found.
        HTTPException 409: Reservation already checked in.
    """
    try:
        return reservation_service.cancel_reservation(db, reservation_id)
    except ScheduleError as e:
        raise http_error(e)


@router.post("/{reservation_id}/check-in", response_model=Reservation)
def check_in_reservation(
    reservation_id: int = Path(..., description="ID of the reservation"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Check In

    Idempotent: checking in twice returns the reservation unchanged.

    Raises:
        HTTPException 404: Reservation not found.
        HTTPException 409: Reservation already cancelled.
    """
    try:
        return reservation_service.check_in(db, reservation_id)
    except ScheduleError as e:
        raise http_error(e)


@router.get("/occurrence", response_model=OccurrenceReservations)
def get_occurrence_reservations(
    class_id: int = Query(..., description="ID of the class template"),
    reservation_date: date = Query(..., alias="date", description="Occurrence date"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Occurrence Attendees

    Lists non-cancelled reservations of one occurrence with member names and
    remaining spots.

    Raises:
        HTTPException 404: Class not found.
    """
    try:
        return reservation_service.get_occurrence_reservations(
            db, class_id=class_id, reservation_date=reservation_date
        )
    except ScheduleError as e:
        raise http_error(e)


@router.get("/member/{member_id}", response_model=List[Reservation])
def get_member_reservations(
    member_id: int = Path(..., description="ID of the member"),
    on_date: Optional[date] = Query(None, alias="date", description="Only reservations on this date"),
    include_cancelled: bool = True,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Member Reservations

    Returns the member's reservations ordered by date.

    Raises:
        HTTPException 404: Member not found.
    """
    try:
        return reservation_service.get_member_reservations(
            db,
            member_id=member_id,
            on_date=on_date,
            include_cancelled=include_cancelled,
            skip=skip,
            limit=limit,
        )
    except ScheduleError as e:
        raise http_error(e)
