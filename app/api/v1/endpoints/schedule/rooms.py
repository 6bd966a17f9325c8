from app.api.v1.endpoints.schedule.common import *
from app.schemas.reference import Room, RoomCreate, RoomUpdate
from app.services.reference import room_service

router = APIRouter()


@router.get("", response_model=List[Room])
async def get_rooms(
    active_only: bool = True,
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Get Rooms

    Rooms ordered by sort order and name; each one is a column of the grid.
    """
    return await room_service.get_all(db, active_only=active_only, redis_client=redis_client)


@router.get("/{room_id}", response_model=Room)
async def get_room(
    room_id: int = Path(..., description="ID of the room"),
    db: Session = Depends(get_db)
) -> Any:
    try:
        return room_service.get(db, room_id)
    except ScheduleError as e:
        raise http_error(e)


@router.post("", response_model=Room, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_in: RoomCreate = Body(...),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Create Room
    """
    return await room_service.create(db, room_in, redis_client=redis_client)


@router.put("/{room_id}", response_model=Room)
async def update_room(
    room_id: int = Path(..., description="ID of the room"),
    room_in: RoomUpdate = Body(...),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Update Room

    Raises:
        HTTPException 404: Room not found.
    """
    try:
        return await room_service.update(db, room_id, room_in, redis_client=redis_client)
    except ScheduleError as e:
        raise http_error(e)


@router.delete("/{room_id}", response_model=Room)
async def delete_room(
    room_id: int = Path(..., description="ID of the room"),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Delete Room (soft)

    The room is deactivated; classes assigned to it keep their `room_id` and are
    shown as unassigned in the grid.

    Raises:
        HTTPException 404: Room not found.
    """
    try:
        return await room_service.delete(db, room_id, redis_client=redis_client)
    except ScheduleError as e:
        raise http_error(e)
