from app.api.v1.endpoints.schedule.common import *
from app.schemas.reference import ClassTrack, ClassTrackCreate, ClassTrackUpdate
from app.services.reference import class_track_service

router = APIRouter()


@router.get("", response_model=List[ClassTrack])
async def get_tracks(
    active_only: bool = True,
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Get Tracks

    Audience tracks (kids, competition, ...) ordered by sort order and name.
    """
    return await class_track_service.get_all(db, active_only=active_only, redis_client=redis_client)


@router.get("/{track_id}", response_model=ClassTrack)
async def get_track(
    track_id: int = Path(..., description="ID of the track"),
    db: Session = Depends(get_db)
) -> Any:
    try:
        return class_track_service.get(db, track_id)
    except ScheduleError as e:
        raise http_error(e)


@router.post("", response_model=ClassTrack, status_code=status.HTTP_201_CREATED)
async def create_track(
    track_in: ClassTrackCreate = Body(...),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Create ClassTrack
    """
    return await class_track_service.create(db, track_in, redis_client=redis_client)


@router.put("/{track_id}", response_model=ClassTrack)
async def update_track(
    track_id: int = Path(..., description="ID of the track"),
    track_in: ClassTrackUpdate = Body(...),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Update ClassTrack

    Raises:
        HTTPException 404: Track not found.
    """
    try:
        return await class_track_service.update(db, track_id, track_in, redis_client=redis_client)
    except ScheduleError as e:
        raise http_error(e)


@router.delete("/{track_id}", response_model=ClassTrack)
async def delete_track(
    track_id: int = Path(..., description="ID of the track"),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Delete Track (soft)

    The track is deactivated; classes keep their `track_id`.

    Raises:
        HTTPException 404: Track not found.
    """
    try:
        return await class_track_service.delete(db, track_id, redis_client=redis_client)
    except ScheduleError as e:
        raise http_error(e)
