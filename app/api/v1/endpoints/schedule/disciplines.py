from app.api.v1.endpoints.schedule.common import *
from app.schemas.reference import Discipline, DisciplineCreate, DisciplineUpdate
from app.services.reference import discipline_service

router = APIRouter()


@router.get("", response_model=List[Discipline])
async def get_disciplines(
    active_only: bool = True,
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Get Disciplines

    Disciplines ordered by sort order and name.
    """
    return await discipline_service.get_all(db, active_only=active_only, redis_client=redis_client)


@router.get("/{discipline_id}", response_model=Discipline)
async def get_discipline(
    discipline_id: int = Path(..., description="ID of the discipline"),
    db: Session = Depends(get_db)
) -> Any:
    try:
        return discipline_service.get(db, discipline_id)
    except ScheduleError as e:
        raise http_error(e)


@router.post("", response_model=Discipline, status_code=status.HTTP_201_CREATED)
async def create_discipline(
    discipline_in: DisciplineCreate = Body(...),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Create Discipline

    Raises:
        HTTPException 400: Slug already in use.
    """
    try:
        return await discipline_service.create(db, discipline_in, redis_client=redis_client)
    except ScheduleError as e:
        raise http_error(e)


@router.put("/{discipline_id}", response_model=Discipline)
async def update_discipline(
    discipline_id: int = Path(..., description="ID of the discipline"),
    discipline_in: DisciplineUpdate = Body(...),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Update Discipline

    Raises:
        HTTPException 404: Discipline not found.
    """
    try:
        return await discipline_service.update(db, discipline_id, discipline_in, redis_client=redis_client)
    except ScheduleError as e:
        raise http_error(e)
