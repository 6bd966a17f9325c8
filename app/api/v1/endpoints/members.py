from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.db.session import get_db
from app.models.user import UserRole
from app.schemas.user import Member
from app.services.member_directory import member_directory_service

router = APIRouter()


@router.get("", response_model=List[Member])
def get_members(
    role: Optional[UserRole] = None,
    active_only: bool = True,
    search: Optional[str] = Query(None, min_length=1, description="Name or email fragment"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Members

    Read-only directory used to pick attendees and coaches.
    """
    return member_directory_service.list_members(
        db, role=role, active_only=active_only, search=search, skip=skip, limit=limit
    )


@router.get("/coaches", response_model=List[Member])
def get_coaches(
    active_only: bool = True,
    db: Session = Depends(get_db)
) -> Any:
    """
    Get Coaches

    Members with TRAINER or ADMIN role.
    """
    return member_directory_service.list_coaches(db, active_only=active_only)


@router.get("/{member_id}", response_model=Member)
def get_member(
    member_id: int = Path(..., description="ID of the member"),
    db: Session = Depends(get_db)
) -> Any:
    try:
        return member_directory_service.get_member(db, member_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
