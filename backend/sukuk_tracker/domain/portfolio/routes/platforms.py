from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sukuk_tracker.core.db.session import get_db
from sukuk_tracker.domain.portfolio.schemas.platforms import PlatformCreate, PlatformOut
from sukuk_tracker.domain.portfolio.services import platforms as service


router = APIRouter(prefix="/platforms", tags=["Platforms"])


@router.get("", response_model=list[PlatformOut])
def list_platforms(db: Session = Depends(get_db)):
    return service.list_platforms(db)


@router.post("", response_model=PlatformOut, status_code=status.HTTP_201_CREATED)
def create_platform(payload: PlatformCreate, db: Session = Depends(get_db)):
    return service.create_platform(db, payload=payload)


@router.delete("/{platform_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_platform(platform_id: uuid.UUID, db: Session = Depends(get_db)) -> None:
    service.delete_platform(db, platform_id=platform_id)
