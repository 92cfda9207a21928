from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sukuk_tracker.core.logging import get_logger
from sukuk_tracker.domain.portfolio.models.investments import Investment
from sukuk_tracker.domain.portfolio.models.platforms import Platform
from sukuk_tracker.domain.portfolio.schemas.platforms import PlatformCreate
from sukuk_tracker.shared.exceptions import Conflict, NotFound

logger = get_logger(__name__)


def list_platforms(db: Session) -> list[Platform]:
    return list(db.execute(select(Platform).order_by(Platform.name.asc())).scalars().all())


def create_platform(db: Session, *, payload: PlatformCreate) -> Platform:
    platform = Platform(name=payload.name, type=payload.type, logo_url=payload.logo_url)
    db.add(platform)
    db.commit()
    db.refresh(platform)
    logger.info("platform.created", platform_id=str(platform.id), name=platform.name)
    return platform


def delete_platform(db: Session, *, platform_id: uuid.UUID) -> None:
    platform = db.get(Platform, platform_id)
    if platform is None:
        raise NotFound("Platform not found")

    investment_count = db.execute(
        select(func.count()).select_from(Investment).where(Investment.platform_id == platform_id)
    ).scalar_one()
    if investment_count:
        raise Conflict(f"Platform still holds {investment_count} investment(s)")

    db.delete(platform)
    db.commit()
    logger.info("platform.deleted", platform_id=str(platform_id))
