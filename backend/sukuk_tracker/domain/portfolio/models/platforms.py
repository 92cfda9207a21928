from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from sukuk_tracker.core.db.base import Base, IdMixin, TimestampMixin


class Platform(Base, IdMixin, TimestampMixin):
    """
    Crowdfunding / Sukuk platform an investment is held on.

    Platforms also partition the cash pool: ledger entries tagged with a
    platform (directly or through their investment) form its balance.
    """

    __tablename__ = "platforms"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)  # sukuk / manfaa / lendo
    logo_url: Mapped[str | None] = mapped_column(String(800), nullable=True)
