from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from assetdb.database import Base


def _utcnow() -> datetime:
    return datetime.utcnow()


class Asset(Base):
    """
    Tracked hardware asset. Components are checked out to these.
    """

    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    asset_tag = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    serial = Column(String(128), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<Asset {self.asset_tag}>"
