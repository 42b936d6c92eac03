"""SQLAlchemy ORM model for the votes table.

Table is created by Alembic migration: alembic/versions/005_create_votes.py
No updated_at: votes are append-only.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, DateTime, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.pm_common.database import Base


class VoteORM(Base):
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("user_id", "market_id", name="uq_votes_user_market"),)

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    market_id: Mapped[str] = mapped_column(String(64), nullable=False)
    stance: Mapped[bool] = mapped_column(Boolean, nullable=False)
    points_staked: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
