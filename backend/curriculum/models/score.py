from datetime import datetime
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from curriculum.models.base import Base, new_uuid, utcnow


class PLOScore(Base):
    __tablename__ = "plo_scores"
    __table_args__ = (UniqueConstraint("program_id", "lo_code", "academic_year", name="uq_plo_score_key"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    lo_level: Mapped[str] = mapped_column(String(20), nullable=False)
    lo_code: Mapped[str] = mapped_column(String(50), nullable=False)
    lo_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    academic_year: Mapped[int] = mapped_column(Integer, nullable=False)
    semester_1: Mapped[float | None] = mapped_column(Float, nullable=True)
    semester_2: Mapped[float | None] = mapped_column(Float, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
