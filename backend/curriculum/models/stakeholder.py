from datetime import date, datetime
from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from curriculum.models.base import Base, new_uuid, utcnow

LEVELS = ("F", "M", "P")


class Stakeholder(Base):
    __tablename__ = "stakeholders"
    __table_args__ = (UniqueConstraint("program_id", "name_th", name="uq_stakeholder_program_name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    name_th: Mapped[str] = mapped_column(String(255), nullable=False)
    name_en: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class StakeholderSurvey(Base):
    __tablename__ = "stakeholder_surveys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    academic_year: Mapped[int] = mapped_column(Integer, nullable=False)
    survey_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class StakeholderPLOMapping(Base):
    __tablename__ = "stakeholder_plo_mappings"
    __table_args__ = (
        UniqueConstraint("survey_id", "stakeholder_id", "plo_id", name="uq_stakeholder_plo_mapping"),
        CheckConstraint("level IN ('F', 'M', 'P')", name="ck_stakeholder_plo_level"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    survey_id: Mapped[str] = mapped_column(
        ForeignKey("stakeholder_surveys.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stakeholder_id: Mapped[str] = mapped_column(ForeignKey("stakeholders.id", ondelete="CASCADE"), nullable=False)
    plo_id: Mapped[str] = mapped_column(ForeignKey("plos.id", ondelete="CASCADE"), nullable=False)
    level: Mapped[str] = mapped_column(String(1), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
