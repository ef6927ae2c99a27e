from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from curriculum.models.base import Base, new_uuid, utcnow

KAS_TYPES = ("Knowledge", "Attitude", "Skill")


class MajorGroup(Base):
    __tablename__ = "major_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    major_id: Mapped[int | None] = mapped_column(ForeignKey("majors.id", ondelete="SET NULL"), nullable=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)


class PLO(Base):
    __tablename__ = "plos"
    __table_args__ = (UniqueConstraint("program_id", "code", name="uq_plo_program_code"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class MLO(Base):
    __tablename__ = "mlos"
    __table_args__ = (UniqueConstraint("major_group_id", "code", name="uq_mlo_group_code"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    major_group_id: Mapped[str] = mapped_column(
        ForeignKey("major_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CLO(Base):
    __tablename__ = "clos"
    __table_args__ = (UniqueConstraint("subject_id", "seq", name="uq_clo_subject_seq"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    description_th: Mapped[str] = mapped_column(Text, nullable=False)
    description_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class KASItem(Base):
    __tablename__ = "kas_items"
    __table_args__ = (UniqueConstraint("program_id", "code", name="uq_kas_program_code"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    label: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)


def _pair_table(name: str, owner: tuple[str, str], related: tuple[str, str]) -> Table:
    return Table(
        name,
        Base.metadata,
        Column(owner[0], ForeignKey(owner[1], ondelete="CASCADE"), primary_key=True),
        Column(related[0], ForeignKey(related[1], ondelete="CASCADE"), primary_key=True),
    )


plo_kas = _pair_table("plo_kas", ("plo_id", "plos.id"), ("kas_id", "kas_items.id"))
mlo_kas = _pair_table("mlo_kas", ("mlo_id", "mlos.id"), ("kas_id", "kas_items.id"))
clo_kas = _pair_table("clo_kas", ("clo_id", "clos.id"), ("kas_id", "kas_items.id"))
clo_plo = _pair_table("clo_plo", ("clo_id", "clos.id"), ("plo_id", "plos.id"))
clo_mlo = _pair_table("clo_mlo", ("clo_id", "clos.id"), ("mlo_id", "mlos.id"))
