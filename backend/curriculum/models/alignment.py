from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column
from curriculum.models.base import Base, new_uuid


class AlignmentRow(Base):
    __tablename__ = "alignment_rows"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    group_label: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)


alignment_plo_checks = Table(
    "alignment_plo_checks",
    Base.metadata,
    Column("alignment_row_id", ForeignKey("alignment_rows.id", ondelete="CASCADE"), primary_key=True),
    Column("plo_id", ForeignKey("plos.id", ondelete="CASCADE"), primary_key=True),
    Column("checked", Boolean, nullable=False, default=False),
)

alignment_mlo_checks = Table(
    "alignment_mlo_checks",
    Base.metadata,
    Column("alignment_row_id", ForeignKey("alignment_rows.id", ondelete="CASCADE"), primary_key=True),
    Column("mlo_id", ForeignKey("mlos.id", ondelete="CASCADE"), primary_key=True),
    Column("checked", Boolean, nullable=False, default=False),
)
