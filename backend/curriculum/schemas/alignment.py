from pydantic import BaseModel
from curriculum.schemas.common import NonEmptyStr


class AlignmentRowCreateIn(BaseModel):
    program_id: int
    group_label: NonEmptyStr
    title: NonEmptyStr
    description: str | None = None
    sort_order: int | None = 0


class AlignmentRowPatchIn(BaseModel):
    group_label: str | None = None
    title: str | None = None
    description: str | None = None
    sort_order: int | None = None


class PloCheckIn(BaseModel):
    plo_id: NonEmptyStr
    checked: bool


class MloCheckIn(BaseModel):
    mlo_id: NonEmptyStr
    checked: bool
