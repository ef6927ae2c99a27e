from pydantic import BaseModel
from curriculum.schemas.common import NonEmptyStr


class PloScoreUpsertIn(BaseModel):
    program_id: int
    lo_level: NonEmptyStr
    lo_code: NonEmptyStr
    academic_year: int
    lo_description: str | None = None
    semester_1: float | None = None
    semester_2: float | None = None
    note: str | None = None


class PloScorePatchIn(BaseModel):
    lo_description: str | None = None
    semester_1: float | None = None
    semester_2: float | None = None
    note: str | None = None
