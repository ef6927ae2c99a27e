from typing import Literal
from pydantic import BaseModel
from curriculum.schemas.common import NonEmptyStr

PlanStatus = Literal["draft", "active", "archived"]


class CourseCreateIn(BaseModel):
    name_th: NonEmptyStr
    code: str | None = None
    name_en: str | None = None


class CoursePatchIn(BaseModel):
    code: str | None = None
    name_th: str | None = None
    name_en: str | None = None


class ProgramCreateIn(BaseModel):
    code: NonEmptyStr
    name_th: NonEmptyStr
    course_id: int | None = None
    name_en: str | None = None
    year: int | None = None


class ProgramPatchIn(BaseModel):
    course_id: int | None = None
    code: str | None = None
    name_th: str | None = None
    name_en: str | None = None
    year: int | None = None


class MajorCreateIn(BaseModel):
    course_id: int
    name_th: NonEmptyStr
    name_en: str | None = None
    description_th: str | None = None
    description_en: str | None = None
    plan_slots: int | None = 0
    sort_order: int | None = 0


class MajorPatchIn(BaseModel):
    name_th: str | None = None
    name_en: str | None = None
    description_th: str | None = None
    description_en: str | None = None
    plan_slots: int | None = None
    sort_order: int | None = None


class StudyPlanCreateIn(BaseModel):
    course_id: int | None = None
    major_id: int | None = None
    academic_year: int
    year_no: int
    name: str | None = None
    status: PlanStatus | None = "draft"


class StudyPlanPatchIn(BaseModel):
    name: str | None = None
    academic_year: int | None = None
    year_no: int | None = None
    status: PlanStatus | None = None


class SemesterCreateIn(BaseModel):
    study_plan_id: int
    term_no: int
    sort_order: int | None = 0


class SemesterPatchIn(BaseModel):
    term_no: int | None = None
    sort_order: int | None = None


class SubjectCreateIn(BaseModel):
    code: NonEmptyStr
    name_th: NonEmptyStr
    name_en: str | None = None
    default_credits: int | None = 0
    default_hour_structure: str | None = None
    description_th: str | None = None
    description_en: str | None = None
    outcomes_th: str | None = None
    outcomes_en: str | None = None


class SubjectPatchIn(BaseModel):
    code: str | None = None
    name_th: str | None = None
    name_en: str | None = None
    default_credits: int | None = None
    default_hour_structure: str | None = None
    description_th: str | None = None
    description_en: str | None = None
    outcomes_th: str | None = None
    outcomes_en: str | None = None


class SemesterSubjectCreateIn(BaseModel):
    semester_id: int
    subject_id: int
    category: str | None = None
    credits: int | None = None
    hour_structure: str | None = None
    sort_order: int | None = 0


class SemesterSubjectPatchIn(BaseModel):
    semester_id: int | None = None
    category: str | None = None
    credits: int | None = None
    hour_structure: str | None = None
    sort_order: int | None = None
