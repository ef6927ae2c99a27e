from datetime import date
from typing import Any
from pydantic import BaseModel
from curriculum.schemas.common import NonEmptyStr


class StakeholderCreateIn(BaseModel):
    program_id: int
    name_th: NonEmptyStr
    name_en: str | None = None
    sort_order: int | None = 0


class StakeholderPatchIn(BaseModel):
    name_th: str | None = None
    name_en: str | None = None
    sort_order: int | None = None


class SurveyCreateIn(BaseModel):
    program_id: int
    title: NonEmptyStr
    academic_year: int
    survey_date: date | None = None
    note: str | None = None


class SurveyPatchIn(BaseModel):
    title: str | None = None
    academic_year: int | None = None
    survey_date: date | None = None
    note: str | None = None


class MappingCell(BaseModel):
    stakeholder_id: str | None = None
    plo_id: str | None = None
    level: str | None = None


class SurveyMappingsIn(BaseModel):
    mappings: list[MappingCell]


class SingleMappingIn(BaseModel):
    stakeholder_id: NonEmptyStr
    plo_id: NonEmptyStr
    level: str | None = None


class SurveyImportIn(BaseModel):
    stakeholders: list[str]
    rows: list[dict[str, Any]]
