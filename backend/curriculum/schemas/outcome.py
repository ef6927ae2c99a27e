from typing import Literal
from pydantic import BaseModel, create_model
from curriculum.schemas.common import NonEmptyStr

KasType = Literal["Knowledge", "Attitude", "Skill"]


class PloCreateIn(BaseModel):
    program_id: int
    code: NonEmptyStr
    description: NonEmptyStr
    sort_order: int | None = 0


class PloPatchIn(BaseModel):
    code: str | None = None
    description: str | None = None
    sort_order: int | None = None


class KasCreateIn(BaseModel):
    program_id: int
    type: KasType
    code: NonEmptyStr
    label: NonEmptyStr
    sort_order: int | None = 0


class KasPatchIn(BaseModel):
    type: KasType | None = None
    code: str | None = None
    label: str | None = None
    sort_order: int | None = None


class MajorGroupCreateIn(BaseModel):
    program_id: int
    label: NonEmptyStr
    major_id: int | None = None
    icon: str | None = None
    sort_order: int | None = 0


class MajorGroupPatchIn(BaseModel):
    major_id: int | None = None
    label: str | None = None
    icon: str | None = None
    sort_order: int | None = None


class MloCreateIn(BaseModel):
    major_group_id: NonEmptyStr
    code: NonEmptyStr
    description: NonEmptyStr
    sort_order: int | None = 0


class MloPatchIn(BaseModel):
    code: str | None = None
    description: str | None = None
    sort_order: int | None = None


class CloCreateIn(BaseModel):
    subject_id: int
    seq: int
    description_th: NonEmptyStr
    description_en: str | None = None


class CloPatchIn(BaseModel):
    seq: int | None = None
    description_th: str | None = None
    description_en: str | None = None


def mapping_bodies(owner_key: str, related_key: str) -> tuple[type[BaseModel], type[BaseModel]]:
    """Request bodies for one outcome relation: replace-all ``{owner, related[]}`` and pair ``{owner, related}``."""
    prefix = "".join(part.capitalize() for part in (owner_key[:-3], related_key[:-3]))
    replace = create_model(
        f"{prefix}ReplaceIn",
        **{owner_key: (NonEmptyStr, ...), f"{related_key}s": (list[NonEmptyStr], ...)},
    )
    pair = create_model(
        f"{prefix}PairIn",
        **{owner_key: (NonEmptyStr, ...), related_key: (NonEmptyStr, ...)},
    )
    return replace, pair
