import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import apply_patch, atomic, get_or_404, serialize
from curriculum.core.response import ok, created
from curriculum.models.outcome import PLO
from curriculum.models.stakeholder import LEVELS, Stakeholder, StakeholderPLOMapping, StakeholderSurvey
from curriculum.schemas.stakeholder import (
    SingleMappingIn,
    StakeholderCreateIn,
    StakeholderPatchIn,
    SurveyCreateIn,
    SurveyImportIn,
    SurveyMappingsIn,
    SurveyPatchIn,
)
from curriculum.services.mapping import import_survey_matrix, replace_survey_mappings, upsert_or_delete_level

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["stakeholders"])

STAKEHOLDER_CONFLICT = "Stakeholder name already exists in this program"


# stakeholders

@router.get("/programs/{program_id}/stakeholders")
def list_stakeholders(program_id: int, request: Request, db: Session = Depends(get_db)):
    rows = (
        db.query(Stakeholder)
        .filter(Stakeholder.program_id == program_id, Stakeholder.is_active == True)  # noqa: E712
        .order_by(Stakeholder.sort_order.asc(), Stakeholder.name_th.asc())
        .all()
    )
    return ok(request, [serialize(s) for s in rows])


@router.post("/stakeholders")
def create_stakeholder(payload: StakeholderCreateIn, request: Request, db: Session = Depends(get_db)):
    s = Stakeholder(
        program_id=payload.program_id,
        name_th=payload.name_th,
        name_en=payload.name_en,
        sort_order=payload.sort_order or 0,
        is_active=True,
    )
    with atomic(db, STAKEHOLDER_CONFLICT):
        db.add(s)
    return created(request, serialize(s))


@router.put("/stakeholders/{stakeholder_id}")
def update_stakeholder(stakeholder_id: str, payload: StakeholderPatchIn, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, Stakeholder, stakeholder_id, "Stakeholder")
    with atomic(db, STAKEHOLDER_CONFLICT):
        apply_patch(s, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(s))


@router.delete("/stakeholders/{stakeholder_id}")
def delete_stakeholder(stakeholder_id: str, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, Stakeholder, stakeholder_id, "Stakeholder")
    # soft delete; survey cells stay attached
    with atomic(db):
        s.is_active = False
    logger.info("Stakeholder %s deactivated", stakeholder_id)
    return ok(request, {"id": stakeholder_id, "is_active": False})


# surveys

@router.get("/surveys")
def list_surveys(
    request: Request,
    db: Session = Depends(get_db),
    program_id: int | None = None,
    year: int | None = None,
):
    q = db.query(StakeholderSurvey)
    if program_id:
        q = q.filter(StakeholderSurvey.program_id == program_id)
    if year:
        q = q.filter(StakeholderSurvey.academic_year == year)
    rows = q.order_by(StakeholderSurvey.academic_year.desc(), StakeholderSurvey.created_at.desc()).all()
    return ok(request, [serialize(s) for s in rows])


@router.post("/surveys")
def create_survey(payload: SurveyCreateIn, request: Request, db: Session = Depends(get_db)):
    survey = StakeholderSurvey(**payload.model_dump())
    with atomic(db):
        db.add(survey)
    return created(request, serialize(survey))


@router.put("/surveys/{survey_id}")
def update_survey(survey_id: str, payload: SurveyPatchIn, request: Request, db: Session = Depends(get_db)):
    survey = get_or_404(db, StakeholderSurvey, survey_id, "Survey")
    with atomic(db):
        apply_patch(survey, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(survey))


@router.delete("/surveys/{survey_id}")
def delete_survey(survey_id: str, request: Request, db: Session = Depends(get_db)):
    survey = get_or_404(db, StakeholderSurvey, survey_id, "Survey")
    with atomic(db):
        db.delete(survey)
    return ok(request, {"id": survey_id})


@router.get("/surveys/{survey_id}/matrix")
def survey_matrix(survey_id: str, request: Request, db: Session = Depends(get_db)):
    get_or_404(db, StakeholderSurvey, survey_id, "Survey")
    rows = (
        db.query(StakeholderPLOMapping, Stakeholder.name_th, PLO.code)
        .join(Stakeholder, Stakeholder.id == StakeholderPLOMapping.stakeholder_id)
        .join(PLO, PLO.id == StakeholderPLOMapping.plo_id)
        .filter(StakeholderPLOMapping.survey_id == survey_id)
        .order_by(PLO.code.asc(), Stakeholder.sort_order.asc(), Stakeholder.name_th.asc())
        .all()
    )
    data = [
        {
            "stakeholder_id": m.stakeholder_id,
            "stakeholder_name_th": name,
            "plo_id": m.plo_id,
            "plo_code": code,
            "level": m.level,
        }
        for m, name, code in rows
    ]
    return ok(request, data)


@router.post("/surveys/{survey_id}/mappings")
def replace_mappings(survey_id: str, payload: SurveyMappingsIn, request: Request, db: Session = Depends(get_db)):
    count = replace_survey_mappings(db, survey_id, [m.model_dump() for m in payload.mappings])
    return ok(request, {"message": "Survey mappings saved", "count": count})


@router.put("/surveys/{survey_id}/mappings/single")
def set_single_mapping(survey_id: str, payload: SingleMappingIn, request: Request, db: Session = Depends(get_db)):
    level = upsert_or_delete_level(db, survey_id, payload.stakeholder_id, payload.plo_id, payload.level)
    return ok(
        request,
        {"survey_id": survey_id, "stakeholder_id": payload.stakeholder_id, "plo_id": payload.plo_id, "level": level},
    )


@router.get("/surveys/{survey_id}/summary")
def survey_summary(survey_id: str, request: Request, db: Session = Depends(get_db)):
    """F/M/P counts per PLO of the survey's program; PLOs without cells report zeros."""
    survey = get_or_404(db, StakeholderSurvey, survey_id, "Survey")
    plos = (
        db.query(PLO)
        .filter(PLO.program_id == survey.program_id)
        .order_by(PLO.sort_order.asc(), PLO.code.asc())
        .all()
    )
    counts = (
        db.query(StakeholderPLOMapping.plo_id, StakeholderPLOMapping.level, func.count())
        .filter(StakeholderPLOMapping.survey_id == survey_id)
        .group_by(StakeholderPLOMapping.plo_id, StakeholderPLOMapping.level)
        .all()
    )
    by_plo: dict[str, dict[str, int]] = {}
    for plo_id, level, n in counts:
        by_plo.setdefault(plo_id, {})[level] = n

    data = []
    for p in plos:
        levels = {lv: by_plo.get(p.id, {}).get(lv, 0) for lv in LEVELS}
        data.append({"plo_id": p.id, "plo_code": p.code, **levels, "total": sum(levels.values())})
    return ok(request, data)


@router.post("/surveys/{survey_id}/import-excel")
def import_excel(survey_id: str, payload: SurveyImportIn, request: Request, db: Session = Depends(get_db)):
    count = import_survey_matrix(db, survey_id, payload.stakeholders, payload.rows)
    return ok(request, {"message": f"Imported {count} mappings", "count": count})
