from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import apply_patch, atomic, dialect_insert, get_or_404, serialize
from curriculum.core.response import ok
from curriculum.models.base import new_uuid, utcnow
from curriculum.models.score import PLOScore
from curriculum.schemas.score import PloScorePatchIn, PloScoreUpsertIn

router = APIRouter(prefix="/api", tags=["scores"])


def _average(*values):
    present = [v for v in values if v is not None]
    if not present:
        return None
    return round(sum(present) / len(present), 2)


@router.get("/programs/{program_id}/plo-scores")
def list_plo_scores(
    program_id: int,
    request: Request,
    db: Session = Depends(get_db),
    year: int | None = None,
    lo_level: str | None = None,
):
    q = db.query(PLOScore).filter(PLOScore.program_id == program_id)
    if year:
        q = q.filter(PLOScore.academic_year == year)
    if lo_level:
        q = q.filter(PLOScore.lo_level == lo_level)
    rows = q.order_by(PLOScore.academic_year.desc(), PLOScore.lo_level.asc(), PLOScore.lo_code.asc()).all()
    return ok(request, [serialize(s) for s in rows])


@router.get("/programs/{program_id}/plo-score-summary")
def plo_score_summary(program_id: int, request: Request, db: Session = Depends(get_db), year: int | None = None):
    q = db.query(PLOScore).filter(PLOScore.program_id == program_id)
    if year:
        q = q.filter(PLOScore.academic_year == year)
    rows = q.order_by(PLOScore.academic_year.desc(), PLOScore.lo_level.asc(), PLOScore.lo_code.asc()).all()
    data = [
        {
            "lo_level": s.lo_level,
            "lo_code": s.lo_code,
            "academic_year": s.academic_year,
            "semester_1": s.semester_1,
            "semester_2": s.semester_2,
            "average": _average(s.semester_1, s.semester_2),
        }
        for s in rows
    ]
    return ok(request, data)


@router.post("/plo-scores")
def upsert_plo_score(payload: PloScoreUpsertIn, request: Request, db: Session = Depends(get_db)):
    """Insert, or overwrite the score already stored for (program, lo_code, academic_year)."""
    now = utcnow()
    values = payload.model_dump()
    stmt = dialect_insert(db, PLOScore.__table__).values(
        {**values, "id": new_uuid(), "created_at": now, "updated_at": now}
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["program_id", "lo_code", "academic_year"],
        set_={
            "lo_level": stmt.excluded.lo_level,
            "lo_description": stmt.excluded.lo_description,
            "semester_1": stmt.excluded.semester_1,
            "semester_2": stmt.excluded.semester_2,
            "note": stmt.excluded.note,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    with atomic(db):
        db.execute(stmt)
    score = db.execute(
        select(PLOScore).where(
            PLOScore.program_id == payload.program_id,
            PLOScore.lo_code == payload.lo_code,
            PLOScore.academic_year == payload.academic_year,
        ).execution_options(populate_existing=True)
    ).scalar_one()
    return ok(request, serialize(score))


@router.put("/plo-scores/{score_id}")
def update_plo_score(score_id: str, payload: PloScorePatchIn, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, PLOScore, score_id, "PLO score")
    with atomic(db):
        apply_patch(s, payload.model_dump(exclude_unset=True))
        s.updated_at = utcnow()
    return ok(request, serialize(s))


@router.delete("/plo-scores/{score_id}")
def delete_plo_score(score_id: str, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, PLOScore, score_id, "PLO score")
    with atomic(db):
        db.delete(s)
    return ok(request, {"id": score_id})
