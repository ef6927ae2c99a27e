from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import apply_patch, atomic, get_or_404, serialize
from curriculum.core.response import ok, created
from curriculum.models.alignment import AlignmentRow
from curriculum.schemas.alignment import AlignmentRowCreateIn, AlignmentRowPatchIn, MloCheckIn, PloCheckIn
from curriculum.services.mapping import ALIGNMENT_MLO, ALIGNMENT_PLO, checks_for_rows, set_check

router = APIRouter(prefix="/api", tags=["alignment"])


@router.get("/programs/{program_id}/alignment-rows")
def list_alignment_rows(program_id: int, request: Request, db: Session = Depends(get_db)):
    rows = (
        db.query(AlignmentRow)
        .filter(AlignmentRow.program_id == program_id)
        .order_by(AlignmentRow.sort_order.asc(), AlignmentRow.group_label.asc())
        .all()
    )
    ids = [r.id for r in rows]
    plo_checks = checks_for_rows(db, ALIGNMENT_PLO, ids, "plo_id")
    mlo_checks = checks_for_rows(db, ALIGNMENT_MLO, ids, "mlo_id")
    data = [
        {**serialize(r), "plo_checks": plo_checks.get(r.id, []), "mlo_checks": mlo_checks.get(r.id, [])}
        for r in rows
    ]
    return ok(request, data)


@router.post("/alignment-rows")
def create_alignment_row(payload: AlignmentRowCreateIn, request: Request, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["sort_order"] = data["sort_order"] or 0
    row = AlignmentRow(**data)
    with atomic(db):
        db.add(row)
    return created(request, serialize(row))


@router.put("/alignment-rows/{row_id}")
def update_alignment_row(row_id: str, payload: AlignmentRowPatchIn, request: Request, db: Session = Depends(get_db)):
    row = get_or_404(db, AlignmentRow, row_id, "Alignment row")
    with atomic(db):
        apply_patch(row, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(row))


@router.delete("/alignment-rows/{row_id}")
def delete_alignment_row(row_id: str, request: Request, db: Session = Depends(get_db)):
    row = get_or_404(db, AlignmentRow, row_id, "Alignment row")
    with atomic(db):
        db.delete(row)
    return ok(request, {"id": row_id})


@router.put("/alignment-rows/{row_id}/plo-checks")
def set_plo_check(row_id: str, payload: PloCheckIn, request: Request, db: Session = Depends(get_db)):
    set_check(db, ALIGNMENT_PLO, row_id, payload.plo_id, payload.checked)
    return ok(request, {"alignment_row_id": row_id, "plo_id": payload.plo_id, "checked": payload.checked})


@router.put("/alignment-rows/{row_id}/mlo-checks")
def set_mlo_check(row_id: str, payload: MloCheckIn, request: Request, db: Session = Depends(get_db)):
    set_check(db, ALIGNMENT_MLO, row_id, payload.mlo_id, payload.checked)
    return ok(request, {"alignment_row_id": row_id, "mlo_id": payload.mlo_id, "checked": payload.checked})
