from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import apply_patch, atomic, get_or_404, serialize
from curriculum.core.response import ok, created, paginated
from curriculum.models.curriculum import Subject
from curriculum.schemas.curriculum import SubjectCreateIn, SubjectPatchIn
from curriculum.services.credits import recompute_semester_credits, semesters_using_subject

router = APIRouter(prefix="/api/subjects", tags=["subjects"])

SUBJECT_CONFLICT = "Subject code already exists"


@router.get("")
def list_subjects(
    request: Request,
    db: Session = Depends(get_db),
    search: str | None = None,
    page: int = 1,
    page_size: int = Query(default=20, alias="pageSize"),
):
    page = max(1, page)
    page_size = min(max(1, page_size), 200)

    q = db.query(Subject)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Subject.code.ilike(like), Subject.name_th.ilike(like), Subject.name_en.ilike(like)))
    total = q.count()
    rows = q.order_by(Subject.code.asc()).offset((page - 1) * page_size).limit(page_size).all()
    return paginated(request, [serialize(s) for s in rows], total, page, page_size)


@router.get("/{subject_id}")
def get_subject(subject_id: int, request: Request, db: Session = Depends(get_db)):
    return ok(request, serialize(get_or_404(db, Subject, subject_id, "Subject")))


@router.post("")
def create_subject(payload: SubjectCreateIn, request: Request, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["default_credits"] = data["default_credits"] or 0
    s = Subject(**data)
    with atomic(db, SUBJECT_CONFLICT):
        db.add(s)
    return created(request, serialize(s))


@router.put("/{subject_id}")
def update_subject(subject_id: int, payload: SubjectPatchIn, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, Subject, subject_id, "Subject")
    with atomic(db, SUBJECT_CONFLICT):
        changed = apply_patch(s, payload.model_dump(exclude_unset=True))
        if "default_credits" in changed:
            recompute_semester_credits(db, semesters_using_subject(db, subject_id))
    return ok(request, serialize(s))


@router.delete("/{subject_id}")
def delete_subject(subject_id: int, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, Subject, subject_id, "Subject")
    with atomic(db):
        affected = semesters_using_subject(db, subject_id)
        db.delete(s)
        # placements go with the subject (ON DELETE CASCADE)
        recompute_semester_credits(db, affected)
    return ok(request, {"id": subject_id})
