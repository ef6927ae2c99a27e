from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import apply_patch, atomic, get_or_404, serialize
from curriculum.core.response import ok, created
from curriculum.core.errors import validation_error
from curriculum.models.base import utcnow
from curriculum.models.curriculum import Semester, SemesterSubject, StudyPlan, Subject
from curriculum.schemas.curriculum import (
    SemesterCreateIn,
    SemesterPatchIn,
    SemesterSubjectCreateIn,
    SemesterSubjectPatchIn,
    StudyPlanCreateIn,
    StudyPlanPatchIn,
)
from curriculum.services.credits import recompute_semester_credits

router = APIRouter(prefix="/api", tags=["study-plans"])

PLAN_CONFLICT = "A study plan for this owner, academic year and year number already exists"


def _semester_subject_rows(db: Session, semester_ids: list[int]) -> dict[int, list[dict]]:
    grouped: dict[int, list[dict]] = {}
    if not semester_ids:
        return grouped
    rows = (
        db.query(SemesterSubject, Subject)
        .join(Subject, Subject.id == SemesterSubject.subject_id)
        .filter(SemesterSubject.semester_id.in_(semester_ids))
        .order_by(SemesterSubject.sort_order.asc(), Subject.code.asc())
        .all()
    )
    for ss, s in rows:
        item = serialize(ss)
        item.update(
            {
                "subject_code": s.code,
                "subject_name_th": s.name_th,
                "subject_name_en": s.name_en,
                "default_credits": s.default_credits,
                "default_hour_structure": s.default_hour_structure,
                "effective_credits": ss.credits if ss.credits is not None else s.default_credits,
                "effective_hour_structure": ss.hour_structure or s.default_hour_structure,
            }
        )
        grouped.setdefault(ss.semester_id, []).append(item)
    return grouped


# study plans

@router.get("/study-plans")
def list_study_plans(
    request: Request,
    db: Session = Depends(get_db),
    course_id: int | None = None,
    major_id: int | None = None,
    year: int | None = None,
    status: str | None = None,
):
    q = db.query(StudyPlan)
    if course_id:
        q = q.filter(StudyPlan.course_id == course_id)
    if major_id:
        q = q.filter(StudyPlan.major_id == major_id)
    if year:
        q = q.filter(StudyPlan.academic_year == year)
    if status:
        q = q.filter(StudyPlan.status == status)
    rows = q.order_by(StudyPlan.academic_year.desc(), StudyPlan.year_no.asc()).all()
    return ok(request, [serialize(p) for p in rows])


@router.get("/study-plans/{plan_id}")
def get_study_plan(plan_id: int, request: Request, db: Session = Depends(get_db)):
    return ok(request, serialize(get_or_404(db, StudyPlan, plan_id, "Study plan")))


@router.get("/study-plans/{plan_id}/full")
def get_study_plan_full(plan_id: int, request: Request, db: Session = Depends(get_db)):
    plan = get_or_404(db, StudyPlan, plan_id, "Study plan")
    semesters = (
        db.query(Semester)
        .filter(Semester.study_plan_id == plan_id)
        .order_by(Semester.sort_order.asc(), Semester.term_no.asc())
        .all()
    )
    subjects = _semester_subject_rows(db, [s.id for s in semesters])
    data = serialize(plan)
    data["semesters"] = [{**serialize(s), "subjects": subjects.get(s.id, [])} for s in semesters]
    data["total_credits"] = sum(s.total_credits for s in semesters)
    return ok(request, data)


@router.post("/study-plans")
def create_study_plan(payload: StudyPlanCreateIn, request: Request, db: Session = Depends(get_db)):
    if bool(payload.course_id) == bool(payload.major_id):
        raise validation_error("Exactly one of course_id or major_id is required", {"missing": ["course_id|major_id"]})
    data = payload.model_dump()
    data["status"] = data["status"] or "draft"
    plan = StudyPlan(**data)
    with atomic(db, PLAN_CONFLICT):
        db.add(plan)
    return created(request, serialize(plan))


@router.put("/study-plans/{plan_id}")
def update_study_plan(plan_id: int, payload: StudyPlanPatchIn, request: Request, db: Session = Depends(get_db)):
    plan = get_or_404(db, StudyPlan, plan_id, "Study plan")
    with atomic(db, PLAN_CONFLICT):
        if apply_patch(plan, payload.model_dump(exclude_unset=True)):
            plan.updated_at = utcnow()
    return ok(request, serialize(plan))


@router.delete("/study-plans/{plan_id}")
def delete_study_plan(plan_id: int, request: Request, db: Session = Depends(get_db)):
    plan = get_or_404(db, StudyPlan, plan_id, "Study plan")
    with atomic(db):
        db.delete(plan)
    return ok(request, {"id": plan_id})


# semesters

@router.get("/study-plans/{plan_id}/semesters")
def list_semesters(plan_id: int, request: Request, db: Session = Depends(get_db)):
    rows = (
        db.query(Semester)
        .filter(Semester.study_plan_id == plan_id)
        .order_by(Semester.sort_order.asc(), Semester.term_no.asc())
        .all()
    )
    return ok(request, [serialize(s) for s in rows])


@router.post("/semesters")
def create_semester(payload: SemesterCreateIn, request: Request, db: Session = Depends(get_db)):
    s = Semester(
        study_plan_id=payload.study_plan_id,
        term_no=payload.term_no,
        sort_order=payload.sort_order or 0,
        total_credits=0,
    )
    with atomic(db):
        db.add(s)
    return created(request, serialize(s))


@router.put("/semesters/{semester_id}")
def update_semester(semester_id: int, payload: SemesterPatchIn, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, Semester, semester_id, "Semester")
    with atomic(db):
        apply_patch(s, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(s))


@router.delete("/semesters/{semester_id}")
def delete_semester(semester_id: int, request: Request, db: Session = Depends(get_db)):
    s = get_or_404(db, Semester, semester_id, "Semester")
    with atomic(db):
        db.delete(s)
    return ok(request, {"id": semester_id})


# semester subjects

@router.get("/semesters/{semester_id}/subjects")
def list_semester_subjects(semester_id: int, request: Request, db: Session = Depends(get_db)):
    get_or_404(db, Semester, semester_id, "Semester")
    return ok(request, _semester_subject_rows(db, [semester_id]).get(semester_id, []))


@router.post("/semester-subjects")
def create_semester_subject(payload: SemesterSubjectCreateIn, request: Request, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["sort_order"] = data["sort_order"] or 0
    ss = SemesterSubject(**data)
    with atomic(db, "Subject is already placed in this semester"):
        db.add(ss)
        recompute_semester_credits(db, ss.semester_id)
    semester = db.get(Semester, ss.semester_id)
    return created(request, {**serialize(ss), "semester_total_credits": semester.total_credits})


@router.put("/semester-subjects/{ss_id}")
def update_semester_subject(ss_id: int, payload: SemesterSubjectPatchIn, request: Request, db: Session = Depends(get_db)):
    ss = get_or_404(db, SemesterSubject, ss_id, "Semester subject")
    previous_semester = ss.semester_id
    with atomic(db, "Subject is already placed in this semester"):
        apply_patch(ss, payload.model_dump(exclude_unset=True))
        recompute_semester_credits(db, {previous_semester, ss.semester_id})
    semester = db.get(Semester, ss.semester_id)
    return ok(request, {**serialize(ss), "semester_total_credits": semester.total_credits})


@router.delete("/semester-subjects/{ss_id}")
def delete_semester_subject(ss_id: int, request: Request, db: Session = Depends(get_db)):
    ss = get_or_404(db, SemesterSubject, ss_id, "Semester subject")
    semester_id = ss.semester_id
    with atomic(db):
        db.delete(ss)
        recompute_semester_credits(db, semester_id)
    semester = db.get(Semester, semester_id)
    return ok(request, {"id": ss_id, "semester_total_credits": semester.total_credits})
