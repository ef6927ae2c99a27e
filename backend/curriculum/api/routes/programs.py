from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import apply_patch, atomic, get_or_404, serialize
from curriculum.core.response import ok, created
from curriculum.models.curriculum import Course, Major, Program
from curriculum.schemas.curriculum import (
    CourseCreateIn,
    CoursePatchIn,
    MajorCreateIn,
    MajorPatchIn,
    ProgramCreateIn,
    ProgramPatchIn,
)

router = APIRouter(prefix="/api", tags=["programs"])


# courses

@router.get("/courses")
def list_courses(request: Request, db: Session = Depends(get_db)):
    rows = db.query(Course).order_by(Course.code.asc(), Course.id.asc()).all()
    return ok(request, [serialize(c) for c in rows])


@router.post("/courses")
def create_course(payload: CourseCreateIn, request: Request, db: Session = Depends(get_db)):
    c = Course(**payload.model_dump())
    with atomic(db):
        db.add(c)
    return created(request, serialize(c))


@router.put("/courses/{course_id}")
def update_course(course_id: int, payload: CoursePatchIn, request: Request, db: Session = Depends(get_db)):
    c = get_or_404(db, Course, course_id, "Course")
    with atomic(db):
        apply_patch(c, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(c))


@router.delete("/courses/{course_id}")
def delete_course(course_id: int, request: Request, db: Session = Depends(get_db)):
    c = get_or_404(db, Course, course_id, "Course")
    with atomic(db):
        db.delete(c)
    return ok(request, {"id": course_id})


@router.get("/courses/{course_id}/majors")
def list_course_majors(course_id: int, request: Request, db: Session = Depends(get_db)):
    rows = (
        db.query(Major)
        .filter(Major.course_id == course_id)
        .order_by(Major.sort_order.asc(), Major.id.asc())
        .all()
    )
    return ok(request, [serialize(m) for m in rows])


# programs

@router.get("/programs")
def list_programs(request: Request, db: Session = Depends(get_db), course_id: int | None = None):
    q = db.query(Program)
    if course_id:
        q = q.filter(Program.course_id == course_id)
    rows = q.order_by(Program.year.desc(), Program.code.asc()).all()
    return ok(request, [serialize(p) for p in rows])


@router.get("/programs/{program_id}")
def get_program(program_id: int, request: Request, db: Session = Depends(get_db)):
    return ok(request, serialize(get_or_404(db, Program, program_id, "Program")))


@router.post("/programs")
def create_program(payload: ProgramCreateIn, request: Request, db: Session = Depends(get_db)):
    p = Program(**payload.model_dump())
    with atomic(db, "Program code already exists"):
        db.add(p)
    return created(request, serialize(p))


@router.put("/programs/{program_id}")
def update_program(program_id: int, payload: ProgramPatchIn, request: Request, db: Session = Depends(get_db)):
    p = get_or_404(db, Program, program_id, "Program")
    with atomic(db, "Program code already exists"):
        apply_patch(p, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(p))


@router.delete("/programs/{program_id}")
def delete_program(program_id: int, request: Request, db: Session = Depends(get_db)):
    p = get_or_404(db, Program, program_id, "Program")
    with atomic(db):
        db.delete(p)
    return ok(request, {"id": program_id})


# majors

@router.get("/majors/{major_id}")
def get_major(major_id: int, request: Request, db: Session = Depends(get_db)):
    return ok(request, serialize(get_or_404(db, Major, major_id, "Major")))


@router.post("/majors")
def create_major(payload: MajorCreateIn, request: Request, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["plan_slots"] = data["plan_slots"] or 0
    data["sort_order"] = data["sort_order"] or 0
    m = Major(**data)
    with atomic(db):
        db.add(m)
    return created(request, serialize(m))


@router.put("/majors/{major_id}")
def update_major(major_id: int, payload: MajorPatchIn, request: Request, db: Session = Depends(get_db)):
    m = get_or_404(db, Major, major_id, "Major")
    with atomic(db):
        apply_patch(m, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(m))


@router.delete("/majors/{major_id}")
def delete_major(major_id: int, request: Request, db: Session = Depends(get_db)):
    m = get_or_404(db, Major, major_id, "Major")
    with atomic(db):
        db.delete(m)
    return ok(request, {"id": major_id})
