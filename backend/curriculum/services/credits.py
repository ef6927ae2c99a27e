from typing import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from curriculum.models.curriculum import Semester, SemesterSubject, Subject


def _total_credits_expr(semester_id_col):
    return (
        select(func.coalesce(func.sum(func.coalesce(SemesterSubject.credits, Subject.default_credits)), 0))
        .select_from(SemesterSubject)
        .join(Subject, Subject.id == SemesterSubject.subject_id)
        .where(SemesterSubject.semester_id == semester_id_col)
        .scalar_subquery()
    )


def recompute_semester_credits(db: Session, semester_ids: int | Iterable[int]) -> None:
    """Recompute ``total_credits`` from scratch for the given semesters.

    Runs in the caller's transaction; the caller commits together with the
    SemesterSubject write that triggered it.
    """
    if isinstance(semester_ids, int):
        semester_ids = [semester_ids]
    ids = sorted({sid for sid in semester_ids if sid is not None})
    if not ids:
        return
    db.flush()
    db.execute(
        update(Semester)
        .where(Semester.id.in_(ids))
        .values(total_credits=_total_credits_expr(Semester.id))
        .execution_options(synchronize_session=False)
    )
    for obj in db.identity_map.values():
        if isinstance(obj, Semester) and obj.id in ids:
            db.expire(obj, ["total_credits"])


def semesters_using_subject(db: Session, subject_id: int) -> list[int]:
    return list(
        db.execute(
            select(SemesterSubject.semester_id).where(SemesterSubject.subject_id == subject_id).distinct()
        ).scalars()
    )
