from fastapi import APIRouter, Depends, Request
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import apply_patch, atomic, get_or_404, serialize
from curriculum.core.response import ok, created
from curriculum.models.base import utcnow
from curriculum.models.curriculum import Major, Program, Semester, SemesterSubject, StudyPlan, Subject
from curriculum.models.outcome import CLO, KASItem, MLO, MajorGroup, PLO
from curriculum.schemas.outcome import (
    CloCreateIn,
    CloPatchIn,
    KasCreateIn,
    KasPatchIn,
    MajorGroupCreateIn,
    MajorGroupPatchIn,
    MloCreateIn,
    MloPatchIn,
    PloCreateIn,
    PloPatchIn,
    mapping_bodies,
)
from curriculum.services.mapping import (
    CLO_KAS,
    CLO_MLO,
    CLO_PLO,
    MLO_KAS,
    PLO_KAS,
    RELATIONS,
    Relation,
    related_rows,
    remove_pair,
    replace_all,
)

router = APIRouter(prefix="/api", tags=["outcomes"])

KAS_COLUMNS = ["id", "code", "label", "type"]
LO_COLUMNS = ["id", "code", "description"]


# PLOs

@router.get("/programs/{program_id}/plos")
def list_plos(program_id: int, request: Request, db: Session = Depends(get_db)):
    plos = (
        db.query(PLO)
        .filter(PLO.program_id == program_id)
        .order_by(PLO.sort_order.asc(), PLO.code.asc())
        .all()
    )
    kas = related_rows(db, PLO_KAS, [p.id for p in plos], KAS_COLUMNS)
    return ok(request, [{**serialize(p), "kas": kas.get(p.id, [])} for p in plos])


@router.post("/plos")
def create_plo(payload: PloCreateIn, request: Request, db: Session = Depends(get_db)):
    p = PLO(
        program_id=payload.program_id,
        code=payload.code,
        description=payload.description,
        sort_order=payload.sort_order or 0,
    )
    with atomic(db, "PLO code already exists in this program"):
        db.add(p)
    return created(request, serialize(p))


@router.put("/plos/{plo_id}")
def update_plo(plo_id: str, payload: PloPatchIn, request: Request, db: Session = Depends(get_db)):
    p = get_or_404(db, PLO, plo_id, "PLO")
    with atomic(db, "PLO code already exists in this program"):
        apply_patch(p, payload.model_dump(exclude_unset=True))
        p.updated_at = utcnow()
    return ok(request, serialize(p))


@router.delete("/plos/{plo_id}")
def delete_plo(plo_id: str, request: Request, db: Session = Depends(get_db)):
    p = get_or_404(db, PLO, plo_id, "PLO")
    with atomic(db):
        db.delete(p)
    return ok(request, {"id": plo_id})


# KAS items

@router.get("/programs/{program_id}/kas-items")
def list_kas_items(program_id: int, request: Request, db: Session = Depends(get_db), type: str | None = None):
    q = db.query(KASItem).filter(KASItem.program_id == program_id)
    if type:
        q = q.filter(KASItem.type == type)
    rows = q.order_by(KASItem.type.asc(), KASItem.sort_order.asc(), KASItem.code.asc()).all()
    return ok(request, [serialize(k) for k in rows])


@router.post("/kas-items")
def create_kas_item(payload: KasCreateIn, request: Request, db: Session = Depends(get_db)):
    k = KASItem(
        program_id=payload.program_id,
        type=payload.type,
        code=payload.code,
        label=payload.label,
        sort_order=payload.sort_order or 0,
    )
    with atomic(db, "KAS code already exists in this program"):
        db.add(k)
    return created(request, serialize(k))


@router.put("/kas-items/{kas_id}")
def update_kas_item(kas_id: str, payload: KasPatchIn, request: Request, db: Session = Depends(get_db)):
    k = get_or_404(db, KASItem, kas_id, "KAS item")
    with atomic(db, "KAS code already exists in this program"):
        apply_patch(k, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(k))


@router.delete("/kas-items/{kas_id}")
def delete_kas_item(kas_id: str, request: Request, db: Session = Depends(get_db)):
    k = get_or_404(db, KASItem, kas_id, "KAS item")
    with atomic(db):
        db.delete(k)
    return ok(request, {"id": kas_id})


# major groups

@router.get("/programs/{program_id}/major-groups")
def list_major_groups(program_id: int, request: Request, db: Session = Depends(get_db)):
    rows = (
        db.query(MajorGroup, Major)
        .outerjoin(Major, Major.id == MajorGroup.major_id)
        .filter(MajorGroup.program_id == program_id)
        .order_by(MajorGroup.sort_order.asc(), MajorGroup.label.asc())
        .all()
    )
    data = []
    for g, m in rows:
        data.append(
            {
                **serialize(g),
                "major_name_th": m.name_th if m else None,
                "major_name_en": m.name_en if m else None,
            }
        )
    return ok(request, data)


@router.post("/major-groups")
def create_major_group(payload: MajorGroupCreateIn, request: Request, db: Session = Depends(get_db)):
    g = MajorGroup(
        program_id=payload.program_id,
        major_id=payload.major_id,
        label=payload.label,
        icon=payload.icon,
        sort_order=payload.sort_order or 0,
    )
    with atomic(db):
        db.add(g)
    return created(request, serialize(g))


@router.put("/major-groups/{group_id}")
def update_major_group(group_id: str, payload: MajorGroupPatchIn, request: Request, db: Session = Depends(get_db)):
    g = get_or_404(db, MajorGroup, group_id, "Major group")
    with atomic(db):
        apply_patch(g, payload.model_dump(exclude_unset=True))
    return ok(request, serialize(g))


@router.delete("/major-groups/{group_id}")
def delete_major_group(group_id: str, request: Request, db: Session = Depends(get_db)):
    g = get_or_404(db, MajorGroup, group_id, "Major group")
    with atomic(db):
        db.delete(g)
    return ok(request, {"id": group_id})


# MLOs

@router.get("/major-groups/{group_id}/mlos")
def list_mlos(group_id: str, request: Request, db: Session = Depends(get_db)):
    mlos = (
        db.query(MLO)
        .filter(MLO.major_group_id == group_id)
        .order_by(MLO.sort_order.asc(), MLO.code.asc())
        .all()
    )
    kas = related_rows(db, MLO_KAS, [m.id for m in mlos], KAS_COLUMNS)
    return ok(request, [{**serialize(m), "kas": kas.get(m.id, [])} for m in mlos])


@router.post("/mlos")
def create_mlo(payload: MloCreateIn, request: Request, db: Session = Depends(get_db)):
    m = MLO(
        major_group_id=payload.major_group_id,
        code=payload.code,
        description=payload.description,
        sort_order=payload.sort_order or 0,
    )
    with atomic(db, "MLO code already exists in this major group"):
        db.add(m)
    return created(request, serialize(m))


@router.put("/mlos/{mlo_id}")
def update_mlo(mlo_id: str, payload: MloPatchIn, request: Request, db: Session = Depends(get_db)):
    m = get_or_404(db, MLO, mlo_id, "MLO")
    with atomic(db, "MLO code already exists in this major group"):
        apply_patch(m, payload.model_dump(exclude_unset=True))
        m.updated_at = utcnow()
    return ok(request, serialize(m))


@router.delete("/mlos/{mlo_id}")
def delete_mlo(mlo_id: str, request: Request, db: Session = Depends(get_db)):
    m = get_or_404(db, MLO, mlo_id, "MLO")
    with atomic(db):
        db.delete(m)
    return ok(request, {"id": mlo_id})


# CLOs

def _clos_with_mappings(db: Session, clos: list[CLO]) -> list[dict]:
    ids = [c.id for c in clos]
    plos = related_rows(db, CLO_PLO, ids, LO_COLUMNS)
    mlos = related_rows(db, CLO_MLO, ids, LO_COLUMNS)
    kas = related_rows(db, CLO_KAS, ids, KAS_COLUMNS)
    return [
        {**serialize(c), "plos": plos.get(c.id, []), "mlos": mlos.get(c.id, []), "kas": kas.get(c.id, [])}
        for c in clos
    ]


@router.get("/subjects/{subject_id}/clos")
def list_clos(subject_id: int, request: Request, db: Session = Depends(get_db)):
    clos = db.query(CLO).filter(CLO.subject_id == subject_id).order_by(CLO.seq.asc()).all()
    return ok(request, _clos_with_mappings(db, clos))


@router.get("/clos/{clo_id}")
def get_clo(clo_id: str, request: Request, db: Session = Depends(get_db)):
    return ok(request, _clos_with_mappings(db, [get_or_404(db, CLO, clo_id, "CLO")])[0])


@router.post("/clos")
def create_clo(payload: CloCreateIn, request: Request, db: Session = Depends(get_db)):
    c = CLO(
        subject_id=payload.subject_id,
        seq=payload.seq,
        description_th=payload.description_th,
        description_en=payload.description_en,
    )
    with atomic(db, "CLO sequence already exists in this subject"):
        db.add(c)
    return created(request, serialize(c))


@router.put("/clos/{clo_id}")
def update_clo(clo_id: str, payload: CloPatchIn, request: Request, db: Session = Depends(get_db)):
    c = get_or_404(db, CLO, clo_id, "CLO")
    with atomic(db, "CLO sequence already exists in this subject"):
        apply_patch(c, payload.model_dump(exclude_unset=True))
        c.updated_at = utcnow()
    return ok(request, serialize(c))


@router.delete("/clos/{clo_id}")
def delete_clo(clo_id: str, request: Request, db: Session = Depends(get_db)):
    c = get_or_404(db, CLO, clo_id, "CLO")
    with atomic(db):
        db.delete(c)
    return ok(request, {"id": clo_id})


@router.get("/programs/{program_id}/clo-full")
def list_program_clos(
    program_id: int, request: Request, db: Session = Depends(get_db), subject_id: int | None = None
):
    """CLOs of every subject placed in a study plan of the program's course, flattened with mapped codes."""
    program = get_or_404(db, Program, program_id, "Program")
    if program.course_id is None:
        return ok(request, [])

    major_ids = select(Major.id).where(Major.course_id == program.course_id)
    subject_ids = (
        select(SemesterSubject.subject_id)
        .join(Semester, Semester.id == SemesterSubject.semester_id)
        .join(StudyPlan, StudyPlan.id == Semester.study_plan_id)
        .where(or_(StudyPlan.course_id == program.course_id, StudyPlan.major_id.in_(major_ids)))
        .distinct()
    )
    q = (
        db.query(CLO, Subject)
        .join(Subject, Subject.id == CLO.subject_id)
        .filter(CLO.subject_id.in_(subject_ids))
    )
    if subject_id:
        q = q.filter(CLO.subject_id == subject_id)
    rows = q.order_by(Subject.code.asc(), CLO.seq.asc()).all()

    mapped = {c["id"]: c for c in _clos_with_mappings(db, [c for c, _ in rows])}
    data = []
    for clo, subject in rows:
        m = mapped[clo.id]
        data.append(
            {
                "clo_id": clo.id,
                "seq": clo.seq,
                "description_th": clo.description_th,
                "description_en": clo.description_en,
                "subject_id": subject.id,
                "subject_code": subject.code,
                "subject_name_th": subject.name_th,
                "plo_codes": [p["code"] for p in m["plos"]],
                "mlo_codes": [x["code"] for x in m["mlos"]],
                "kas_codes": [k["code"] for k in m["kas"]],
            }
        )
    return ok(request, data)


# mapping endpoints: POST replaces the owner's whole set, DELETE removes one pair

def _register_mapping_routes(rel: Relation):
    owner_key, related_key = rel.owner_key, rel.related_key
    list_key = f"{related_key}s"
    label = rel.name.upper()
    ReplaceIn, PairIn = mapping_bodies(owner_key, related_key)

    def replace_mapping(payload: ReplaceIn, request: Request, db: Session = Depends(get_db)):
        owner_id = getattr(payload, owner_key)
        count = replace_all(db, rel, owner_id, getattr(payload, list_key))
        return ok(request, {"message": f"{label} mapping saved", owner_key: owner_id, "count": count})

    def delete_mapping(payload: PairIn, request: Request, db: Session = Depends(get_db)):
        removed = remove_pair(db, rel, getattr(payload, owner_key), getattr(payload, related_key))
        return ok(request, {"message": f"{label} mapping removed", "removed": removed})

    replace_mapping.__name__ = f"replace_{rel.name.replace('-', '_')}"
    delete_mapping.__name__ = f"delete_{rel.name.replace('-', '_')}"
    router.add_api_route(f"/{rel.name}", replace_mapping, methods=["POST"])
    router.add_api_route(f"/{rel.name}", delete_mapping, methods=["DELETE"])


for _rel in RELATIONS.values():
    _register_mapping_routes(_rel)
