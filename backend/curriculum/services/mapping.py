"""
Many-to-many outcome mappings.

Two write styles are supported for every relation:

* replace-all: the owner's related set becomes exactly the given ids
  (deduplicated). Unknown ids reject the whole call before anything is
  touched. Delete and insert commit together.
* pair: add/remove a single (owner, related) pair; removing an absent pair is
  not an error.

Stakeholder survey cells carry a level and are handled by the level helpers
and the matrix import at the bottom of this module.
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy import Table, delete, select
from sqlalchemy.orm import Session

from curriculum.core.errors import not_found, validation_error
from curriculum.db.queries import atomic, dialect_insert, get_or_404
from curriculum.models.alignment import AlignmentRow, alignment_mlo_checks, alignment_plo_checks
from curriculum.models.base import new_uuid, utcnow
from curriculum.models.outcome import CLO, KASItem, MLO, PLO, clo_kas, clo_mlo, clo_plo, mlo_kas, plo_kas
from curriculum.models.stakeholder import LEVELS, Stakeholder, StakeholderPLOMapping, StakeholderSurvey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relation:
    name: str
    table: Table
    owner_model: Any
    owner_key: str
    related_model: Any
    related_key: str

    @property
    def owner_col(self):
        return self.table.c[self.owner_key]

    @property
    def related_col(self):
        return self.table.c[self.related_key]


PLO_KAS = Relation("plo-kas", plo_kas, PLO, "plo_id", KASItem, "kas_id")
MLO_KAS = Relation("mlo-kas", mlo_kas, MLO, "mlo_id", KASItem, "kas_id")
CLO_KAS = Relation("clo-kas", clo_kas, CLO, "clo_id", KASItem, "kas_id")
CLO_PLO = Relation("clo-plo", clo_plo, CLO, "clo_id", PLO, "plo_id")
CLO_MLO = Relation("clo-mlo", clo_mlo, CLO, "clo_id", MLO, "mlo_id")

RELATIONS = {r.name: r for r in (PLO_KAS, MLO_KAS, CLO_KAS, CLO_PLO, CLO_MLO)}

ALIGNMENT_PLO = Relation("alignment-plo", alignment_plo_checks, AlignmentRow, "alignment_row_id", PLO, "plo_id")
ALIGNMENT_MLO = Relation("alignment-mlo", alignment_mlo_checks, AlignmentRow, "alignment_row_id", MLO, "mlo_id")


def _unknown_ids(db: Session, model, ids: list) -> list:
    found = set(db.execute(select(model.id).where(model.id.in_(ids))).scalars())
    return [i for i in ids if i not in found]


def replace_all(db: Session, rel: Relation, owner_id, related_ids: Iterable) -> int:
    """Make ``owner_id``'s related set exactly ``related_ids``. Returns the stored count."""
    ids = list(dict.fromkeys(related_ids))
    with atomic(db):
        # row lock serializes concurrent replace-alls for the same owner
        get_or_404(db, rel.owner_model, owner_id, for_update=True)
        if ids:
            unknown = _unknown_ids(db, rel.related_model, ids)
            if unknown:
                raise validation_error(
                    f"Unknown {rel.related_key} values", {"unknown_ids": unknown}
                )
        db.execute(delete(rel.table).where(rel.owner_col == owner_id))
        if ids:
            stmt = dialect_insert(db, rel.table).values(
                [{rel.owner_key: owner_id, rel.related_key: rid} for rid in ids]
            )
            db.execute(stmt.on_conflict_do_nothing())
    logger.info("replace-all %s owner=%s count=%d", rel.name, owner_id, len(ids))
    return len(ids)


def remove_pair(db: Session, rel: Relation, owner_id, related_id) -> int:
    with atomic(db):
        result = db.execute(
            delete(rel.table).where(rel.owner_col == owner_id, rel.related_col == related_id)
        )
    return result.rowcount or 0


def related_rows(db: Session, rel: Relation, owner_ids: list, columns: list[str]) -> dict[Any, list[dict]]:
    """Related entities grouped by owner id, projected to ``columns``."""
    grouped: dict[Any, list[dict]] = {}
    if not owner_ids:
        return grouped
    cols = [getattr(rel.related_model, c) for c in columns]
    stmt = (
        select(rel.owner_col, *cols)
        .join(rel.related_model, rel.related_model.id == rel.related_col)
        .where(rel.owner_col.in_(owner_ids))
        .order_by(rel.related_model.code)
    )
    for row in db.execute(stmt):
        owner = row[0]
        grouped.setdefault(owner, []).append(dict(zip(columns, row[1:])))
    return grouped


def set_check(db: Session, rel: Relation, row_id, outcome_id, checked: bool) -> None:
    """Upsert one alignment checklist cell."""
    with atomic(db):
        get_or_404(db, rel.owner_model, row_id, what="Alignment row")
        if _unknown_ids(db, rel.related_model, [outcome_id]):
            raise not_found(rel.related_model.__name__)
        stmt = dialect_insert(db, rel.table).values(
            {rel.owner_key: row_id, rel.related_key: outcome_id, "checked": bool(checked)}
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[rel.owner_key, rel.related_key],
            set_={"checked": stmt.excluded.checked},
        )
        db.execute(stmt)


def checks_for_rows(db: Session, rel: Relation, row_ids: list, id_key: str) -> dict[Any, list[dict]]:
    grouped: dict[Any, list[dict]] = {}
    if not row_ids:
        return grouped
    stmt = (
        select(rel.owner_col, rel.related_model.id, rel.related_model.code, rel.table.c.checked)
        .join(rel.related_model, rel.related_model.id == rel.related_col)
        .where(rel.owner_col.in_(row_ids))
        .order_by(rel.related_model.code)
    )
    for row_id, outcome_id, code, checked in db.execute(stmt):
        grouped.setdefault(row_id, []).append({id_key: outcome_id, "code": code, "checked": bool(checked)})
    return grouped


# ---------------------------------------------------------------------------
# Stakeholder x PLO levels
# ---------------------------------------------------------------------------


def normalize_level(value) -> str | None:
    """Return F/M/P for an accepted level, None for anything else."""
    if value is None:
        return None
    level = str(value).strip().upper()
    return level if level in LEVELS else None


def _upsert_levels(db: Session, survey_id, cells: list[tuple[Any, Any, str]]):
    if not cells:
        return
    now = utcnow()
    table = StakeholderPLOMapping.__table__
    stmt = dialect_insert(db, table).values(
        [
            {"survey_id": survey_id, "stakeholder_id": sk, "plo_id": plo, "level": level, "updated_at": now}
            for sk, plo, level in cells
        ]
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["survey_id", "stakeholder_id", "plo_id"],
        set_={"level": stmt.excluded.level, "updated_at": stmt.excluded.updated_at},
    )
    db.execute(stmt)


def upsert_or_delete_level(db: Session, survey_id, stakeholder_id, plo_id, level) -> str | None:
    """Set one survey cell. A valid level is upserted; anything else deletes the cell."""
    normalized = normalize_level(level)
    with atomic(db):
        get_or_404(db, StakeholderSurvey, survey_id, what="Survey")
        if normalized is None:
            db.execute(
                delete(StakeholderPLOMapping).where(
                    StakeholderPLOMapping.survey_id == survey_id,
                    StakeholderPLOMapping.stakeholder_id == stakeholder_id,
                    StakeholderPLOMapping.plo_id == plo_id,
                )
            )
        else:
            _upsert_levels(db, survey_id, [(stakeholder_id, plo_id, normalized)])
    return normalized


def replace_survey_mappings(db: Session, survey_id, mappings: list[dict]) -> int:
    """Replace every cell of a survey. Entries without a valid level are dropped."""
    cells: dict[tuple, str] = {}
    for m in mappings:
        level = normalize_level(m.get("level"))
        if level and m.get("stakeholder_id") and m.get("plo_id"):
            cells[(m["stakeholder_id"], m["plo_id"])] = level
    with atomic(db):
        get_or_404(db, StakeholderSurvey, survey_id, what="Survey", for_update=True)
        db.execute(delete(StakeholderPLOMapping).where(StakeholderPLOMapping.survey_id == survey_id))
        _upsert_levels(db, survey_id, [(sk, plo, level) for (sk, plo), level in cells.items()])
    return len(cells)


def plo_code_for_row(row: dict, index: int, prefix: str = "PLO") -> str:
    """PLO code for an import row: ``plo_no``, then ``no``, then the 1-based row position.

    Falsy values such as 0 or "" fall through to the next source.
    """
    number = row.get("plo_no") or row.get("no") or (index + 1)
    if isinstance(number, float) and number.is_integer():
        number = int(number)
    return f"{prefix}{str(number).strip()}"


def import_survey_matrix(db: Session, survey_id, stakeholder_names: list[str], rows: list[dict]) -> int:
    """Import a stakeholder x PLO sheet into a survey, replacing its current cells.

    Each stakeholder name is upserted (reactivating soft-deleted ones). Each
    row resolves to a PLO by ``PLO<plo_no|no|position>``; rows with no such
    PLO are skipped. All of it commits or rolls back as one unit.
    """
    names = [n for n in dict.fromkeys(n.strip() for n in stakeholder_names) if n]
    with atomic(db):
        survey = get_or_404(db, StakeholderSurvey, survey_id, what="Survey", for_update=True)
        program_id = survey.program_id

        sk_map: dict[str, str] = {}
        if names:
            table = Stakeholder.__table__
            stmt = dialect_insert(db, table).values(
                [
                    {"id": new_uuid(), "program_id": program_id, "name_th": n, "sort_order": 0, "is_active": True}
                    for n in names
                ]
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["program_id", "name_th"],
                set_={"is_active": True},
            )
            db.execute(stmt)
            found = db.execute(
                select(Stakeholder.name_th, Stakeholder.id).where(
                    Stakeholder.program_id == program_id, Stakeholder.name_th.in_(names)
                )
            )
            sk_map = {name: sid for name, sid in found}

        plo_map = {
            code: pid
            for code, pid in db.execute(select(PLO.code, PLO.id).where(PLO.program_id == program_id))
        }

        cells: dict[tuple, str] = {}
        for index, row in enumerate(rows):
            plo_id = plo_map.get(plo_code_for_row(row, index))
            if not plo_id:
                continue
            for raw_name in stakeholder_names:
                name = raw_name.strip()
                level = normalize_level(row.get(raw_name, row.get(name)))
                if level and name in sk_map:
                    cells.setdefault((sk_map[name], plo_id), level)

        db.execute(delete(StakeholderPLOMapping).where(StakeholderPLOMapping.survey_id == survey_id))
        _upsert_levels(db, survey_id, [(sk, plo, level) for (sk, plo), level in cells.items()])

    logger.info("survey import survey=%s stakeholders=%d rows=%d mappings=%d", survey_id, len(names), len(rows), len(cells))
    return len(cells)
