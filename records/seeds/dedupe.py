from __future__ import annotations

from dataclasses import dataclass, field

from .dumps import oid
from .stats import ProcessingStats


@dataclass
class DedupeResult:
    patients: list
    remap: dict
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def _document_key(patient: dict) -> str:
    return (patient.get('personal_data') or {}).get('document_value') or oid(patient['_id'])


def deduplicate_patients(patients: list) -> DedupeResult:
    """Collapse patients sharing a document number into one survivor.

    The first live record of each group wins; when every copy is
    soft-deleted the first one does.  ``remap`` maps every loser's id to
    its survivor's.
    """
    stats = ProcessingStats(total=len(patients))
    groups: dict = {}
    for patient in patients:
        groups.setdefault(_document_key(patient), []).append(patient)

    survivors, remap = [], {}
    for group in groups.values():
        live = [p for p in group if not p.get('deleted')]
        deleted = [p for p in group if p.get('deleted')]
        if live:
            winner = live[0]
            for dup in live[1:]:
                remap[oid(dup['_id'])] = oid(winner['_id'])
                stats.discard('non_deleted_duplicate')
        else:
            winner = deleted.pop(0)
        for dup in deleted:
            remap[oid(dup['_id'])] = oid(winner['_id'])
            stats.discard('soft_deleted_duplicate')
        survivors.append(winner)

    stats.kept = len(survivors)
    return DedupeResult(patients=survivors, remap=remap, stats=stats)


def apply_patient_remap(remap: dict, encounters: list, appointments: list, studies: list) -> None:
    if not remap:
        return
    for row in encounters + appointments:
        if row.get('patient_id') in remap:
            row['patient_id'] = remap[row['patient_id']]
    for study in studies:
        patient = study.get('patient') or {}
        if patient.get('id') in remap:
            patient['id'] = remap[patient['id']]
