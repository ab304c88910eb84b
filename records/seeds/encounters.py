from __future__ import annotations

from dataclasses import dataclass, field

from .dumps import number, unix_to_datetime
from .normalize import strip_class, to_iso
from .stats import ProcessingStats


@dataclass
class EncountersResult:
    encounters: list
    discarded: list
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def process_encounters(encounters: list, kept_user_ids: set, kept_patient_ids: set, *,
                       weird_user_id=None, lab_owner_id=None) -> EncountersResult:
    stats = ProcessingStats(total=len(encounters))
    seeds, discarded = [], []

    for encounter in encounters:
        reason = None
        date = None
        if encounter.get('medic_id') not in kept_user_ids:
            reason = 'missing_medic_reference'
        elif encounter.get('patient_id') not in kept_patient_ids:
            reason = 'missing_patient_reference'
        else:
            date = unix_to_datetime(number(encounter.get('timestamp')))
            if date is None:
                reason = 'invalid_timestamp'
        if reason:
            stats.discard(reason)
            discarded.append({**encounter, 'REASON': reason})
            continue

        medic_id = encounter['medic_id']
        if weird_user_id and medic_id == weird_user_id:
            medic_id = lab_owner_id
        seeds.append({
            'data': strip_class(encounter.get('datas') or {}),
            'date': to_iso(date),
            'medicId': medic_id,
            'patientId': encounter['patient_id'],
        })

    stats.kept = len(seeds)
    return EncountersResult(encounters=seeds, discarded=discarded, stats=stats)
