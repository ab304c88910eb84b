from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta

from .dumps import number, unix_to_datetime
from .normalize import to_iso
from .stats import ProcessingStats

MAX_AGE_MONTHS = 6


@dataclass
class AppointmentsResult:
    appointments: list
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def process_appointments(appointments: list, kept_user_ids: set, kept_patient_ids: set, *,
                         now=None) -> AppointmentsResult:
    """Reshape the agenda, keeping only the last six months."""
    stats = ProcessingStats(total=len(appointments))
    cutoff = (now or datetime.now(timezone.utc)) - relativedelta(months=MAX_AGE_MONTHS)
    seeds = []

    for appointment in appointments:
        if appointment.get('medic_id') not in kept_user_ids:
            stats.discard('missing_medic_reference')
            continue
        if appointment.get('patient_id') not in kept_patient_ids:
            stats.discard('missing_patient_reference')
            continue
        start = unix_to_datetime(number(appointment.get('start_timestamp')))
        if start is None:
            stats.discard('invalid_timestamp')
            continue
        if start < cutoff:
            stats.discard('older_than_6_months')
            continue
        seeds.append({
            'patientId': appointment['patient_id'],
            'medicId': appointment['medic_id'],
            'startDate': to_iso(start),
            'extra': bool(appointment.get('extra')),
        })

    stats.kept = len(seeds)
    return AppointmentsResult(appointments=seeds, stats=stats)
