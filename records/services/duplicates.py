"""Merging patients that were registered more than once."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import transaction

from records.models import Appointment, Encounter, Patient, Study

logger = logging.getLogger(__name__)

REPOINTED = (('appointments', Appointment), ('encounters', Encounter), ('studies', Study))


@dataclass
class MergeReport:
    duplicates: int = 0
    removed: int = 0
    patched: dict = field(default_factory=lambda: {name: [] for name, _ in REPOINTED})
    failed: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            'duplicates': self.duplicates,
            'removed': self.removed,
            'patched': self.patched,
            'failed': self.failed,
        }


def duplicate_groups() -> list[list[Patient]]:
    """Patients sharing a document number, oldest first within each group."""
    groups: dict = {}
    qs = Patient.objects.select_related('personal_data').filter(personal_data__isnull=False).order_by('created_at')
    for patient in qs:
        document = patient.personal_data.document_value
        if document:
            groups.setdefault(document, []).append(patient)
    return [group for group in groups.values() if len(group) > 1]


def merge_duplicate_patients(*, dry_run=False) -> MergeReport:
    report = MergeReport()
    for group in duplicate_groups():
        keeper, others = group[0], group[1:]
        report.duplicates += len(others)
        for other in others:
            for name, model in REPOINTED:
                ids = list(model.objects.filter(patient_id=other.id).values_list('id', flat=True))
                report.patched[name].extend({'id': i, 'from': other.id, 'to': keeper.id} for i in ids)
            if dry_run:
                continue
            try:
                with transaction.atomic():
                    for _, model in REPOINTED:
                        model.objects.filter(patient_id=other.id).update(patient_id=keeper.id)
                    other.delete()
            except Exception as exc:
                logger.exception('patient_merge_failed patient=%s keeper=%s', other.id, keeper.id)
                report.failed.append({'patientId': other.id, 'keeperId': keeper.id, 'error': str(exc)})
                continue
            report.removed += 1
    logger.info('patients_merged duplicates=%s removed=%s dry_run=%s', report.duplicates, report.removed, dry_run)
    return report
