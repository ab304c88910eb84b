"""
Lab studies and the patients they belong to.

The lab took orders by hand, so a study's embedded patient may point at
a patient that was filtered out, at a patient that only exists under
another id, or at nobody at all.  Resolution tries, in order:

1. the embedded id among kept patients;
2. the document number among kept patients;
3. the embedded id among all patients (the patient is rescued);
4. the document number among all patients (rescued);
5. a synthetic patient built from the document number;
6. the first and last name among all patients;
7. a synthetic patient keyed by name.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from .dumps import object_id, oid, parse_date
from .normalize import to_iso
from .patients import document_index, patient_seed
from .stats import ProcessingStats

OBJECT_ID_RE = re.compile(r'^[0-9a-f]{24}$')


@dataclass
class StudiesResult:
    studies: list
    discarded: list
    synthetic_patients: list
    rescued_patient_ids: set
    kept_ids: set
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def resolve_medic(value, known_user_ids) -> tuple[Optional[str], Optional[str]]:
    """Return ``(medic_id, referring_doctor)`` for a study's ``medic`` field."""
    text = str(value or '').strip()
    if not text:
        return None, None
    if OBJECT_ID_RE.match(text.lower()) and text.lower() in known_user_ids:
        return text.lower(), None
    return None, text


def _name_key(first, last) -> Optional[str]:
    first, last = (first or '').strip().lower(), (last or '').strip().lower()
    if not first or not last:
        return None
    return f'{first}|{last}'


def _synthetic(embedded: dict, *, first_name, last_name, document_value) -> dict:
    return patient_seed({
        '_id': {'$oid': object_id()},
        'personal_data': {
            'first_name': first_name,
            'last_name': last_name,
            'document_value': document_value,
            'document_type': 'DNI',
        },
        'contact_data': {},
        'medicare': embedded.get('medicare') or '',
        'medicare_number': '',
        'medicare_plan': '',
        'deleted': False,
    })


def process_studies(studies: list, all_patients: list, kept_patient_ids: set, *,
                    known_user_ids: set, lab_owner_id: str) -> StudiesResult:
    """Attach every study to a patient, creating one when nothing matches.

    ``kept_patient_ids`` is extended in place with rescued and synthetic
    patients.
    """
    stats = ProcessingStats(total=len(studies))
    all_ids = {oid(p['_id']) for p in all_patients}
    by_document = document_index(all_patients)
    by_name = {}
    for patient in all_patients:
        personal = patient.get('personal_data') or {}
        key = _name_key(personal.get('first_name'), personal.get('last_name'))
        if key:
            by_name[key] = oid(patient['_id'])

    seeds, discarded, synthetic, rescued_ids = [], [], [], set()
    synthetic_by_document, synthetic_by_name = {}, {}

    for study in studies:
        study_id = oid(study.get('_id'))
        date = parse_date(study.get('date'))
        if not study_id or date is None:
            stats.discard('invalid_study_data')
            discarded.append({**study, 'REASON': 'invalid_study_data'})
            continue

        embedded = study.get('patient') or {}
        embedded_id, dni = embedded.get('id'), embedded.get('dni')
        patient_id, rescued = None, False

        if embedded_id and embedded_id in kept_patient_ids:
            patient_id = embedded_id
        elif dni and by_document.get(dni) in kept_patient_ids:
            patient_id = by_document[dni]
        elif embedded_id and embedded_id in all_ids:
            patient_id, rescued = embedded_id, True
        elif dni and dni in by_document:
            patient_id, rescued = by_document[dni], True
        elif dni:
            patient_id = synthetic_by_document.get(dni)
            if not patient_id:
                seed = _synthetic(embedded, first_name=embedded.get('first_name'),
                                  last_name=embedded.get('last_name'), document_value=dni)
                synthetic.append(seed)
                patient_id = synthetic_by_document[dni] = by_document[dni] = seed['id']
                all_ids.add(patient_id)
                kept_patient_ids.add(patient_id)
                stats.note('synthetic_patient_created')
        else:
            key = _name_key(embedded.get('first_name'), embedded.get('last_name'))
            if key and key in by_name:
                patient_id = by_name[key]
                rescued = patient_id not in kept_patient_ids
                stats.note('matched_by_name')

        if patient_id and rescued:
            rescued_ids.add(patient_id)
            kept_patient_ids.add(patient_id)
            stats.note('rescued_patient')

        if not patient_id:
            first = (embedded.get('first_name') or '').strip() or 'Unknown'
            last = (embedded.get('last_name') or '').strip() or 'Unknown'
            key = f'{first.lower()}|{last.lower()}'
            patient_id = synthetic_by_name.get(key)
            if not patient_id:
                seed = _synthetic(embedded, first_name=first, last_name=last, document_value=object_id())
                synthetic.append(seed)
                patient_id = synthetic_by_name[key] = seed['id']
                all_ids.add(patient_id)
                kept_patient_ids.add(patient_id)
                stats.note('synthetic_patient_no_dni')

        medic_id, referring_doctor = resolve_medic(study.get('medic'), known_user_ids)
        if not medic_id and not referring_doctor:
            medic_id = lab_owner_id
        flags = study.get('studies') or {}
        seeds.append({
            'id': study_id,
            'date': to_iso(date),
            'protocol': study.get('protocol'),
            'studies': [code for code, wanted in flags.items() if wanted],
            'noOrder': bool(study.get('noOrder')),
            'medicId': medic_id,
            'referringDoctor': referring_doctor,
            'patientId': patient_id,
        })

    stats.kept = len(seeds)
    return StudiesResult(studies=seeds, discarded=discarded, synthetic_patients=synthetic,
                         rescued_patient_ids=rescued_ids, kept_ids={s['id'] for s in seeds}, stats=stats)
