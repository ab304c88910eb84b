"""
``create_seeds``: turn the legacy dumps into API-shaped seed files.

Each step only sees what the previous steps kept, so the order below
matters: users and patients first, then everything that references
them, then the study results that reference studies.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .appointments import process_appointments
from .dedupe import apply_patient_remap, deduplicate_patients
from .dumps import load_dumps, oid
from .encounters import process_encounters
from .licenses import process_licenses
from .patients import patient_seed, process_patients
from .results import process_results
from .studies import process_studies
from .users import process_users
from .writer import clean_seeds_dir, write_seeds

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    stats: dict = field(default_factory=dict)
    rescued: int = 0
    synthetic: int = 0
    discarded: dict = field(default_factory=dict)

    def lines(self) -> list:
        out = ['=== Summary ===']
        for label, stats in self.stats.items():
            out.extend(stats.lines(label))
        if self.rescued:
            out.append(f'Rescued {self.rescued} patient(s) via study references')
        if self.synthetic:
            out.append(f'Created {self.synthetic} synthetic patient(s) from orphan studies')
        for name, count in self.discarded.items():
            if count:
                out.append(f'  discarded/{name}.json: {count} records')
        return out


def create_seeds(dumps_dir, seeds_dir, *, lab_owner_id: str, default_password: str, now=None) -> SeedReport:
    clean_seeds_dir(seeds_dir)
    dumps = load_dumps(dumps_dir)
    logger.info('dumps_loaded %s', dumps.counts())

    dedup = deduplicate_patients(dumps.patients)
    apply_patient_remap(dedup.remap, dumps.encounters, dumps.appointments, dumps.studies)
    if dedup.remap:
        logger.info('patients_merged count=%s', len(dedup.remap))

    users = process_users(dumps.users, dumps.encounters, dumps.studies,
                          lab_owner_id=lab_owner_id, default_password=default_password)
    patients = process_patients(dedup.patients, dumps.encounters, dumps.studies)
    encounters = process_encounters(dumps.encounters, users.kept_ids, patients.kept_ids,
                                    weird_user_id=users.weird_user_id, lab_owner_id=lab_owner_id)
    appointments = process_appointments(dumps.appointments, users.kept_ids, patients.kept_ids, now=now)
    studies = process_studies(dumps.studies, dedup.patients, patients.kept_ids,
                              known_user_ids={oid(u['_id']) for u in dumps.users}, lab_owner_id=lab_owner_id)

    seeded_ids = {p['id'] for p in patients.patients}
    for patient in dedup.patients:
        patient_id = oid(patient['_id'])
        if patient_id in studies.rescued_patient_ids and patient_id not in seeded_ids:
            patients.patients.append(patient_seed(patient))
            seeded_ids.add(patient_id)
    patients.patients.extend(studies.synthetic_patients)

    results = process_results(dumps.results, studies.kept_ids)
    licenses = process_licenses(dumps.licenses, users.kept_ids, now=now)

    write_seeds(
        seeds_dir,
        {
            'users': users.users,
            'patients': patients.patients,
            'encounters': encounters.encounters,
            'appointments': appointments.appointments,
            'studies': studies.studies,
            'results': results.results,
            'licenses': licenses.licenses,
        },
        {'encounters': encounters.discarded, 'studies': studies.discarded},
    )

    return SeedReport(
        stats={
            'Dedup': dedup.stats,
            'Users': users.stats,
            'Patients': patients.stats,
            'Encounters': encounters.stats,
            'Appointments': appointments.stats,
            'Studies': studies.stats,
            'Results': results.stats,
            'Licenses': licenses.stats,
        },
        rescued=len(studies.rescued_patient_ids),
        synthetic=len(studies.synthetic_patients),
        discarded={'encounters': len(encounters.discarded), 'studies': len(studies.discarded)},
    )
