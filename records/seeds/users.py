from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .dumps import oid
from .normalize import strip_doctor_prefix, transform_schedule
from .people import contact_data_seed, personal_data_seed
from .stats import ProcessingStats
from .studies import resolve_medic

ROLE_BY_CLASS = {'SuperUser': 'admin', 'Receptionist': 'receptionist'}
WEIRD_USERNAME = 'weird_user'


@dataclass
class UsersResult:
    users: list
    kept_ids: set
    weird_user_id: Optional[str] = None
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def _md_settings_seed(user: dict, user_id: str) -> dict:
    return {
        'userId': user_id,
        'medicalSpecialty': user.get('medical_specialty'),
        'nationalLicenseNumber': user.get('national_license_number'),
        'stateLicense': user.get('state_license'),
        'stateLicenseNumber': user.get('state_license_number'),
        'scheduleAllWeekCustomTime': bool(user.get('schedule_all_week_custom_time')),
        **transform_schedule(user),
    }


def process_users(users: list, encounters: list, studies: list, *, lab_owner_id: str,
                  default_password: str) -> UsersResult:
    """Drop medics that never saw a patient and reshape the rest.

    Receptionists and super users are always kept.  A medic is active
    when an encounter or a study points at them.
    """
    stats = ProcessingStats(total=len(users))
    known_ids = {oid(u['_id']) for u in users}
    active = {e.get('medic_id') for e in encounters}
    for study in studies:
        medic_id, _ = resolve_medic(study.get('medic'), known_ids)
        if medic_id:
            active.add(medic_id)

    seeds, kept_ids, weird_user_id = [], set(), None
    for user in users:
        user_id = oid(user['_id'])
        klass = user.get('__class')
        if klass not in ROLE_BY_CLASS and user_id not in active:
            stats.discard('medic_without_activity')
            continue
        if not user.get('username'):
            weird_user_id = user_id

        seed = {
            'id': user_id,
            'username': user.get('username') or WEIRD_USERNAME,
            'password': user.get('bf_password') or default_password,
            'roleId': ROLE_BY_CLASS.get(klass, 'medic'),
            'personalData': personal_data_seed(user.get('personal_data'), user_id, name_filter=strip_doctor_prefix),
            'contactData': contact_data_seed(user.get('contact_data')),
        }
        if user_id == lab_owner_id:
            seed['additionalRoleIds'] = ['lab-owner']
        if klass == 'Medic':
            seed['mdSettings'] = _md_settings_seed(user, user_id)
        seeds.append(seed)
        kept_ids.add(user_id)

    stats.kept = len(seeds)
    return UsersResult(users=seeds, kept_ids=kept_ids, weird_user_id=weird_user_id, stats=stats)
