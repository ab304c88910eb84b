from __future__ import annotations

from django.db import transaction
from django.utils.dateparse import parse_time
from rest_framework.exceptions import NotFound, ValidationError

from records.models import MdSettings, Role, User, UserRole
from records.services.personal_data import (
    create_contact_data,
    format_contact_data,
    format_personal_data,
    update_contact_data,
    update_personal_data,
    upsert_personal_data,
)

MD_SETTINGS_FIELDS = {
    'medicalSpecialty': 'medical_specialty',
    'nationalLicenseNumber': 'national_license_number',
    'stateLicense': 'state_license',
    'stateLicenseNumber': 'state_license_number',
    'isMedicOfTheYear': 'is_medic_of_the_year',
    'encounterDuration': 'encounter_duration',
}
for _day in MdSettings.WEEKDAYS:
    MD_SETTINGS_FIELDS[f'{_day}Start'] = f'{_day}_start'
    MD_SETTINGS_FIELDS[f'{_day}End'] = f'{_day}_end'


def get_user_or_404(user_id) -> User:
    user = User.objects.select_related('personal_data', 'contact_data', 'role').filter(id=user_id).first()
    if not user:
        raise NotFound(f'No record found for id \'{user_id}\'')
    return user


def _role_or_400(role_id) -> Role:
    role = Role.objects.filter(id=role_id).first()
    if not role:
        raise ValidationError({'roleId': f'unknown role "{role_id}"'})
    return role


def set_additional_roles(user: User, role_ids) -> None:
    UserRole.objects.filter(user=user).exclude(role_id__in=role_ids).delete()
    for role_id in role_ids:
        UserRole.objects.get_or_create(user=user, role=_role_or_400(role_id))


def upsert_md_settings(user: User, data: dict) -> MdSettings:
    settings_obj, _ = MdSettings.objects.get_or_create(user=user)
    for key, attr in MD_SETTINGS_FIELDS.items():
        if key in data:
            value = data[key]
            if attr == 'encounter_duration' and value in (None, ''):
                value = 15
            elif attr.endswith(('_start', '_end')) and isinstance(value, str):
                value = parse_time(value.strip()) if value.strip() else None
            setattr(settings_obj, attr, value)
    settings_obj.save()
    return settings_obj


@transaction.atomic
def create_user(data: dict, *, user_id=None) -> User:
    username = data['username']
    if User.objects.filter(username=username).exists():
        raise ValidationError({'username': 'username already taken'})
    user = User(username=username, role=_role_or_400(data.get('roleId') or 'medic'))
    if user_id:
        user.id = user_id
    if data.get('password'):
        user.set_password(data['password'])
    else:
        user.set_unusable_password()
    user.personal_data = upsert_personal_data(data.get('personalData'))
    user.contact_data = create_contact_data(data.get('contactData'))
    user.save()
    if data.get('additionalRoleIds'):
        set_additional_roles(user, data['additionalRoleIds'])
    if data.get('mdSettings'):
        upsert_md_settings(user, data['mdSettings'])
    return user


@transaction.atomic
def update_user(user: User, data: dict) -> User:
    if 'roleId' in data:
        user.role = _role_or_400(data['roleId'])
    if data.get('password'):
        user.set_password(data['password'])
    if 'isActive' in data:
        user.is_active = bool(data['isActive'])
    if data.get('personalData'):
        if user.personal_data_id:
            update_personal_data(user.personal_data, data['personalData'])
        else:
            user.personal_data = upsert_personal_data(data['personalData'])
    if data.get('contactData'):
        if user.contact_data_id:
            update_contact_data(user.contact_data, data['contactData'])
        else:
            user.contact_data = create_contact_data(data['contactData'])
    user.save()
    if 'additionalRoleIds' in data:
        set_additional_roles(user, data['additionalRoleIds'] or [])
    if data.get('mdSettings'):
        upsert_md_settings(user, data['mdSettings'])
    return user


def format_md_settings(md: MdSettings | None) -> dict | None:
    if md is None:
        return None
    out = {'id': md.id, 'userId': md.user_id}
    for key, attr in MD_SETTINGS_FIELDS.items():
        value = getattr(md, attr)
        if attr.endswith(('_start', '_end')) and value is not None:
            value = value.strftime('%H:%M')
        out[key] = value
    return out


def format_user(user: User) -> dict:
    md = MdSettings.objects.filter(user=user).first()
    return {
        'id': user.id,
        'username': user.username,
        'roleId': user.role_id,
        'additionalRoleIds': list(user.user_roles.values_list('role_id', flat=True)),
        'isActive': user.is_active,
        'twoFactorEnabled': user.two_factor_enabled,
        'personalData': format_personal_data(user.personal_data),
        'contactData': format_contact_data(user.contact_data),
        'mdSettings': format_md_settings(md),
    }
