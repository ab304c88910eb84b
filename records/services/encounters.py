from rest_framework.exceptions import NotFound, ValidationError

from records.models import Encounter


def _meaningful(value) -> bool:
    if isinstance(value, list):
        return any(v and (not isinstance(v, str) or v.strip()) for v in value)
    if isinstance(value, str):
        return value.strip() != ''
    return bool(value)


def validate_encounter_data(data) -> None:
    """Reject encounters whose forms carry no filled-in value.

    ``data`` maps form names to ``{"values": {...}}``; at least one form
    must hold a non-blank value.
    """
    if not isinstance(data, dict) or not data:
        raise ValidationError({'data': 'Encounter data cannot be empty'})
    for form in data.values():
        values = form.get('values') if isinstance(form, dict) else None
        if isinstance(values, dict) and any(_meaningful(v) for v in values.values()):
            return
    raise ValidationError({'data': 'Encounter data cannot be empty'})


def visible_encounters():
    """Encounters of soft-deleted patients are hidden."""
    return Encounter.objects.select_related('patient', 'medic').filter(patient__deleted=False)


def get_encounter_or_404(encounter_id) -> Encounter:
    encounter = Encounter.objects.select_related('patient').filter(id=encounter_id).first()
    if not encounter or encounter.patient.deleted:
        raise NotFound('Record not found')
    return encounter


def format_encounter(encounter: Encounter) -> dict:
    return {
        'id': encounter.id,
        'medicId': encounter.medic_id,
        'patientId': encounter.patient_id,
        'date': encounter.date.isoformat(),
        'data': encounter.data,
        'createdAt': encounter.created_at.isoformat() if encounter.created_at else None,
    }
