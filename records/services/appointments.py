import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from dateutil.relativedelta import relativedelta
from django.utils import timezone
from rest_framework.exceptions import NotFound

from records.models import Appointment, MdSettings
from records.services.patients import format_patient

logger = logging.getLogger(__name__)

APPOINTMENTS_GROUP = "appointments"
DEFAULT_DURATION = 15


def broadcast(event: str, payload: dict) -> None:
    """Notify websocket clients (``appointments.created|patched|removed``)."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        APPOINTMENTS_GROUP,
        {"type": "appointment.event", "event": f"appointments.{event}", "data": payload},
    )


def visible_appointments():
    return Appointment.objects.select_related(
        'patient', 'patient__personal_data', 'patient__contact_data'
    ).filter(patient__deleted=False)


def get_appointment_or_404(appointment_id) -> Appointment:
    appointment = visible_appointments().filter(id=appointment_id).first()
    if not appointment:
        raise NotFound('Record not found')
    return appointment


def durations_for(medic_ids) -> dict:
    rows = MdSettings.objects.filter(user_id__in=set(medic_ids)).values_list('user_id', 'encounter_duration')
    return dict(rows)


def format_appointment(appointment: Appointment, durations: dict = None) -> dict:
    if durations is None:
        durations = durations_for([appointment.medic_id])
    return {
        'id': appointment.id,
        'medicId': appointment.medic_id,
        'patientId': appointment.patient_id,
        'startDate': appointment.start_date.isoformat(),
        'extra': appointment.extra,
        'duration': durations.get(appointment.medic_id) or DEFAULT_DURATION,
        'patient': format_patient(appointment.patient),
    }


def cleanup_old_appointments(months: int = 3, now=None) -> int:
    """Delete appointments that started more than ``months`` ago."""
    cutoff = (now or timezone.now()) - relativedelta(months=months)
    deleted, _ = Appointment.objects.filter(start_date__lt=cutoff).delete()
    logger.info("appointments cleanup cutoff=%s deleted=%d", cutoff.isoformat(), deleted)
    return deleted
