from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from records.models import Appointment, Patient, User
from records.permissions import authorize
from records.serializers.clinical import AppointmentListQuerySerializer, AppointmentWriteSerializer
from records.services.appointments import (
    broadcast,
    durations_for,
    format_appointment,
    get_appointment_or_404,
    visible_appointments,
)
from records.views.common import paginated

SERVICE = 'appointments'


def _format_page(page):
    durations = durations_for(a.medic_id for a in page)
    return [format_appointment(a, durations) for a in page]


def _check_references(vd):
    if 'medicId' in vd and not User.objects.filter(id=vd['medicId']).exists():
        raise ValidationError({'medicId': 'unknown medic'})
    if 'patientId' in vd and not Patient.objects.filter(id=vd['patientId'], deleted=False).exists():
        raise ValidationError({'patientId': 'unknown patient'})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    if request.method == 'POST':
        grant = authorize(request.user, SERVICE, 'create')
        s = AppointmentWriteSerializer(data=grant.sanitize(request.data))
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        _check_references(vd)
        appointment = Appointment.objects.create(
            medic_id=vd['medicId'], patient_id=vd['patientId'], start_date=vd['startDate'], extra=vd['extra'],
        )
        payload = format_appointment(visible_appointments().get(id=appointment.id))
        broadcast('created', payload)
        return Response(payload, status=201)

    authorize(request.user, SERVICE, 'find')
    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = visible_appointments()
    if vd.get('medicId'):
        qs = qs.filter(medic_id=vd['medicId'])
    if vd.get('patientId'):
        qs = qs.filter(patient_id=vd['patientId'])
    if vd.get('from'):
        qs = qs.filter(start_date__gte=vd['from'])
    if vd.get('to'):
        qs = qs.filter(start_date__lt=vd['to'])
    return paginated(request, qs.order_by('start_date'), _format_page)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, pk):
    if request.method == 'GET':
        authorize(request.user, SERVICE, 'get')
        return Response(format_appointment(get_appointment_or_404(pk)))

    if request.method == 'PATCH':
        grant = authorize(request.user, SERVICE, 'patch')
        appointment = get_appointment_or_404(pk)
        s = AppointmentWriteSerializer(data=grant.sanitize(request.data), partial=True)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        _check_references(vd)
        for key, attr in (('medicId', 'medic_id'), ('patientId', 'patient_id'),
                          ('startDate', 'start_date'), ('extra', 'extra')):
            if key in vd:
                setattr(appointment, attr, vd[key])
        appointment.save()
        payload = format_appointment(get_appointment_or_404(pk))
        broadcast('patched', payload)
        return Response(payload)

    authorize(request.user, SERVICE, 'remove')
    appointment = get_appointment_or_404(pk)
    payload = format_appointment(appointment)
    appointment.delete()
    broadcast('removed', payload)
    return Response(payload)
