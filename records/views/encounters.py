"""
Encounter endpoints.

Encounters are append-only through the API: they can be listed, read
and created, never edited or removed.  Medics only see their own.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from records.models import Encounter, Patient, User
from records.permissions import authorize
from records.serializers.clinical import EncounterWriteSerializer
from records.services.encounters import (
    format_encounter,
    get_encounter_or_404,
    validate_encounter_data,
    visible_encounters,
)
from records.views.common import paginated

SERVICE = 'encounters'
OWNER_FIELD = 'medic_id'


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def encounters(request):
    if request.method == 'POST':
        grant = authorize(request.user, SERVICE, 'create')
        data = grant.sanitize(request.data)
        if not grant.all:
            data['medicId'] = request.user.id
        s = EncounterWriteSerializer(data=data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        validate_encounter_data(vd['data'])
        medic = User.objects.filter(id=vd.get('medicId') or request.user.id).first()
        patient = Patient.objects.filter(id=vd['patientId'], deleted=False).first()
        if not medic or not patient:
            raise ValidationError('medicId and patientId must reference existing records')
        encounter = Encounter.objects.create(medic=medic, patient=patient, date=vd['date'], data=vd['data'])
        return Response(format_encounter(encounter), status=201)

    grant = authorize(request.user, SERVICE, 'find')
    qs = grant.scope(visible_encounters(), request.user, OWNER_FIELD)
    patient_id = request.query_params.get('patientId')
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    medic_id = request.query_params.get('medicId')
    if medic_id:
        qs = qs.filter(medic_id=medic_id)
    qs = qs.order_by('-date')
    return paginated(request, qs, lambda page: [format_encounter(e) for e in page])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def encounter_detail(request, pk):
    grant = authorize(request.user, SERVICE, 'get')
    encounter = get_encounter_or_404(pk)
    grant.check_owner(encounter.medic_id, request.user)
    return Response(format_encounter(encounter))
