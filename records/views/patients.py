"""
Patient endpoints.

Listing supports the ranked name/document search (``q``, ``firstName``,
``lastName``, ``documentValue``, ``birthDate``).  Deleting a patient is
a soft delete: the record stays, flagged ``deleted``, and disappears
from lists together with its encounters and appointments.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from records.models import Patient
from records.permissions import authorize
from records.serializers.patients import PatientListQuerySerializer, PatientWriteSerializer
from records.services.patients import (
    create_patient,
    format_patient,
    get_patient_or_404,
    soft_delete_patient,
    update_patient,
)
from records.services.search import has_search, ranked_patient_ids
from records.views.common import ordered_by_ids, paginated

SERVICE = 'patients'


def _format_page(page):
    return [format_patient(p) for p in page]


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def patients(request):
    if request.method == 'POST':
        grant = authorize(request.user, SERVICE, 'create')
        s = PatientWriteSerializer(data=grant.sanitize(request.data))
        s.is_valid(raise_exception=True)
        patient = create_patient(request.user, s.validated_data)
        return Response(format_patient(patient), status=201)

    authorize(request.user, SERVICE, 'find')
    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = Patient.objects.select_related('personal_data', 'contact_data').filter(
        deleted=q.validated_data['deleted']
    )
    if has_search(request.query_params):
        ids = ranked_patient_ids(request.query_params)
        return paginated(request, ordered_by_ids(qs, ids), _format_page)
    qs = qs.order_by('personal_data__last_name', 'personal_data__first_name', 'id')
    return paginated(request, qs, _format_page)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def patient_detail(request, pk):
    if request.method == 'GET':
        authorize(request.user, SERVICE, 'get')
        return Response(format_patient(get_patient_or_404(pk)))

    if request.method == 'PATCH':
        grant = authorize(request.user, SERVICE, 'patch')
        patient = get_patient_or_404(pk)
        s = PatientWriteSerializer(data=grant.sanitize(request.data), partial=True)
        s.is_valid(raise_exception=True)
        patient = update_patient(request.user, patient, s.validated_data)
        return Response(format_patient(patient))

    authorize(request.user, SERVICE, 'remove')
    patient = soft_delete_patient(request.user, get_patient_or_404(pk))
    return Response(format_patient(patient))
