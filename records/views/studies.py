"""
Study and lab result endpoints.

Without ``studies:<method>:all`` a medic is restricted to the studies
they ordered.  ``q`` searches by protocol number when numeric and by
patient name or document otherwise.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from records.models import Patient, Study, StudyResult, User
from records.permissions import authorize
from records.serializers.clinical import StudyWriteSerializer
from records.services.search import has_search, ranked_patient_ids
from records.services.studies import (
    create_study,
    format_result,
    format_study,
    get_study_or_404,
    medic_names,
    referring_doctors,
    update_study,
)
from records.views.common import paginated

SERVICE = 'studies'


def _format_page(page):
    names = medic_names(s.medic_id for s in page)
    return [format_study(s, names) for s in page]


def _check_references(vd):
    if vd.get('medicId') and not User.objects.filter(id=vd['medicId']).exists():
        raise ValidationError({'medicId': 'unknown medic'})
    if 'patientId' in vd and not Patient.objects.filter(id=vd['patientId']).exists():
        raise ValidationError({'patientId': 'unknown patient'})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def studies(request):
    if request.method == 'POST':
        grant = authorize(request.user, SERVICE, 'create')
        data = grant.sanitize(request.data)
        if not grant.all:
            data['medicId'] = request.user.id
        s = StudyWriteSerializer(data=data)
        s.is_valid(raise_exception=True)
        _check_references(s.validated_data)
        study = create_study(s.validated_data)
        return Response(format_study(get_study_or_404(study.id)), status=201)

    grant = authorize(request.user, SERVICE, 'find')
    qs = Study.objects.select_related(
        'patient', 'patient__personal_data', 'patient__contact_data'
    ).prefetch_related('results')
    qs = grant.scope(qs, request.user, 'medic_id')
    patient_id = request.query_params.get('patientId')
    if patient_id:
        qs = qs.filter(patient_id=patient_id)

    q = (request.query_params.get('q') or '').strip()
    if q.isdigit():
        qs = qs.filter(protocol=int(q))
    elif has_search(request.query_params):
        ranked = ranked_patient_ids(request.query_params)
        order = {pid: i for i, pid in enumerate(ranked)}
        found = sorted(qs.filter(patient_id__in=ranked), key=lambda s: (order[s.patient_id], -s.date.timestamp()))
        return paginated(request, found, _format_page)
    return paginated(request, qs.order_by('-date', '-protocol'), _format_page)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def study_detail(request, pk):
    method = {'GET': 'get', 'PATCH': 'patch', 'DELETE': 'remove'}[request.method]
    grant = authorize(request.user, SERVICE, method)
    study = get_study_or_404(pk)
    grant.check_owner(study.medic_id, request.user)

    if method == 'get':
        return Response(format_study(study))

    if method == 'patch':
        data = grant.sanitize(request.data)
        if not grant.all:
            data.pop('medicId', None)
        s = StudyWriteSerializer(data=data, partial=True)
        s.is_valid(raise_exception=True)
        _check_references(s.validated_data)
        update_study(study, s.validated_data)
        return Response(format_study(get_study_or_404(pk)))

    payload = format_study(study)
    study.delete()
    return Response(payload)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def study_results(request):
    authorize(request.user, 'study-results', 'find')
    qs = StudyResult.objects.order_by('study_id', 'type')
    study_id = request.query_params.get('studyId')
    if study_id:
        qs = qs.filter(study_id=study_id)
    return paginated(request, qs, lambda page: [format_result(r) for r in page])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def referring_doctor_list(request):
    authorize(request.user, 'referring-doctors', 'find')
    data = referring_doctors()
    return Response({'ok': True, 'total': len(data), 'data': data})
