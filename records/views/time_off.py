from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from records.models import TimeOffEvent, User
from records.permissions import authorize
from records.serializers.clinical import TimeOffWriteSerializer
from records.services.time_off import apply_time_off, format_time_off, get_time_off_or_404, validate_time_off
from records.views.common import paginated

SERVICE = 'time-off-events'
OWNER_FIELD = 'medic_id'


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def time_off_events(request):
    if request.method == 'POST':
        grant = authorize(request.user, SERVICE, 'create')
        data = grant.sanitize(request.data)
        if not grant.all:
            data['medicId'] = request.user.id
        s = TimeOffWriteSerializer(data=data)
        s.is_valid(raise_exception=True)
        vd = validate_time_off(s.validated_data)
        if not User.objects.filter(id=vd.get('medicId')).exists():
            raise ValidationError({'medicId': 'unknown medic'})
        event = apply_time_off(TimeOffEvent(), vd)
        return Response(format_time_off(event), status=201)

    grant = authorize(request.user, SERVICE, 'find')
    qs = grant.scope(TimeOffEvent.objects.all(), request.user, OWNER_FIELD)
    medic_id = request.query_params.get('medicId')
    if medic_id:
        qs = qs.filter(medic_id=medic_id)
    return paginated(request, qs.order_by('start_date'), lambda page: [format_time_off(e) for e in page])


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def time_off_detail(request, pk):
    method = {'GET': 'get', 'PATCH': 'patch', 'DELETE': 'remove'}[request.method]
    grant = authorize(request.user, SERVICE, method)
    event = get_time_off_or_404(pk)
    grant.check_owner(event.medic_id, request.user)

    if method == 'get':
        return Response(format_time_off(event))

    if method == 'patch':
        data = grant.sanitize(request.data)
        if not grant.all:
            data.pop('medicId', None)
        s = TimeOffWriteSerializer(data=data, partial=True)
        s.is_valid(raise_exception=True)
        event = apply_time_off(event, validate_time_off(s.validated_data, instance=event))
        return Response(format_time_off(event))

    payload = format_time_off(event)
    event.delete()
    return Response(payload)
