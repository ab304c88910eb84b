from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from records.models import MdSettings, Role, User
from records.permissions import authorize
from records.serializers.users import MdSettingsSerializer, UserWriteSerializer
from records.services.audit import log_action
from records.services.users import (
    create_user,
    format_md_settings,
    format_user,
    get_user_or_404,
    update_user,
    upsert_md_settings,
)
from records.views.common import paginated

SERVICE = 'users'


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def users(request):
    if request.method == 'POST':
        grant = authorize(request.user, SERVICE, 'create')
        s = UserWriteSerializer(data=grant.sanitize(request.data))
        s.is_valid(raise_exception=True)
        user = create_user(s.validated_data)
        log_action(user=request.user, action='user_create', object_type='user', object_id=user.id)
        return Response(format_user(user), status=201)

    grant = authorize(request.user, SERVICE, 'find')
    qs = User.objects.select_related('personal_data', 'contact_data').order_by('username')
    qs = grant.scope(qs, request.user, 'id')
    role_id = request.query_params.get('roleId')
    if role_id:
        qs = qs.filter(role_id=role_id)
    return paginated(request, qs, lambda page: [format_user(u) for u in page])


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    if request.method == 'GET':
        grant = authorize(request.user, SERVICE, 'get')
        user = get_user_or_404(pk)
        grant.check_owner(user.id, request.user)
        return Response(format_user(user))

    grant = authorize(request.user, SERVICE, 'patch')
    user = get_user_or_404(pk)
    grant.check_owner(user.id, request.user)
    data = grant.sanitize(request.data)
    if not grant.all:
        # roles are only changed by callers holding users:patch:all
        data.pop('roleId', None)
        data.pop('additionalRoleIds', None)
    s = UserWriteSerializer(data=data, partial=True)
    s.is_valid(raise_exception=True)
    user = update_user(user, s.validated_data)
    log_action(user=request.user, action='user_update', object_type='user', object_id=user.id,
               detail={'fields': sorted(s.validated_data.keys())})
    return Response(format_user(user))


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def md_settings_detail(request, user_id):
    if request.method == 'GET':
        grant = authorize(request.user, 'md-settings', 'get')
    else:
        grant = authorize(request.user, 'md-settings', 'patch')
    user = get_user_or_404(user_id)
    grant.check_owner(user.id, request.user)
    if request.method == 'GET':
        md = MdSettings.objects.filter(user=user).first()
        if md is None:
            raise NotFound(f'No md settings for user \'{user.id}\'')
        return Response(format_md_settings(md))
    s = MdSettingsSerializer(data=grant.sanitize(request.data), partial=True)
    s.is_valid(raise_exception=True)
    return Response(format_md_settings(upsert_md_settings(user, s.validated_data)))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def roles(request):
    authorize(request.user, 'roles', 'find')
    data = [{'id': r.id, 'permissions': r.permissions} for r in Role.objects.order_by('id')]
    return Response({'ok': True, 'total': len(data), 'data': data})
