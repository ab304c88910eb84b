"""
URL mappings for the records API.

Paths carry no trailing slash, matching the web client.  Resource
collections live at ``api/<service>`` and single records at
``api/<service>/<id>``.
"""
from django.urls import path, include

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, profile_action, profile_me
from .views import health
from .views.appointments import appointment_detail, appointments
from .views.encounters import encounter_detail, encounters
from .views.patients import patient_detail, patients
from .views.studies import referring_doctor_list, studies, study_detail, study_results
from .views.time_off import time_off_detail, time_off_events
from .views.users import md_settings_detail, roles, user_detail, users

urlpatterns = [
    # auth
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),
    path('api/profile/me', profile_me, name='profile_me'),
    path('api/profile', profile_action, name='profile_action'),

    # people
    path('api/patients', patients, name='patients'),
    path('api/patients/<str:pk>', patient_detail, name='patient_detail'),
    path('api/users', users, name='users'),
    path('api/users/<str:pk>', user_detail, name='user_detail'),
    path('api/md-settings/<str:user_id>', md_settings_detail, name='md_settings_detail'),
    path('api/roles', roles, name='roles'),

    # clinical records
    path('api/encounters', encounters, name='encounters'),
    path('api/encounters/<str:pk>', encounter_detail, name='encounter_detail'),
    path('api/appointments', appointments, name='appointments'),
    path('api/appointments/<str:pk>', appointment_detail, name='appointment_detail'),
    path('api/studies', studies, name='studies'),
    path('api/studies/<str:pk>', study_detail, name='study_detail'),
    path('api/study-results', study_results, name='study_results'),
    path('api/referring-doctors', referring_doctor_list, name='referring_doctors'),
    path('api/time-off-events', time_off_events, name='time_off_events'),
    path('api/time-off-events/<str:pk>', time_off_detail, name='time_off_detail'),

    # ops
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
]
