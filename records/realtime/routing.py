from django.urls import path

from records.realtime.consumers import AppointmentsConsumer

websocket_urlpatterns = [
    path("ws/appointments/", AppointmentsConsumer.as_asgi()),
]
