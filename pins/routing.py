from django.urls import path

from .consumers import PinMetricsConsumer

websocket_urlpatterns = [
    path("ws/pins/metrics/", PinMetricsConsumer.as_asgi()),
]
