from django.contrib import admin
from django.urls import path

from pins.api import (
    ApprovePinRequestView,
    CheckResultView,
    PinDetailView,
    PinListCreateView,
    PinMetricsView,
    PinRequestListCreateView,
    RejectPinRequestView,
    ResetPinMetricsView,
)
from results.api import (
    ApproveResultView,
    BulkResultUploadView,
    RejectResultView,
    ReopenResultView,
    ResultDetailView,
    ResultListCreateView,
    SubmitResultView,
)


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/results/", ResultListCreateView.as_view(), name="result-list"),
    path("api/results/bulk/", BulkResultUploadView.as_view(), name="result-bulk"),
    path("api/results/<int:pk>/", ResultDetailView.as_view(), name="result-detail"),
    path("api/results/<int:pk>/submit/", SubmitResultView.as_view(), name="result-submit"),
    path("api/results/<int:pk>/approve/", ApproveResultView.as_view(), name="result-approve"),
    path("api/results/<int:pk>/reject/", RejectResultView.as_view(), name="result-reject"),
    path("api/results/<int:pk>/reopen/", ReopenResultView.as_view(), name="result-reopen"),
    path("api/pins/", PinListCreateView.as_view(), name="pin-list"),
    path("api/pins/metrics/", PinMetricsView.as_view(), name="pin-metrics"),
    path("api/pins/metrics/reset/", ResetPinMetricsView.as_view(), name="pin-metrics-reset"),
    path("api/pins/<int:pk>/", PinDetailView.as_view(), name="pin-detail"),
    path("api/pin-requests/", PinRequestListCreateView.as_view(), name="pin-request-list"),
    path("api/pin-requests/<int:pk>/approve/", ApprovePinRequestView.as_view(), name="pin-request-approve"),
    path("api/pin-requests/<int:pk>/reject/", RejectPinRequestView.as_view(), name="pin-request-reject"),
    path("api/public/check-result/", CheckResultView.as_view(), name="check-result"),
]
