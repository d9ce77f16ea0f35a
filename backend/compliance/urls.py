from django.urls import path

from .views import TransactionComplianceView, ComplianceReportView

app_name = "compliance"

urlpatterns = [
    path(
        "transactions/<int:pk>/",
        TransactionComplianceView.as_view(),
        name="transaction-compliance",
    ),
    path("report/", ComplianceReportView.as_view(), name="compliance-report"),
]
