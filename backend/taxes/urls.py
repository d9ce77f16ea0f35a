from django.urls import path

from .views import TransactionTaxView, TaxReportView, TaxSettingsValidationView

app_name = "taxes"

urlpatterns = [
    path("transactions/<int:pk>/", TransactionTaxView.as_view(), name="transaction-tax"),
    path("report/", TaxReportView.as_view(), name="tax-report"),
    path("settings/validate/", TaxSettingsValidationView.as_view(), name="tax-settings-validate"),
]
