from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/ledger/", include("accounting.urls")),
    path("api/tax/", include("taxes.urls")),
    path("api/compliance/", include("compliance.urls")),
    path("api/reports/", include("reporting.urls")),
]
