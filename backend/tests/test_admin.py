# tests/test_admin.py
"""
Tests for the Django admin registrations.

Ledger models and events are viewable in the admin but never writable
there.
"""

import pytest
from django.contrib import admin
from django.test import RequestFactory
from django.urls import reverse

from accounting.models import Account, Invoice, Transaction
from events.models import BusinessEvent


LEDGER_MODELS = [Account, Transaction, Invoice, BusinessEvent]


@pytest.fixture
def admin_request(admin_user):
    request = RequestFactory().get("/admin/")
    request.user = admin_user
    return request


@pytest.mark.django_db
class TestAdminRegistration:

    @pytest.mark.parametrize("model", LEDGER_MODELS)
    def test_registered_read_only(self, model, admin_request):
        assert admin.site.is_registered(model)
        model_admin = admin.site._registry[model]

        assert model_admin.has_view_permission(admin_request)
        assert not model_admin.has_add_permission(admin_request)
        assert not model_admin.has_change_permission(admin_request)
        assert not model_admin.has_delete_permission(admin_request)

    def test_transaction_inline_is_read_only(self, admin_request, book):
        tx = book("1000", "4000", "75.00")
        model_admin = admin.site._registry[Transaction]

        inlines = model_admin.get_inline_instances(admin_request, tx)
        assert len(inlines) == 1
        assert not inlines[0].has_add_permission(admin_request, tx)
        assert not inlines[0].has_delete_permission(admin_request, tx)


@pytest.mark.django_db
class TestAdminPages:

    def test_changelists_render(self, admin_client, book):
        book("1000", "4000", "75.00")

        for model in (Account, Transaction, BusinessEvent):
            url = reverse(f"admin:{model._meta.app_label}_{model._meta.model_name}_changelist")
            response = admin_client.get(url)
            assert response.status_code == 200, url

    def test_transaction_page_has_no_save(self, admin_client, book):
        tx = book("1000", "4000", "75.00")

        response = admin_client.get(reverse("admin:accounting_transaction_change", args=[tx.pk]))

        assert response.status_code == 200
        assert b'name="_save"' not in response.content
        assert b"75.00" in response.content

    def test_post_to_change_page_is_refused(self, admin_client, book):
        tx = book("1000", "4000", "75.00")

        response = admin_client.post(
            reverse("admin:accounting_transaction_change", args=[tx.pk]),
            {"description": "Edited in admin"},
        )

        assert response.status_code == 403
        tx.refresh_from_db()
        assert tx.description != "Edited in admin"
