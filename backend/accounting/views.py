# accounting/views.py
"""
Thin views that delegate to the commands layer.

Views handle: tenant resolution, HTTP parsing, response formatting.
Commands handle: business logic, validation, events.

CRITICAL: All mutations MUST go through commands to ensure events are
emitted. Views never call .save() on models.

Every request identifies its tenant with the X-Tenant-ID header;
authentication happens upstream.
"""

import json

from django.core.serializers.json import DjangoJSONEncoder
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from tenant.context import TenantNotResolved, resolve_context
from .exceptions import LedgerError
from .serializers import (
    AccountSerializer,
    AccountCreateSerializer,
    AccountUpdateSerializer,
    AccountHistoryQuerySerializer,
    TransactionSerializer,
    TransactionCreateSerializer,
    BatchCreateSerializer,
    BatchPostSerializer,
    ReconciliationMatchSerializer,
    ReconciliationCreateSerializer,
)
from .commands import (
    create_account,
    update_account,
    seed_chart_of_accounts,
    create_transaction,
    post_transaction,
    void_transaction,
    create_batch_transactions,
    post_batch_transactions,
    perform_reconciliation,
    create_reconciliation,
)
from .queries import (
    get_account,
    list_accounts,
    get_transaction,
    list_transactions,
    get_trial_balance,
    get_account_transactions,
    verify_account_balances,
    generate_batch_report,
)


def json_safe(data):
    """Render Decimals and dates as strings so amounts survive JSON exactly."""
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


class LedgerAPIView(APIView):
    """
    Base view for ledger endpoints.

    Translates ledger errors into {"detail": ...} responses with the
    status each error class carries.
    """

    def handle_exception(self, exc):
        if isinstance(exc, TenantNotResolved):
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, LedgerError):
            return Response(
                {"detail": str(exc), "error": exc.__class__.__name__},
                status=exc.http_status,
            )
        return super().handle_exception(exc)

    def context(self, request):
        return resolve_context(request)


def _transaction_response(ctx, tx, status_code=status.HTTP_200_OK):
    tx = get_transaction(ctx, tx.id)
    return Response(TransactionSerializer(tx).data, status=status_code)


# =============================================================================
# Account Views
# =============================================================================

class AccountListCreateView(LedgerAPIView):
    """
    GET /api/ledger/accounts/ -> list accounts (?type=&parent_id=&search=&status=)
    POST /api/ledger/accounts/ -> create account
    """

    def get(self, request):
        ctx = self.context(request)
        params = request.query_params
        accounts = list_accounts(
            ctx,
            type=params.get("type"),
            parent_id=params.get("parent_id"),
            search=params.get("search"),
            status=params.get("status"),
        ).select_related("parent")
        return Response(AccountSerializer(accounts, many=True).data)

    def post(self, request):
        ctx = self.context(request)

        input_serializer = AccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_account(ctx, **input_serializer.validated_data)
        return Response(AccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AccountDetailView(LedgerAPIView):
    """
    GET /api/ledger/accounts/<pk>/ -> retrieve account
    PATCH /api/ledger/accounts/<pk>/ -> update descriptive fields
    """

    def get(self, request, pk):
        ctx = self.context(request)
        return Response(AccountSerializer(get_account(ctx, pk)).data)

    def patch(self, request, pk):
        ctx = self.context(request)

        input_serializer = AccountUpdateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = update_account(ctx, pk, **input_serializer.validated_data)
        return Response(AccountSerializer(result.data).data)


class AccountTransactionsView(LedgerAPIView):
    """GET /api/ledger/accounts/<pk>/transactions/ -> history with running balance"""

    def get(self, request, pk):
        ctx = self.context(request)

        query = AccountHistoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        history = get_account_transactions(ctx, pk, **query.validated_data)
        return Response(json_safe(history))


class SeedChartView(LedgerAPIView):
    """POST /api/ledger/accounts/seed/ -> create the region's standard chart"""

    def post(self, request):
        ctx = self.context(request)
        result = seed_chart_of_accounts(ctx)
        return Response(
            {"created": AccountSerializer(result.data, many=True).data},
            status=status.HTTP_201_CREATED,
        )


# =============================================================================
# Transaction Views
# =============================================================================

class TransactionListCreateView(LedgerAPIView):
    """
    GET /api/ledger/transactions/ -> list (?status=&start_date=&end_date=&reference=&batch_id=)
    POST /api/ledger/transactions/ -> create PENDING transaction
    """

    def get(self, request):
        ctx = self.context(request)
        params = request.query_params
        transactions = list_transactions(
            ctx,
            status=params.get("status"),
            start_date=params.get("start_date"),
            end_date=params.get("end_date"),
            reference=params.get("reference"),
            batch_id=params.get("batch_id"),
        )
        return Response(TransactionSerializer(transactions, many=True).data)

    def post(self, request):
        ctx = self.context(request)

        input_serializer = TransactionCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_transaction(ctx, **input_serializer.to_command_kwargs())
        return _transaction_response(ctx, result.data, status.HTTP_201_CREATED)


class TransactionDetailView(LedgerAPIView):
    """GET /api/ledger/transactions/<pk>/"""

    def get(self, request, pk):
        ctx = self.context(request)
        return Response(TransactionSerializer(get_transaction(ctx, pk)).data)


class TransactionPostView(LedgerAPIView):
    """POST /api/ledger/transactions/<pk>/post/"""

    def post(self, request, pk):
        ctx = self.context(request)
        result = post_transaction(ctx, pk)
        return _transaction_response(ctx, result.data)


class TransactionVoidView(LedgerAPIView):
    """POST /api/ledger/transactions/<pk>/void/"""

    def post(self, request, pk):
        ctx = self.context(request)
        result = void_transaction(ctx, pk)
        return _transaction_response(ctx, result.data)


class TransactionBatchCreateView(LedgerAPIView):
    """POST /api/ledger/transactions/batch/ -> create all or none"""

    def post(self, request):
        ctx = self.context(request)

        input_serializer = BatchCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_batch_transactions(ctx, input_serializer.to_command_batch())
        ids = [tx.id for tx in result.data]
        transactions = list_transactions(ctx).filter(pk__in=ids)
        return Response(
            TransactionSerializer(transactions, many=True).data,
            status=status.HTTP_201_CREATED,
        )


class TransactionBatchPostView(LedgerAPIView):
    """POST /api/ledger/transactions/batch/post/ -> post all or none"""

    def post(self, request):
        ctx = self.context(request)

        input_serializer = BatchPostSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = post_batch_transactions(ctx, input_serializer.validated_data["transaction_ids"])
        ids = [tx.id for tx in result.data]
        transactions = list_transactions(ctx).filter(pk__in=ids)
        return Response(TransactionSerializer(transactions, many=True).data)


class TransactionBatchReportView(LedgerAPIView):
    """GET /api/ledger/transactions/batches/<batch_id>/report/ -> batch summary"""

    def get(self, request, batch_id):
        ctx = self.context(request)
        return Response(json_safe(generate_batch_report(ctx, batch_id)))


# =============================================================================
# Ledger-wide Views
# =============================================================================

class TrialBalanceView(LedgerAPIView):
    """GET /api/ledger/trial-balance/"""

    def get(self, request):
        ctx = self.context(request)
        return Response(json_safe(get_trial_balance(ctx)))


class BalanceVerificationView(LedgerAPIView):
    """GET /api/ledger/verify-balances/ -> recompute balances from posted entries"""

    def get(self, request):
        ctx = self.context(request)
        return Response(json_safe(verify_account_balances(ctx)))


# =============================================================================
# Reconciliation Views
# =============================================================================

class ReconciliationMatchView(LedgerAPIView):
    """POST /api/ledger/accounts/<pk>/reconciliation/match/ -> match statement lines"""

    def post(self, request, pk):
        ctx = self.context(request)

        input_serializer = ReconciliationMatchSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = perform_reconciliation(
            ctx,
            pk,
            data["start_date"],
            data["end_date"],
            [dict(line) for line in data["statement_lines"]],
        )
        return Response(json_safe(result))


class ReconciliationCreateView(LedgerAPIView):
    """POST /api/ledger/accounts/<pk>/reconciliations/ -> record a reconciliation"""

    def post(self, request, pk):
        ctx = self.context(request)

        input_serializer = ReconciliationCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_reconciliation(ctx, pk, **input_serializer.validated_data)
        reconciliation = result.data["reconciliation"]
        adjustment = result.data["adjustment_transaction"]
        return Response(
            {
                "id": reconciliation.id,
                "public_id": str(reconciliation.public_id),
                "account": reconciliation.account_id,
                "date": reconciliation.date.isoformat(),
                "matched_transaction_ids": list(
                    reconciliation.transactions.values_list("id", flat=True)
                ),
                "adjustment_transaction": (
                    TransactionSerializer(get_transaction(ctx, adjustment.id)).data
                    if adjustment else None
                ),
            },
            status=status.HTTP_201_CREATED,
        )
