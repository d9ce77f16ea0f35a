# accounting/urls.py
"""
URL configuration for the ledger API.

Endpoints:
- /accounts/ - Chart of accounts, history, reconciliation
- /transactions/ - Transaction lifecycle (create, post, void, batches)
- /trial-balance/ - Debit/credit split of all balances
- /verify-balances/ - Balance audit against posted entries
"""

from django.urls import path

from .views import (
    # Account views
    AccountListCreateView,
    AccountDetailView,
    AccountTransactionsView,
    SeedChartView,
    # Transaction views
    TransactionListCreateView,
    TransactionDetailView,
    TransactionPostView,
    TransactionVoidView,
    TransactionBatchCreateView,
    TransactionBatchPostView,
    TransactionBatchReportView,
    # Ledger-wide views
    TrialBalanceView,
    BalanceVerificationView,
    # Reconciliation views
    ReconciliationMatchView,
    ReconciliationCreateView,
)

app_name = "accounting"

urlpatterns = [
    # ==========================================================================
    # Accounts
    # ==========================================================================
    path("accounts/", AccountListCreateView.as_view(), name="account-list"),
    path("accounts/seed/", SeedChartView.as_view(), name="account-seed"),
    path("accounts/<int:pk>/", AccountDetailView.as_view(), name="account-detail"),
    path(
        "accounts/<int:pk>/transactions/",
        AccountTransactionsView.as_view(),
        name="account-transactions",
    ),
    path(
        "accounts/<int:pk>/reconciliation/match/",
        ReconciliationMatchView.as_view(),
        name="account-reconciliation-match",
    ),
    path(
        "accounts/<int:pk>/reconciliations/",
        ReconciliationCreateView.as_view(),
        name="account-reconciliation-create",
    ),

    # ==========================================================================
    # Transactions
    # ==========================================================================
    path("transactions/", TransactionListCreateView.as_view(), name="transaction-list"),
    path("transactions/batch/", TransactionBatchCreateView.as_view(), name="transaction-batch"),
    path(
        "transactions/batch/post/",
        TransactionBatchPostView.as_view(),
        name="transaction-batch-post",
    ),
    path(
        "transactions/batches/<str:batch_id>/report/",
        TransactionBatchReportView.as_view(),
        name="transaction-batch-report",
    ),
    path("transactions/<int:pk>/", TransactionDetailView.as_view(), name="transaction-detail"),
    path("transactions/<int:pk>/post/", TransactionPostView.as_view(), name="transaction-post"),
    path("transactions/<int:pk>/void/", TransactionVoidView.as_view(), name="transaction-void"),

    # ==========================================================================
    # Ledger-wide
    # ==========================================================================
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("verify-balances/", BalanceVerificationView.as_view(), name="verify-balances"),
]
