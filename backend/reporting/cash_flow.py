# reporting/cash_flow.py
"""
Cash account detection and cash-flow classification.

Cash accounts are identified by code prefix (settings.LEDGER_CASH_ACCOUNT_PREFIXES).
Each cash movement is classified into operating, investing or financing
activity by a pluggable callable named in settings.LEDGER_CASH_FLOW_CLASSIFIER:

    def classifier(ctx, tx, counterpart_entries) -> str

counterpart_entries are the transaction's non-cash entries.
"""

from django.conf import settings
from django.utils.module_loading import import_string


OPERATING = "operating"
INVESTING = "investing"
FINANCING = "financing"
ACTIVITIES = (OPERATING, INVESTING, FINANCING)

DEFAULT_CLASSIFIER = "reporting.cash_flow.classify_by_chart_category"

CATEGORY_ACTIVITY = {
    "fixed-asset": INVESTING,
    "long-term-liability": FINANCING,
    "equity": FINANCING,
}


def cash_account_prefixes() -> tuple[str, ...]:
    prefixes = getattr(settings, "LEDGER_CASH_ACCOUNT_PREFIXES", ("10",))
    if isinstance(prefixes, str):
        prefixes = prefixes.split(",")
    return tuple(p.strip() for p in prefixes if p.strip())


def is_cash_account(code: str, prefixes=None) -> bool:
    prefixes = prefixes if prefixes is not None else cash_account_prefixes()
    return any(code.startswith(prefix) for prefix in prefixes)


def get_classifier():
    return import_string(getattr(settings, "LEDGER_CASH_FLOW_CLASSIFIER", DEFAULT_CLASSIFIER))


def classify_by_chart_category(ctx, tx, counterpart_entries) -> str:
    """
    Classify by the regional chart category of the largest counterpart.

    Fixed assets are investing; long-term liabilities and equity are
    financing; everything else, including accounts outside the chart, is
    operating.
    """
    if not counterpart_entries:
        return OPERATING
    largest = max(counterpart_entries, key=lambda entry: abs(entry.net))
    chart_account = ctx.config.accounting_standard.lookup(largest.account.code)
    if chart_account is None:
        return OPERATING
    return CATEGORY_ACTIVITY.get(chart_account.category, OPERATING)
