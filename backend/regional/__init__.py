"""
Regional configuration for CareLedger.

Pure, read-only data describing each jurisdiction the ledger operates in:
currency, taxes, chart of accounts, fiscal year, reporting requirements
and regulatory body. Nothing in this package touches the database.
"""

from regional.configs import (
    AccountingStandard,
    ChartAccount,
    CurrencyConfig,
    FiscalYear,
    RegionalConfig,
    RegulatoryBody,
    ReportingRequirements,
    TaxConfig,
)
from accounting.exceptions import ConfigNotFound
from regional.provider import get_config, supported_regions

__all__ = [
    "AccountingStandard",
    "ChartAccount",
    "ConfigNotFound",
    "CurrencyConfig",
    "FiscalYear",
    "RegionalConfig",
    "RegulatoryBody",
    "ReportingRequirements",
    "TaxConfig",
    "get_config",
    "supported_regions",
]
