# regional/configs.py
"""
Regional configuration records.

Every jurisdiction is described by ONE immutable RegionalConfig value.
Components never branch on the region name; they read these records
(tax table, fiscal year, chart of accounts, mandatory reports) and apply
the same generic rules to all of them. Adding a jurisdiction means adding
a record here, nothing else.

The chart of accounts follows a care-home flavoured FRS 102 layout:
- 1xxx assets (10xx cash, 11xx-12xx current, 15xx-16xx fixed)
- 2xxx liabilities (20xx-22xx current, 25xx long-term)
- 3xxx equity
- 4xxx revenue
- 5xxx expenses
"""

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


# =============================================================================
# Value Objects
# =============================================================================

@dataclass(frozen=True)
class CurrencyConfig:
    code: str
    symbol: str
    name: str
    decimals: int = 2
    format: str = "#,##0.00"


@dataclass(frozen=True)
class TaxConfig:
    """
    One tax levied in a region.

    threshold: trailing-12-month revenue below which the tax does not apply.
    exemptions: service types the tax never applies to.
    """
    name: str
    code: str
    rate: Decimal
    threshold: Optional[Decimal] = None
    exemptions: Tuple[str, ...] = ()

    def is_exempt(self, service_type: str) -> bool:
        return bool(service_type) and service_type in self.exemptions


@dataclass(frozen=True)
class ChartAccount:
    code: str
    name: str
    type: str  # asset, liability, equity, revenue, expense
    category: str


@dataclass(frozen=True)
class AccountingStandard:
    name: str
    code: str
    description: str
    chart_of_accounts: Mapping[str, ChartAccount]

    def lookup(self, code: str) -> Optional[ChartAccount]:
        return self.chart_of_accounts.get(code)


@dataclass(frozen=True)
class FiscalYear:
    start_month: int
    start_day: int


@dataclass(frozen=True)
class ReportingRequirements:
    frequency: str  # monthly, quarterly, annually
    deadlines: Mapping[str, str]
    mandatory_reports: Tuple[str, ...]


@dataclass(frozen=True)
class RegulatoryBody:
    name: str
    code: str
    requirements: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RegionalConfig:
    region: str
    currency: CurrencyConfig
    taxes: Tuple[TaxConfig, ...]
    accounting_standard: AccountingStandard
    fiscal_year: FiscalYear
    reporting_requirements: ReportingRequirements
    regulatory_body: RegulatoryBody

    def tax(self, code: str) -> Optional[TaxConfig]:
        for tax in self.taxes:
            if tax.code == code:
                return tax
        return None


# =============================================================================
# Shared Building Blocks
# =============================================================================

def _chart(*accounts: ChartAccount) -> Mapping[str, ChartAccount]:
    return MappingProxyType({account.code: account for account in accounts})


def _frozen(mapping: dict) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


CARE_EXEMPTIONS = ("medical-services", "care-services")

GBP = CurrencyConfig(code="GBP", symbol="£", name="British Pound", format="£#,##0.00")
EUR = CurrencyConfig(code="EUR", symbol="€", name="Euro", format="€#,##0.00")

UK_VAT = TaxConfig(
    name="Value Added Tax",
    code="VAT",
    rate=Decimal("20"),
    threshold=Decimal("85000"),
    exemptions=CARE_EXEMPTIONS,
)

IE_VAT = TaxConfig(
    name="Value Added Tax",
    code="VAT",
    rate=Decimal("23"),
    threshold=Decimal("75000"),
    exemptions=CARE_EXEMPTIONS,
)

CARE_HOME_CHART = _chart(
    ChartAccount("1000", "Cash and Bank", "asset", "current-asset"),
    ChartAccount("1010", "Petty Cash", "asset", "current-asset"),
    ChartAccount("1020", "Resident Monies Held", "asset", "current-asset"),
    ChartAccount("1100", "Trade Debtors", "asset", "current-asset"),
    ChartAccount("1110", "Local Authority Debtors", "asset", "current-asset"),
    ChartAccount("1200", "Prepayments", "asset", "current-asset"),
    ChartAccount("1300", "Stock - Medical Supplies", "asset", "current-asset"),
    ChartAccount("1500", "Land and Buildings", "asset", "fixed-asset"),
    ChartAccount("1600", "Fixtures and Equipment", "asset", "fixed-asset"),
    ChartAccount("1610", "Vehicles", "asset", "fixed-asset"),
    ChartAccount("2000", "Trade Creditors", "liability", "current-liability"),
    ChartAccount("2100", "VAT Control", "liability", "current-liability"),
    ChartAccount("2200", "Accruals", "liability", "current-liability"),
    ChartAccount("2210", "PAYE and Social Security", "liability", "current-liability"),
    ChartAccount("2300", "Resident Deposits", "liability", "current-liability"),
    ChartAccount("SUSP", "Suspense Account", "liability", "current-liability"),
    ChartAccount("2500", "Bank Loans", "liability", "long-term-liability"),
    ChartAccount("3000", "Share Capital", "equity", "equity"),
    ChartAccount("3100", "Retained Earnings", "equity", "equity"),
    ChartAccount("4000", "Resident Care Fees", "revenue", "operating-revenue"),
    ChartAccount("4100", "Local Authority Funding", "revenue", "operating-revenue"),
    ChartAccount("4200", "Health Service Funding", "revenue", "operating-revenue"),
    ChartAccount("4900", "Other Income", "revenue", "other-revenue"),
    ChartAccount("5000", "Care Staff Wages", "expense", "staff-costs"),
    ChartAccount("5010", "Nursing Staff Wages", "expense", "staff-costs"),
    ChartAccount("5100", "Medical Supplies", "expense", "operating-expense"),
    ChartAccount("5200", "Catering", "expense", "operating-expense"),
    ChartAccount("5300", "Premises and Utilities", "expense", "operating-expense"),
    ChartAccount("5400", "Insurance", "expense", "operating-expense"),
    ChartAccount("5500", "Regulatory Fees", "expense", "operating-expense"),
    ChartAccount("5900", "Depreciation", "expense", "non-cash-expense"),
)

UK_GAAP = AccountingStandard(
    name="UK GAAP",
    code="FRS102",
    description="Financial Reporting Standard 102",
    chart_of_accounts=CARE_HOME_CHART,
)

IE_GAAP = AccountingStandard(
    name="FRS 102",
    code="FRS102",
    description="Financial Reporting Standard 102 (Ireland)",
    chart_of_accounts=CARE_HOME_CHART,
)

APRIL_YEAR = FiscalYear(start_month=4, start_day=1)
CALENDAR_YEAR = FiscalYear(start_month=1, start_day=1)


def _uk_requirements(return_name: str, deadline_key: str, deadline: str) -> ReportingRequirements:
    return ReportingRequirements(
        frequency="quarterly",
        deadlines=_frozen({
            "vat": "1 month and 7 days after period end",
            "annual-accounts": "9 months after year end",
            deadline_key: deadline,
        }),
        mandatory_reports=(
            "VAT Return",
            "Annual Accounts",
            return_name,
            "Corporation Tax Return",
        ),
    )


# =============================================================================
# Jurisdictions
# =============================================================================

ENGLAND = RegionalConfig(
    region="england",
    currency=GBP,
    taxes=(UK_VAT,),
    accounting_standard=UK_GAAP,
    fiscal_year=APRIL_YEAR,
    reporting_requirements=_uk_requirements(
        "CQC Financial Return", "cqc-returns", "Annually by April 30th",
    ),
    regulatory_body=RegulatoryBody(
        name="Care Quality Commission",
        code="CQC",
        requirements=(
            "Annual Financial Return",
            "Market Oversight Submission",
            "Provider Information Return",
        ),
    ),
)

SCOTLAND = RegionalConfig(
    region="scotland",
    currency=GBP,
    taxes=(UK_VAT,),
    accounting_standard=UK_GAAP,
    fiscal_year=APRIL_YEAR,
    reporting_requirements=_uk_requirements(
        "Care Inspectorate Financial Return",
        "care-inspectorate-returns",
        "Annually by May 31st",
    ),
    regulatory_body=RegulatoryBody(
        name="Care Inspectorate Scotland",
        code="CIS",
        requirements=(
            "Annual Financial Return",
            "Provider Service Information Return",
            "Financial Viability Statement",
        ),
    ),
)

WALES = RegionalConfig(
    region="wales",
    currency=GBP,
    taxes=(UK_VAT,),
    accounting_standard=UK_GAAP,
    fiscal_year=APRIL_YEAR,
    reporting_requirements=_uk_requirements(
        "CIW Financial Return", "ciw-returns", "Annually by April 30th",
    ),
    regulatory_body=RegulatoryBody(
        name="Care Inspectorate Wales",
        code="CIW",
        requirements=(
            "Annual Financial Return",
            "Statement of Purpose",
            "Financial Viability Assessment",
        ),
    ),
)

BELFAST = RegionalConfig(
    region="belfast",
    currency=GBP,
    taxes=(UK_VAT,),
    accounting_standard=UK_GAAP,
    fiscal_year=APRIL_YEAR,
    reporting_requirements=_uk_requirements(
        "RQIA Financial Return", "rqia-returns", "Annually by April 30th",
    ),
    regulatory_body=RegulatoryBody(
        name="Regulation and Quality Improvement Authority",
        code="RQIA",
        requirements=(
            "Annual Financial Return",
            "Statement of Purpose",
            "Financial Viability Assessment",
        ),
    ),
)

DUBLIN = RegionalConfig(
    region="dublin",
    currency=EUR,
    taxes=(IE_VAT,),
    accounting_standard=IE_GAAP,
    fiscal_year=CALENDAR_YEAR,
    reporting_requirements=ReportingRequirements(
        frequency="quarterly",
        deadlines=_frozen({
            "vat": "19th of the month after period end",
            "annual-accounts": "9 months after year end",
            "hiqa-returns": "Annually by March 31st",
        }),
        mandatory_reports=(
            "VAT Return",
            "Annual Accounts",
            "HIQA Financial Return",
            "Corporation Tax Return",
        ),
    ),
    regulatory_body=RegulatoryBody(
        name="Health Information and Quality Authority",
        code="HIQA",
        requirements=(
            "Annual Financial Return",
            "Statement of Purpose",
            "Financial Viability Assessment",
        ),
    ),
)


REGIONAL_CONFIGS: Mapping[str, RegionalConfig] = MappingProxyType({
    config.region: config
    for config in (ENGLAND, SCOTLAND, WALES, BELFAST, DUBLIN)
})
