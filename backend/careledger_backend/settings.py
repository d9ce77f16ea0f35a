import os
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.environ.get("SECRET_KEY", os.environ.get("DJANGO_SECRET_KEY", "changeme"))
DEBUG = os.getenv("DEBUG", os.getenv("DJANGO_DEBUG", "True")) == "True"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "rest_framework",
    "tenant.apps.TenantConfig",
    "accounting.apps.AccountingConfig",
    "events.apps.EventsConfig",
    "taxes.apps.TaxesConfig",
    "reporting.apps.ReportingConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "careledger_backend.urls"

# Templates are rendered by the admin only.
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "careledger_backend.wsgi.application"

# =============================================================================
# Database Configuration
# =============================================================================
DATABASES = {
    "default": dj_database_url.config(
        env="DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600,
    )
}

LANGUAGE_CODE = "en-gb"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

STATIC_URL = "static/"

# Authentication happens at the platform gateway; the ledger API trusts
# the forwarded X-Tenant-ID header.
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.AllowAny",
    ),
    "DEFAULT_RENDERER_CLASSES": (
        "rest_framework.renderers.JSONRenderer",
    ),
    "UNAUTHENTICATED_USER": None,
}

# =============================================================================
# Ledger Configuration
# =============================================================================
# "advisory": compliance issues are reported, posting always proceeds.
# "blocking": post_transaction refuses transactions with compliance issues.
LEDGER_COMPLIANCE_MODE = os.getenv("LEDGER_COMPLIANCE_MODE", "advisory")

# Accounts whose code starts with one of these prefixes are cash accounts
LEDGER_CASH_ACCOUNT_PREFIXES = tuple(
    prefix.strip()
    for prefix in os.getenv("LEDGER_CASH_ACCOUNT_PREFIXES", "10").split(",")
    if prefix.strip()
)

LEDGER_CASH_FLOW_CLASSIFIER = os.getenv(
    "LEDGER_CASH_FLOW_CLASSIFIER",
    "reporting.cash_flow.classify_by_chart_category",
)

LEDGER_TAX_BASIS = os.getenv("LEDGER_TAX_BASIS", "taxes.engine.transaction_amount_basis")

# Allowed difference between declared and calculated tax
LEDGER_TAX_TOLERANCE = os.getenv("LEDGER_TAX_TOLERANCE", "0.01")

LEDGER_ACCOUNT_HISTORY_MAX_LIMIT = int(os.getenv("LEDGER_ACCOUNT_HISTORY_MAX_LIMIT", "500"))

# =============================================================================
# Structured Logging Configuration
# =============================================================================
from ops.logging_config import get_logging_config
LOGGING = get_logging_config(DEBUG)

VERSION = os.getenv("APP_VERSION", "dev")
