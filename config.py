import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Invoice generation
    DEFAULT_TAX_RATE = str(data.get("DEFAULT_TAX_RATE", "18.00"))  # Percent
    DEFAULT_DUE_DAYS = data.get("DEFAULT_DUE_DAYS", 15)  # Days after issue date
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "USD")
    INVOICE_NUMBER_MAX_ATTEMPTS = data.get("INVOICE_NUMBER_MAX_ATTEMPTS", 10)

    # Notifications and payment provider
    INVOICE_NOTIFICATION_WEBHOOK = data.get("INVOICE_NOTIFICATION_WEBHOOK", None)
    PAYMENT_WEBHOOK_SECRET = data.get("PAYMENT_WEBHOOK_SECRET", None)  # Unset refuses all webhook events
