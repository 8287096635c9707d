import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT.lower() == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./aminius.db")

# Connection pool (ignored for SQLite)
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "0"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
DB_LOG_SLOW_QUERIES = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
DB_SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

# "Today" for agents is evaluated in this timezone (cron jobs run in it too)
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Africa/Nairobi")

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://aminius.netlify.app,http://localhost:4200",
).split(",")

FRONTEND_URL = os.getenv("FRONTEND_URL", "https://aminius.netlify.app")

# Email: "smtp", "resend" or "console"
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "console").lower()
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "AminiUs Insurance App <noreply@aminius.app>")
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
# Gmail app passwords are often pasted with spaces
SMTP_PASSWORD = (os.getenv("SMTP_PASSWORD") or "").replace(" ", "")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
FALLBACK_AGENT_EMAIL = os.getenv("FALLBACK_AGENT_EMAIL")

# Twilio (SMS + WhatsApp)
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_FROM_NUMBER = os.getenv("TWILIO_FROM_NUMBER")
TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM")

PUSH_WEBHOOK_URL = os.getenv("PUSH_WEBHOOK_URL")

# Notification outbox retry policy
NOTIFICATION_MAX_ATTEMPTS = int(os.getenv("NOTIFICATION_MAX_ATTEMPTS", "5"))
NOTIFICATION_RETRY_BASE_SECONDS = int(os.getenv("NOTIFICATION_RETRY_BASE_SECONDS", "60"))
NOTIFICATION_BATCH_SIZE = int(os.getenv("NOTIFICATION_BATCH_SIZE", "100"))
# A row claimed by a drainer that never finished is retried after this lease
NOTIFICATION_CLAIM_SECONDS = int(os.getenv("NOTIFICATION_CLAIM_SECONDS", "300"))
NOTIFICATIONS_INLINE_DISPATCH = os.getenv("NOTIFICATIONS_INLINE_DISPATCH", "true").lower() == "true"

PASSWORD_RESET_TOKEN_MINUTES = int(os.getenv("PASSWORD_RESET_TOKEN_MINUTES", "60"))
