import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./appointments.db")

# Shared admin password for dashboard routes
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_PASSWORD:
    import warnings

    warnings.warn(
        "ADMIN_PASSWORD not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    ADMIN_PASSWORD = "admin123"  # noqa: S105 - Dev fallback only

# Public site URL, used for unsubscribe links and checkout redirects
BASE_URL = os.getenv("BASE_URL", "http://localhost:3000")

BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Valentino Tree")

# Resend Email Configuration - mock sender is used when the key is missing
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv(
    "EMAIL_FROM_ADDRESS", f"{BUSINESS_NAME} <onboarding@resend.dev>"
)
OWNER_EMAIL = os.getenv("OWNER_EMAIL")

# Stripe Configuration - mock gateway is used when the secret key is missing
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "usd")
