import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Defaults to a local SQLite file so the API boots without a database server
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")

# Comma-separated list of origins allowed to call the public booking API
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

CLINIC_NAME = os.getenv("CLINIC_NAME", "Sasha Smiles")

# Email Configuration
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", f"{CLINIC_NAME} <noreply@sashasmiles.com>")
# Operator inbox for new booking notices; falls back to the sender address
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")

# Resend (used when no SMTP server is configured)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")

# SMTP (preferred transport when SMTP_HOST is set)
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

# TeleCRM Configuration
TELECRM_API_URL = os.getenv("TELECRM_API_URL", "https://next-api.telecrm.in")
TELECRM_ENTERPRISE_ID = os.getenv("TELECRM_ENTERPRISE_ID")
TELECRM_API_TOKEN = os.getenv("TELECRM_API_TOKEN")
TELECRM_LEAD_SOURCE = os.getenv("TELECRM_LEAD_SOURCE", "SashaDental-webform")
TELECRM_TIMEOUT_SECONDS = float(os.getenv("TELECRM_TIMEOUT_SECONDS", "10"))
# Total attempts per lead; only transport errors are retried
TELECRM_MAX_ATTEMPTS = int(os.getenv("TELECRM_MAX_ATTEMPTS", "2"))

# Bounded retries when an appointment number collides on insert
APPOINTMENT_NUMBER_MAX_ATTEMPTS = int(os.getenv("APPOINTMENT_NUMBER_MAX_ATTEMPTS", "5"))
