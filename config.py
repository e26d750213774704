import os

from dotenv import load_dotenv

load_dotenv(override=False)

# --- Object storage (Vercel Blob) ---
BLOB_READ_WRITE_TOKEN = os.getenv("BLOB_READ_WRITE_TOKEN")
BLOB_API_URL = os.getenv("BLOB_API_URL", "https://blob.vercel-storage.com")
BLOB_API_VERSION = os.getenv("BLOB_API_VERSION", "7")

# --- Album metadata (file or directory of JSON records) ---
ALBUM_METADATA_PATH = os.getenv("ALBUM_METADATA_PATH", "data/albums.json")

# --- Gallery behaviour ---
COVER_SELECTION = os.getenv("COVER_SELECTION", "random")  # 'random' or 'first'
COVER_CONCURRENCY = int(os.getenv("COVER_CONCURRENCY", "8"))
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

# --- Mail + bot verification ---
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
TURNSTILE_SECRET_KEY = os.getenv("TURNSTILE_SECRET_KEY")
CONTACT_FROM = os.getenv(
    "CONTACT_FROM", "LLP Events Contact Form <noreply@mail.llp-events.com>"
)
CONTACT_TO = os.getenv("CONTACT_TO", "info@llp-events.com")
SUBSCRIBE_FROM = os.getenv("SUBSCRIBE_FROM", "LLP Events <noreply@llpevents.com>")
SITE_URL = os.getenv("SITE_URL", "https://www.llp-events.com")


def is_production() -> bool:
    """Image optimization is only available on the production deployment"""
    return os.getenv("VERCEL_ENV", "development") == "production"
