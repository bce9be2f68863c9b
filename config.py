import os
from pathlib import Path
from dotenv import load_dotenv
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

# Load environment variables from the .env file in the current directory
load_dotenv()

# Retrieve the token and base_url from the environment
TOKEN = os.getenv("TOKEN")
BASE_URL = os.getenv("BASE_URL")


def _resolve_sqlite_path(url: str | None) -> str | None:
    """Resolve relative SQLite URLs against the project root."""
    if not url:
        return url

    try:
        parsed = make_url(url)
    except ArgumentError:
        return url

    if not parsed.drivername.startswith("sqlite"):
        return url

    database = parsed.database
    if not database or database == ":memory:":
        return url

    db_path = Path(database)
    if db_path.is_absolute():
        return url

    absolute_path = (Path(__file__).resolve().parent / db_path).resolve()
    updated = parsed.set(database=absolute_path.as_posix())
    return updated.render_as_string(hide_password=False)


DATABASE_URL = _resolve_sqlite_path(os.getenv("DATABASE_URL"))
WEB_SERVER_HOST = os.getenv("WEB_SERVER_HOST")
WEB_SERVER_PORT = int(os.getenv("WEB_SERVER_PORT", "8080"))
MAIN_BOT_PATH = os.getenv("MAIN_BOT_PATH")

ADMIN_IDS_ENV = os.getenv("ADMIN_IDS", "")
ADMIN_IDS = tuple(
    int(admin_id.strip())
    for admin_id in ADMIN_IDS_ENV.split(",")
    if admin_id.strip().isdigit()
)

RESET_DB_ON_START = os.getenv('RESET_DB_ON_START', 'false').lower() == 'true'
RUN_VIA_POLLING_STR = os.getenv("RUN_VIA_POLLING", "false")
RUN_VIA_POLLING = RUN_VIA_POLLING_STR.lower() == "true"
LOG_LANGUAGE = os.getenv("LOG_LANGUAGE", "ru")

# AI features stay disabled (friendly error to users) while the key is empty
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_TEXT_MODEL = os.getenv("GEMINI_TEXT_MODEL", "gemini-1.5-flash")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "60"))

if TOKEN is None:
    raise ValueError("TOKEN is not set in the .env file.")

if DATABASE_URL is None:
    raise ValueError("DATABASE_URL is not set in the .env file.")

if not RUN_VIA_POLLING:
    if BASE_URL is None or BASE_URL == "https://example.com":
        raise ValueError("BASE_URL is not set or is a placeholder in the .env file for webhook mode.")
    if WEB_SERVER_HOST is None:
        raise ValueError("WEB_SERVER_HOST is not set in the .env file for webhook mode.")
    if MAIN_BOT_PATH is None:
        raise ValueError("MAIN_BOT_PATH is not set in the .env file for webhook mode.")
