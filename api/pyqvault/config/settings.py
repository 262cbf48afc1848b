import os
from pathlib import Path
from dotenv import load_dotenv
import logging
import sys
from typing import List, Set

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


ENV = os.getenv("ENV", "development")
IS_PRODUCTION = ENV == "production"

# api/ directory; the default SQLite file and logs/ live here
BASE_DIR = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = str(BASE_DIR / "logs")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_PRODUCTION else "DEBUG").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.path.join(LOGS_DIR, "pyqvault.log")
LOG_TO_FILE = _env_flag("LOG_TO_FILE", "true")

handlers = [logging.StreamHandler(sys.stdout)]
if LOG_TO_FILE:
    try:
        os.makedirs(LOGS_DIR, exist_ok=True)
        if IS_PRODUCTION:
            from logging.handlers import RotatingFileHandler
            handlers.append(RotatingFileHandler(LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"))
        else:
            handlers.append(logging.FileHandler(LOG_FILE, encoding="utf-8"))
    except OSError as e:
        print(f"[WARNING] Could not open log file {LOG_FILE}: {e}")

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format=LOG_FORMAT,
    handlers=handlers
)

# Third-party loggers are only interesting when they warn
for noisy in ("botocore", "boto3", "s3transfer", "urllib3", "multipart",
              "python_multipart", "sqlalchemy.engine", "starlette", "fastapi"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Auth
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    if IS_PRODUCTION:
        raise ValueError("JWT_SECRET_KEY must be set in production environment")
    logger.warning("JWT_SECRET_KEY is not set; using an insecure development key")
    JWT_SECRET_KEY = "pyqvault-dev-secret"

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_EMAIL or not ADMIN_PASSWORD:
    logger.warning("ADMIN_EMAIL / ADMIN_PASSWORD not set. Admin login will reject every attempt.")

# Data routers accept anonymous calls unless this is switched on
REQUIRE_AUTH = _env_flag("REQUIRE_AUTH")

# Owner recorded on saved files when the client sends no userId
DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "default-user")

RATE_LIMIT_WINDOW = int(os.getenv("RATE_LIMIT_WINDOW", "300"))  # seconds
MAX_LOGIN_ATTEMPTS = int(os.getenv("MAX_LOGIN_ATTEMPTS", "5"))

# Database
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{BASE_DIR / 'pyqvault.db'}"
DB_ECHO = _env_flag("DB_ECHO")

if IS_PRODUCTION and not os.getenv("DATABASE_URL"):
    logger.warning("DATABASE_URL not set in production; falling back to the local SQLite file")

# Uploads
ALLOWED_EXTENSIONS: Set[str] = {".pdf", ".doc", ".docx", ".xls", ".xlsx", ".txt"}
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", str(10 * 1024 * 1024)))

# API
API_TITLE = "PYQ Vault Admin API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Admin API for notes, previous year question papers, colleges and saved files"

# CORS
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def clean_cors_origins(origins) -> List[str]:
    """Strip stray separators, drop non-http(s) entries and duplicates (order kept)"""
    cleaned: List[str] = []
    for origin in origins:
        if isinstance(origin, (list, tuple)):
            candidates = clean_cors_origins(origin)
        elif isinstance(origin, str):
            value = origin.strip().replace(';', '').replace(',', '').strip()
            if not value.startswith(("http://", "https://")):
                logger.warning(f"Ignoring invalid CORS origin: '{origin}'")
                continue
            candidates = [value]
        else:
            continue
        cleaned.extend(c for c in candidates if c not in cleaned)
    return cleaned


CORS_ALLOW_ALL = _env_flag("CORS_ALLOW_ALL")
_env_origins = os.getenv("CORS_ORIGINS", "")

if CORS_ALLOW_ALL:
    logger.warning("CORS_ALLOW_ALL is enabled; every origin is accepted")
    CORS_ORIGINS = ["*"]
else:
    CORS_ORIGINS = clean_cors_origins(_env_origins.replace(';', ',').split(',')) if _env_origins else []
    if not CORS_ORIGINS:
        CORS_ORIGINS = clean_cors_origins(DEFAULT_CORS_ORIGINS)

# Object storage (S3)
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
AWS_REGION = (os.getenv("AWS_REGION") or "").strip() or "ap-south-1"
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME")
S3_BASE_URL = f"https://{S3_BUCKET_NAME}.s3.{AWS_REGION}.amazonaws.com" if S3_BUCKET_NAME else None

if IS_PRODUCTION:
    _missing_storage = [
        name for name, value in (
            ("AWS_ACCESS_KEY_ID", AWS_ACCESS_KEY_ID),
            ("AWS_SECRET_ACCESS_KEY", AWS_SECRET_ACCESS_KEY),
            ("S3_BUCKET_NAME", S3_BUCKET_NAME),
        ) if not value
    ]
    if _missing_storage:
        raise ValueError(f"S3 configuration is required in production. Missing: {', '.join(_missing_storage)}")

logger.info(f"Settings loaded: env={ENV}, database={DATABASE_URL.split(':', 1)[0]}, "
            f"storage={'configured' if S3_BASE_URL else 'disabled'}, require_auth={REQUIRE_AUTH}")
