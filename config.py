import os
import json
from dotenv import load_dotenv
load_dotenv()


def _env_bool(name, default=False):
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///hiregate.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # background jobs
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    RQ_QUEUE_NAME = os.getenv("RQ_QUEUE_NAME", "default")
    RQ_SYNC = _env_bool("RQ_SYNC")
    ANALYSIS_JOB_TIMEOUT = int(os.getenv("ANALYSIS_JOB_TIMEOUT", "600"))
    STALE_ANALYSIS_MINUTES = int(os.getenv("STALE_ANALYSIS_MINUTES", "30"))

    # scoring (Gemini generateContent over REST)
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
    SCORING_MODEL_FIELD = os.getenv("SCORING_MODEL_FIELD", "gemini-2.5-flash")
    SCORING_MODEL_ADMIN = os.getenv("SCORING_MODEL_ADMIN", "gemini-2.5-pro")
    SCORING_TIMEOUT = float(os.getenv("SCORING_TIMEOUT", "60"))
    SCORING_MAX_ATTEMPTS = int(os.getenv("SCORING_MAX_ATTEMPTS", "3"))
    SCORING_BACKOFF_SEC = float(os.getenv("SCORING_BACKOFF_SEC", "1.0"))
    SCORING_OUTPUT_LANGUAGE = os.getenv("SCORING_OUTPUT_LANGUAGE", "Spanish (Mexico)")
    AUDIO_PATH_MARKER = os.getenv("AUDIO_PATH_MARKER", "/storage/v1/object/public/audios/")
    AUDIO_FETCH_TIMEOUT = float(os.getenv("AUDIO_FETCH_TIMEOUT", "30"))

    # media storage
    S3_ENDPOINT = os.getenv("S3_ENDPOINT")
    S3_REGION = os.getenv("S3_REGION")
    S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY")
    S3_SECRET_KEY = os.getenv("S3_SECRET_KEY")

    # mail
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
    MAIL_FROM = os.getenv("MAIL_FROM", "noreply@example.com")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "HireGate")

    # ledger
    ADMIN_TOKEN = os.getenv("ADMIN_TOKEN")
    SIGNUP_CREDITS = int(os.getenv("SIGNUP_CREDITS", "3"))
    PREMIUM_THRESHOLD = int(os.getenv("PREMIUM_THRESHOLD", "50"))
    BOOTSTRAP_CREDIT_CODES = json.loads(os.getenv("BOOTSTRAP_CREDIT_CODES", '{"START": 3}'))
    COMPANY_CODE_FALLBACK_PREFIX = os.getenv("COMPANY_CODE_FALLBACK_PREFIX", "MEX")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RQ_SYNC = True
    WTF_CSRF_ENABLED = False
    GEMINI_API_KEY = None
    SENDGRID_API_KEY = None
    SCORING_BACKOFF_SEC = 0.0
    ADMIN_TOKEN = "test-admin-token"
