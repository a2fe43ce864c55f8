import os

# JWT Configuration
# In production, set SECRET_KEY environment variable to a secure random value
ENV = os.getenv("ENV", "development").lower()

_DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production-seedy-7f3a91"
SECRET_KEY = os.getenv("SECRET_KEY", _DEFAULT_SECRET_KEY)  # Default for development only
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))
PASSWORD_HASH_ROUNDS = 10
PASSWORD_RESET_EXPIRE_MINUTES = 60

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./seedy.db")

# Email Configuration (SendGrid)
SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
SENDGRID_FROM_EMAIL = os.getenv("SENDGRID_FROM_EMAIL", "support@seedy.com.ar")

# Plant identification (Pl@ntNet)
PLANTNET_API_KEY = os.getenv("PLANTNET_API_KEY")
PLANTNET_API_URL = os.getenv("PLANTNET_API_URL", "https://my-api.plantnet.org/v2/identify/all")
PLANTNET_TIMEOUT_SECONDS = float(os.getenv("PLANTNET_TIMEOUT_SECONDS", "15"))

# Uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))  # 5MB

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


def validate_config() -> None:
    """
    Validate required configuration.

    Strict only when ENV=production; development and tests run with defaults.
    """
    if ENV != "production":
        return

    errors: list[str] = []

    if not SECRET_KEY or SECRET_KEY == _DEFAULT_SECRET_KEY:
        errors.append("SECRET_KEY must be set to a secure value in production")

    if not SENDGRID_API_KEY:
        errors.append("SENDGRID_API_KEY must be set in production")

    if not SENDGRID_FROM_EMAIL:
        errors.append("SENDGRID_FROM_EMAIL must be set in production")

    if not PLANTNET_API_KEY:
        errors.append("PLANTNET_API_KEY must be set in production")

    if DATABASE_URL.startswith("sqlite"):
        errors.append("DATABASE_URL must point to a server database in production")

    if errors:
        raise RuntimeError("Invalid configuration:\n- " + "\n- ".join(errors))
