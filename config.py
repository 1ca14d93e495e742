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
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    # "redis" shares the access-token revocation set across instances,
    # "memory" keeps it in-process (single instance / tests only)
    CACHE_BACKEND = data.get("CACHE_BACKEND", "memory")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Telegram Login Widget
    TELEGRAM_BOT_TOKEN = data.get("TELEGRAM_BOT_TOKEN", "dev-bot-token-change-in-production")
    TELEGRAM_AUTH_MAX_AGE = int(data.get("TELEGRAM_AUTH_MAX_AGE", 86400))

    # Tokens
    JWT_ACCESS_SECRET = data.get("JWT_ACCESS_SECRET", "dev-access-secret-change-in-production")
    JWT_REFRESH_SECRET = data.get("JWT_REFRESH_SECRET", "dev-refresh-secret-change-in-production")
    JWT_ISSUER = data.get("JWT_ISSUER", "taiginsky-api")
    JWT_AUDIENCE = data.get("JWT_AUDIENCE", "taiginsky-app")
    ACCESS_TOKEN_TTL = data.get("ACCESS_TOKEN_TTL", "15m")
    REFRESH_TOKEN_TTL = data.get("REFRESH_TOKEN_TTL", "7d")
    REFRESH_TOKEN_TTL_REMEMBER_ME = data.get("REFRESH_TOKEN_TTL_REMEMBER_ME", "30d")

    # Sessions
    MAX_ACTIVE_SESSIONS = int(data.get("MAX_ACTIVE_SESSIONS", 10))
    DEVICE_MISMATCH_POLICY = data.get("DEVICE_MISMATCH_POLICY", "warn")
    SESSION_COOKIE_SECURE = bool(data.get("SESSION_COOKIE_SECURE", False))
    REVOKED_SESSION_RETENTION_DAYS = int(data.get("REVOKED_SESSION_RETENTION_DAYS", 30))

    # Per-IP rate limits (counted in a shared window per endpoint group)
    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    RATE_LIMIT_WINDOW = data.get("RATE_LIMIT_WINDOW", "15m")
    RATE_LIMIT_AUTH = int(data.get("RATE_LIMIT_AUTH", 10))
    RATE_LIMIT_REFRESH = int(data.get("RATE_LIMIT_REFRESH", 20))
    RATE_LIMIT_SESSIONS = int(data.get("RATE_LIMIT_SESSIONS", 30))
