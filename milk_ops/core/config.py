import os

from dotenv import load_dotenv

# Carrega o .env da raiz do projeto
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./milk_ops.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "1" if IS_DEV else "0").strip().lower() in {
    "1",
    "true",
    "yes",
    "on",
}

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

# Regras de negócio
CUSTOMER_ACTIVE_WINDOW_DAYS = int(os.getenv("CUSTOMER_ACTIVE_WINDOW_DAYS", "30"))
DEFAULT_PRICE_PER_LITER = float(os.getenv("DEFAULT_PRICE_PER_LITER", "50"))
