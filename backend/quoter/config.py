import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./quoter.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# comma separated list of allowed frontend origins
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:80").split(",")
    if o.strip()
]

DEFAULT_TARGET_MARGIN = float(os.getenv("DEFAULT_TARGET_MARGIN", "40"))
DEFAULT_COMMISSION_PERCENT = float(os.getenv("DEFAULT_COMMISSION_PERCENT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() in ("1", "true", "yes")
