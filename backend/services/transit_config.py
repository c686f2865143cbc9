"""
Transit Hub - Configuration

Runtime settings read from the environment. server.py loads .env first, so
values set there are picked up here.

- JWT_SECRET / JWT_TTL_SECONDS: demo agent tokens
- LOG_LEVEL: root logging level
- CORS_ORIGINS: comma separated list of allowed origins, "*" for any
"""

import os
from typing import List


SERVICE_NAME = os.environ.get("SERVICE_NAME", "Transit Hub")
SERVICE_VERSION = os.environ.get("SERVICE_VERSION", "1.0.0")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

JWT_SECRET = os.environ.get("JWT_SECRET", "transit-hub-secret-key")
JWT_ALGORITHM = "HS256"
JWT_TTL_SECONDS = int(os.environ.get("JWT_TTL_SECONDS", "86400"))


def get_cors_origins() -> List[str]:
    raw = os.environ.get("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
