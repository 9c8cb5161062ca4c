"""
API Configuration
"""

import os

from shared.config import REDIS_URL, TRACING_ENABLED  # noqa: F401

# API configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# CORS / host checks
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*")

# Rate limiting
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
ANALYZE_RATE_LIMIT = os.getenv("ANALYZE_RATE_LIMIT", "10/minute")
PRESCREEN_RATE_LIMIT = os.getenv("PRESCREEN_RATE_LIMIT", "20/minute")
