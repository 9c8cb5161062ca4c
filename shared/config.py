"""
Shared Configuration
Values read by both the API and the analysis worker.
"""

import os

# Redis configuration (video documents, analysis cache, storage event stream)
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Gemini configuration
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp")

# Object storage (S3-compatible)
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "reelmeals-videos")
STORAGE_ENDPOINT_URL = os.getenv("STORAGE_ENDPOINT_URL")
STORAGE_ACCESS_KEY_ID = os.getenv("STORAGE_ACCESS_KEY_ID")
STORAGE_SECRET_ACCESS_KEY = os.getenv("STORAGE_SECRET_ACCESS_KEY")
STORAGE_REGION = os.getenv("STORAGE_REGION", "auto")
SIGNED_URL_EXPIRY_SECONDS = int(os.getenv("SIGNED_URL_EXPIRY_SECONDS", "900"))  # 15 minutes
VIDEO_PREFIX = os.getenv("VIDEO_PREFIX", "videos/")
TEMP_PREFIX = os.getenv("TEMP_PREFIX", "temp/")

# Chunking (stay under the provider's inline request ceiling)
MAX_CHUNK_SIZE = int(os.getenv("MAX_CHUNK_SIZE_MB", "19")) * 1024 * 1024
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP_MB", "5")) * 1024 * 1024

# Retry policy around each chunk call
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))
RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "5"))

# Pre-screening
PRESCREEN_CONFIDENCE_THRESHOLD = float(os.getenv("PRESCREEN_CONFIDENCE_THRESHOLD", "0.85"))

# Downloads and batch runs
DOWNLOAD_TIMEOUT_SECONDS = float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "300"))
BATCH_DELAY_SECONDS = float(os.getenv("BATCH_DELAY_SECONDS", "2"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Tracing (spans leave the process only when a collector is configured)
TRACING_ENABLED = os.getenv("TRACING_ENABLED", "true").lower() == "true"
OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
