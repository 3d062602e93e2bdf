"""Configuration for Music Gateway.

Startup-only settings are configured here via environment variables.
They are validated and frozen into a Settings object by settings.py.
"""

import os

# Server settings (startup-only)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# Debug mode (enables auto-reload in development)
DEBUG = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")

# Root log level (DEBUG, INFO, WARNING, ...)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Upstream Meting API endpoint
METING_API_BASE_URL = os.getenv("METING_API_BASE_URL", "https://api.i-meto.com/meting/api")

# Shared HMAC secret for the Meting `auth` parameter (must match the upstream's AUTH_SECRET)
METING_AUTH_SECRET = os.getenv("METING_AUTH_SECRET", "meting-secret")

# Platform used when the client omits `source`
DEFAULT_SOURCE = os.getenv("DEFAULT_SOURCE", "netease")

# User-Agent sent upstream when the client did not send one
FALLBACK_USER_AGENT = os.getenv("FALLBACK_USER_AGENT", "Mozilla/5.0")

# Timeout (seconds) for upstream connect/read operations
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "30"))

# Reject client-supplied `auth` values that do not match our own signature
VERIFY_CLIENT_AUTH = os.getenv("VERIFY_CLIENT_AUTH", "false").lower() in ("true", "1", "yes")
