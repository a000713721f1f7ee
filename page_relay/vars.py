import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "page-relay")

# Shared secret compared against the x-api-key header; empty disables the check
API_KEY = os.environ.get("API_KEY", "")
# Comma-separated hostnames / suffixes, e.g. "example.com,another.com"
ALLOWLIST = [
    h.strip().lower() for h in os.environ.get("ALLOWLIST", "").split(",") if h.strip()
]

PROXY_PATH = os.environ.get("PROXY_PATH", "/api/proxy")
# Public-facing URL used when building rewritten links
PUBLIC_URL = os.environ.get("PUBLIC_URL", "").rstrip("/")
PROXY_TIMEOUT = float(os.environ.get("PROXY_TIMEOUT", "30"))
FORWARD_REQUEST_HEADERS = [
    h.strip().lower()
    for h in os.environ.get(
        "FORWARD_REQUEST_HEADERS", "accept,accept-language,user-agent"
    ).split(",")
    if h.strip()
]

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
