"""
Project constants definitions
"""

# ============================================================
# Polling
# ============================================================

DEFAULT_SERVICE_POLL_INTERVAL = 10.0
DEFAULT_ROUTER_POLL_INTERVAL = 5.0
DEFAULT_LIST_TIMEOUT = 5.0
DEFAULT_NOTICE_TTL = 4.0

# ============================================================
# Profiles
# ============================================================

PROFILE_TYPES = ("forward", "reverse", "http", "tcp", "udp", "ss")
DEFAULT_PROFILE_TYPE = "forward"

# ============================================================
# Host Mapping
# ============================================================

HOST_MAPPING_PROTOCOLS = ("HTTP", "HTTPS", "TCP")
DEFAULT_HOST_MAPPING_PORT = 80
DEFAULT_ROUTER_ADDR = ":8080"
MIN_PORT = 1
MAX_PORT = 65535

# ============================================================
# Logs & Activity
# ============================================================

DEFAULT_RECENT_LOG_LIMIT = 100
LOG_LEVELS = ("INFO", "WARN", "ERROR", "DEBUG")
LOG_SOURCES = ("gost", "system", "api")
MAX_LOCAL_LOG_ENTRIES = 1000

# ============================================================
# Engine
# ============================================================

ENGINE_BINARY = "gost"
ENGINE_SEARCH_PATHS = (
    "/usr/local/bin/gost",
    "/usr/bin/gost",
    "/opt/homebrew/bin/gost",
    "/usr/local/opt/gost/bin/gost",
    "./gost",
)
ENGINE_VERSION_TIMEOUT = 3.0
UNKNOWN_VERSION = "Unknown"
DEMO_ENGINE_VERSION = "3.2.4"

# ============================================================
# State Storage
# ============================================================

DEFAULT_STATE_DIR = "~/.proxydeck"
ENV_PREFIX = "PROXYDECK_"
