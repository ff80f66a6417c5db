"""
Overall configurations and constants for the remotekv python library.
"""

import os
from pathlib import Path

################################################################################
# Configurations you can change to customize remotekv's behavior.
################################################################################

# Root of the Cloudflare v4 REST API. In cases like unit testing or when going
# through a proxy, you can change this with the environment variable
# `REMOTEKV_API_URL`.
API_URL = os.environ.get(
    "REMOTEKV_API_URL", "https://api.cloudflare.com/client/v4"
).rstrip("/")

# Environment variables that the client falls back to when the corresponding
# constructor argument is not given.
ACCOUNT_ID_ENV = "CLOUDFLARE_ACCOUNT_ID"
NAMESPACE_ID_ENV = "CLOUDFLARE_KV_NAMESPACE_ID"
API_TOKEN_ENV = "CLOUDFLARE_API_TOKEN"
API_EMAIL_ENV = "CLOUDFLARE_EMAIL"
API_KEY_ENV = "CLOUDFLARE_API_KEY"

################################################################################
# remotekv internals. Do not change these as they will change the behavior of
# the library and APIs.
################################################################################

# Path of a single namespace, relative to API_URL.
NAMESPACE_PATH = (
    "/accounts/{account_identifier}/storage/kv/namespaces/{namespace_identifier}"
)

# Limits enforced by the edge runtime. We check them locally so that invalid
# requests never leave the machine.
MIN_CACHE_TTL = 60  # 60s
MIN_EXPIRATION = -2147483648  # minimum signed 32-bit integer
MAX_EXPIRATION = 2147483647  # maximum signed 32-bit integer
MAX_LIST_KEYS = 1000
MAX_KEY_SIZE = 512  # 512B
MAX_VALUE_SIZE = 25 * 1024 * 1024  # 25MiB
MAX_METADATA_SIZE = 1024  # 1KiB

# Cache directory for remotekv's local storage, currently only the internal log.
# To change the cache directory, set the environment variable REMOTEKV_CACHE_DIR
# before importing remotekv. The directory is only created when something is
# written into it.
CACHE_DIR = Path(
    os.environ.get("REMOTEKV_CACHE_DIR", Path.home() / ".cache" / "remotekv")
)
LOGS_DIR = CACHE_DIR / "logs"


def _to_bool(s: str) -> bool:
    """
    Convert a string to a boolean value.
    """
    if not isinstance(s, str):
        raise TypeError(f"Expected a string, got {type(s)}")
    true_values = ("yes", "true", "t", "1", "y", "on")
    false_values = ("no", "false", "f", "0", "n", "off", "")
    s = s.lower()
    if s in true_values:
        return True
    elif s in false_values:
        return False
    else:
        raise ValueError(
            f"Invalid boolean value: {s}. Valid true values: {true_values}. Valid false"
            f" values: {false_values}."
        )
