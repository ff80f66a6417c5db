# flake8: noqa
"""
The remotekv python library: a Workers KV namespace, accessed over the Cloudflare API.
"""

from ._version import __version__

# KV is the main class that we want to expose.
from .kv import KV

# Option and result records used by KV.
from .api.types import (
    GetOptions,
    ListOptions,
    ListResult,
    PutOptions,
    StoredKey,
    ValueType,
    ValueWithMetadata,
)

# Errors raised by KV.
from .api.utils import (
    KVError,
    InvalidArgument,
    RequestTooLarge,
    RemoteFailure,
    ClientError,
    ServerError,
)
