# flake8: noqa
"""
The api package talks to the Cloudflare v4 REST API of a single KV namespace.
"""

from . import types
from . import client
