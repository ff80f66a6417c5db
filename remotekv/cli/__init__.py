# flake8: noqa
"""
This implements the CLI for the remotekv library. When you install the library, you
get a command line tool called `rkv` that reads and writes keys of a KV namespace.
"""

# Guard so that remotekv.api never depends on things under remotekv.cli.
import remotekv.api as _

from .cli import rkv
