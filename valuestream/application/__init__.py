"""
Application Package

Entry points used by editors and stores: the pure VSM mutator functions,
the single-writer VSMStore and the bundled sample stream.
"""

from . import vsm_mutator
from .vsm_mutator import (
    create,
    update,
    add_process,
    add_connection,
    update_process,
    update_connection,
    remove_process,
    remove_connection,
)
from .vsm_store import VSMStore, UnsupportedActionError
from .sample_vsm import create_sample_vsm

__all__ = [
    "vsm_mutator",
    # Mutator
    "create",
    "update",
    "add_process",
    "add_connection",
    "update_process",
    "update_connection",
    "remove_process",
    "remove_connection",
    # Store
    "VSMStore",
    "UnsupportedActionError",
    # Sample
    "create_sample_vsm",
]
