"""
Adapters Package

Readers and writers for value stream documents.
"""

from .file_loader import vsm_from_dict, load_vsm, dump_vsm

__all__ = [
    "vsm_from_dict",
    "load_vsm",
    "dump_vsm",
]
