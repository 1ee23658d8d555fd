"""Data adapters.

:class:`StoreAdapter` is the canonical in-memory store every model owns;
:class:`RestfulAdapter` reads from and writes to a REST API.
"""

from pymodelsync.adapters.base import Adapter
from pymodelsync.adapters.restful import RestfulAdapter
from pymodelsync.adapters.store import StoreAdapter

__all__ = ["Adapter", "RestfulAdapter", "StoreAdapter"]
