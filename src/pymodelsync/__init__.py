"""pymodelsync - async models reconciled across heterogeneous data sources."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pymodelsync")
except PackageNotFoundError:
    __version__ = "0+local"
from pymodelsync.adapters import Adapter, RestfulAdapter, StoreAdapter
from pymodelsync.capabilities import CAPABILITIES, OperationDescriptor, OperationType, operation_type
from pymodelsync.config import RestfulConfig
from pymodelsync.events import ModelEvent
from pymodelsync.exceptions import (
    AdapterFailure,
    ConfigError,
    ModelSyncError,
    RestTransportError,
    ScopeError,
    UnsupportedOperation,
)
from pymodelsync.merge import deep_merge, loose_equal, merge_collections, reduce_collections
from pymodelsync.model import Model, model_factory
from pymodelsync.result import Result, wrap
from pymodelsync.settings import AdapterSettings, KeySettings

__all__ = [
    "__version__",
    "CAPABILITIES",
    "Adapter",
    "AdapterFailure",
    "AdapterSettings",
    "ConfigError",
    "KeySettings",
    "Model",
    "ModelEvent",
    "ModelSyncError",
    "OperationDescriptor",
    "OperationType",
    "RestTransportError",
    "RestfulAdapter",
    "RestfulConfig",
    "Result",
    "ScopeError",
    "StoreAdapter",
    "UnsupportedOperation",
    "deep_merge",
    "loose_equal",
    "merge_collections",
    "model_factory",
    "operation_type",
    "reduce_collections",
    "wrap",
]
