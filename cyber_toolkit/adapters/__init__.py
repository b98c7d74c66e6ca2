"""Adapters — package-manager bindings.

Public re-exports for convenient access.
"""

from cyber_toolkit.adapters.base import Adapter
from cyber_toolkit.adapters.mock import RecordingAdapter
from cyber_toolkit.adapters.registry import AdapterRegistry, build_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "RecordingAdapter",
    "build_registry",
]
