"""
Adapter registry — resolve the configured package manager to an adapter.

The use cases never construct adapters themselves; they ask the
registry for the one named in settings (or the recording adapter in
mock mode).
"""

from __future__ import annotations

import logging

from cyber_toolkit.adapters.base import Adapter
from cyber_toolkit.adapters.mock import RecordingAdapter
from cyber_toolkit.adapters.shell.package_manager import MANAGERS, PackageManagerAdapter
from cyber_toolkit.core.config.loader import ConfigError, Settings

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Registry of package-manager adapters by name."""

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Enable or disable mock mode.

        Args:
            enabled: Whether every lookup should return the mock adapter.
            mock_adapter: Optional custom mock. If None, a fresh
                ``RecordingAdapter`` is used.
        """
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def get(self, name: str) -> Adapter:
        """Look up an adapter by name.

        Raises:
            ConfigError: If no adapter is registered under ``name``.
        """
        if self._mock_mode:
            if self._mock_adapter is None:
                self._mock_adapter = RecordingAdapter()
            return self._mock_adapter

        adapter = self._adapters.get(name)
        if adapter is None:
            known = ", ".join(sorted(self._adapters)) or "none"
            raise ConfigError(f"Unknown package manager '{name}' (available: {known})")
        return adapter


def build_registry(settings: Settings, mock_mode: bool = False) -> AdapterRegistry:
    """Create a registry holding one adapter per supported package manager."""
    registry = AdapterRegistry(mock_mode=mock_mode)
    for manager in MANAGERS:
        registry.register(
            PackageManagerAdapter(
                manager=manager,
                use_sudo=settings.use_sudo,
                timeout=settings.command_timeout,
            )
        )
    return registry
