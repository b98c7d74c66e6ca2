"""
Reconcile use case — add, remove, or update roles end to end.

Loads settings, wires catalog → resolver → engine → adapter, runs the
requested operation, and returns a result the CLI can render or dump
as JSON. Nothing here raises for expected failures; they land in
``ReconcileResult.error`` or inside the report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from cyber_toolkit.adapters.registry import AdapterRegistry, build_registry
from cyber_toolkit.core.config.loader import ConfigError, Settings, load_settings
from cyber_toolkit.core.engine.batch import BatchOperationExecutor
from cyber_toolkit.core.engine.reconciler import ReconcileReport, ReconciliationEngine
from cyber_toolkit.core.models.role import Operation
from cyber_toolkit.core.persistence.role_store import PersistenceError, RoleStore
from cyber_toolkit.core.services.catalog import HttpRoleCatalog, RoleCatalog
from cyber_toolkit.core.services.resolver import ToolSetResolver

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Result of one add/remove/update command."""

    operation: Operation
    report: ReconcileReport | None = None
    role_file: Path | None = None
    adapter: str = ""
    error: str | None = None

    @property
    def exit_code(self) -> int:
        if self.error:
            return 1
        return self.report.exit_code if self.report else 0

    def to_dict(self) -> dict:
        result: dict = {"operation": self.operation}
        if self.error:
            result["error"] = self.error
            return result

        result["role_file"] = str(self.role_file) if self.role_file else None
        result["adapter"] = self.adapter
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def make_catalog(settings: Settings) -> HttpRoleCatalog:
    return HttpRoleCatalog(
        base_url=settings.catalog_url,
        index_name=settings.role_index,
        timeout=settings.http_timeout,
    )


def build_engine(
    settings: Settings,
    *,
    dry_run: bool = False,
    mock_mode: bool = False,
    catalog: RoleCatalog | None = None,
    registry: AdapterRegistry | None = None,
) -> ReconciliationEngine:
    """Wire the engine from settings, with optional injected collaborators."""
    if registry is None:
        registry = build_registry(settings, mock_mode=mock_mode)
    adapter = registry.get(settings.package_manager)

    return ReconciliationEngine(
        store=RoleStore(settings.role_file),
        resolver=ToolSetResolver(catalog or make_catalog(settings)),
        executor=BatchOperationExecutor(adapter),
        dry_run=dry_run,
    )


def run_reconcile(
    operation: Operation,
    roles: list[str],
    config_path: Path | None = None,
    dry_run: bool = False,
    mock_mode: bool = False,
    catalog: RoleCatalog | None = None,
    registry: AdapterRegistry | None = None,
) -> ReconcileResult:
    """Run ``operation`` for ``roles``.

    Args:
        operation: ``add``, ``remove`` or ``update``.
        roles: Role names as given by the user.
        config_path: Optional explicit config file.
        dry_run: Plan only.
        mock_mode: Use the recording adapter instead of a real package manager.
        catalog: Optional catalog override (defaults to the HTTP catalog).
        registry: Optional pre-built adapter registry.
    """
    result = ReconcileResult(operation=operation)

    try:
        settings = load_settings(config_path)
        engine = build_engine(
            settings,
            dry_run=dry_run,
            mock_mode=mock_mode,
            catalog=catalog,
            registry=registry,
        )
    except ConfigError as e:
        result.error = str(e)
        return result

    result.role_file = settings.role_file
    result.adapter = engine.executor.adapter.name

    if operation == "add":
        result.report = engine.add(roles)
    elif operation == "remove":
        result.report = engine.remove(roles)
    elif operation == "update":
        result.report = engine.update(roles)
    else:
        result.error = f"Unknown operation: {operation}"

    return result


@dataclass
class CurrentResult:
    """The persisted role set."""

    roles: list[str]
    role_file: Path | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {"roles": list(self.roles), "role_file": str(self.role_file)}


def get_current(config_path: Path | None = None) -> CurrentResult:
    """Read the persisted role set without touching the network."""
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        return CurrentResult(roles=[], error=str(e))

    store = RoleStore(settings.role_file)
    try:
        roles = store.load()
    except PersistenceError as e:
        logger.warning("Cannot read %s: %s", settings.role_file, e)
        return CurrentResult(roles=[], role_file=settings.role_file, error=str(e))

    return CurrentResult(roles=list(roles), role_file=settings.role_file)
