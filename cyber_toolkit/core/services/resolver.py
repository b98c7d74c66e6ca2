"""
Tool-set resolver — turn roles into the union of their tools.

Fetches are sequential, one role at a time. A role whose fetch fails
is skipped and reported; resolution continues with the next role.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from cyber_toolkit.core.models.role import normalize_role, normalize_tools
from cyber_toolkit.core.services.catalog import CatalogFetchError, RoleCatalog

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    """Result of resolving a role list."""

    tools: tuple[str, ...] = ()
    skipped_roles: dict[str, str] = field(default_factory=dict)  # role → reason

    @property
    def complete(self) -> bool:
        """Whether every requested role was fetched."""
        return not self.skipped_roles


class ToolSetResolver:
    """Resolve roles to a deduplicated ToolSet through a catalog."""

    def __init__(self, catalog: RoleCatalog):
        self.catalog = catalog

    def resolve(self, roles: Iterable[str]) -> tuple[str, ...]:
        """Return the sorted union of tools for ``roles``."""
        return self.resolve_report(roles).tools

    def resolve_report(self, roles: Iterable[str]) -> ResolutionReport:
        """Resolve ``roles`` and record which ones were skipped.

        An empty role list short-circuits without touching the catalog.
        """
        report = ResolutionReport()
        union: set[str] = set()
        seen: set[str] = set()

        for raw in roles:
            role = normalize_role(raw)
            if not role or role in seen:
                continue
            seen.add(role)

            try:
                lines = self.catalog.fetch(role)
            except CatalogFetchError as e:
                logger.warning("Skipping role '%s': %s", role, e.reason)
                report.skipped_roles[role] = e.reason
                continue

            tools = normalize_tools(lines)
            if not tools:
                logger.info("Role '%s' lists no tools", role)
            union.update(tools)

        report.tools = tuple(sorted(union))
        logger.debug(
            "Resolved %d role(s) to %d tool(s), skipped %d",
            len(seen) - len(report.skipped_roles),
            len(report.tools),
            len(report.skipped_roles),
        )
        return report
