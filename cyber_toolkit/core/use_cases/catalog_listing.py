"""
Catalog listing use case — show available roles and their tools.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from cyber_toolkit.core.config.loader import ConfigError, load_settings
from cyber_toolkit.core.models.role import normalize_tools
from cyber_toolkit.core.services.catalog import CatalogFetchError, RoleCatalog
from cyber_toolkit.core.use_cases.reconcile import make_catalog

logger = logging.getLogger(__name__)


@dataclass
class CatalogListing:
    """Available roles, optionally with their tools."""

    roles: list[str] = field(default_factory=list)
    tools: dict[str, list[str]] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)  # role → fetch error
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "roles": list(self.roles),
            "tools": {k: list(v) for k, v in self.tools.items()},
            "errors": dict(self.errors),
        }


def list_catalog(
    config_path: Path | None = None,
    names_only: bool = False,
    catalog: RoleCatalog | None = None,
) -> CatalogListing:
    """List roles from the catalog index, fetching each role unless ``names_only``.

    A role whose tool list cannot be fetched is recorded in ``errors``
    and the listing continues.
    """
    listing = CatalogListing()

    if catalog is None:
        try:
            catalog = make_catalog(load_settings(config_path))
        except ConfigError as e:
            listing.error = str(e)
            return listing

    try:
        listing.roles = catalog.list_roles()
    except CatalogFetchError as e:
        listing.error = f"Could not fetch the list of roles: {e.reason}"
        return listing

    if names_only:
        return listing

    for role in listing.roles:
        try:
            listing.tools[role] = list(normalize_tools(catalog.fetch(role)))
        except CatalogFetchError as e:
            logger.warning("Cannot fetch tools for role '%s': %s", role, e.reason)
            listing.errors[role] = e.reason

    return listing
