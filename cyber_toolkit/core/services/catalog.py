"""
Role catalog — where role → tool lists come from.

The public catalog is a directory of plain text files served over
HTTP: ``<base>/role_names`` lists the available roles, and
``<base>/<role>`` lists one tool per line. Lines are returned raw;
normalization happens in the resolver.
"""

from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping, Sequence
from typing import Protocol

logger = logging.getLogger(__name__)

_USER_AGENT = "cyber-toolkit/0.1"

# quote() leaves these intact, and they would resolve outside base_url
_DOT_SEGMENTS = (".", "..")


class CatalogFetchError(Exception):
    """Raised when one catalog document cannot be fetched."""

    def __init__(self, role: str, reason: str):
        super().__init__(f"{role}: {reason}")
        self.role = role
        self.reason = reason


class RoleCatalog(Protocol):
    """What the resolver needs from a catalog."""

    def fetch(self, role: str) -> list[str]:
        """Return the raw lines of a role's tool list.

        Raises:
            CatalogFetchError: On network failure or non-success status.
        """
        ...

    def list_roles(self) -> list[str]:
        """Return the names of all roles the catalog defines."""
        ...


class HttpRoleCatalog:
    """Catalog backed by plain text files under a base URL.

    Args:
        base_url: Directory URL, with trailing slash.
        index_name: File under ``base_url`` listing role names.
        timeout: Per-request timeout in seconds (None = socket default).
    """

    def __init__(
        self,
        base_url: str,
        index_name: str = "role_names",
        timeout: float | None = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.index_name = index_name
        self.timeout = timeout

    def url_for(self, name: str) -> str:
        # Quote everything, including "/", so a role cannot escape the base directory.
        return self.base_url + urllib.parse.quote(name, safe="")

    def fetch(self, role: str) -> list[str]:
        if role in _DOT_SEGMENTS:
            raise CatalogFetchError(role, "not a valid role name")
        return self._get_lines(role, self.url_for(role))

    def list_roles(self) -> list[str]:
        lines = self._get_lines(self.index_name, self.url_for(self.index_name))
        return [line.strip() for line in lines if line.strip()]

    def _get_lines(self, label: str, url: str) -> list[str]:
        logger.debug("GET %s", url)
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        try:
            if self.timeout is None:
                resp = urllib.request.urlopen(req)
            else:
                resp = urllib.request.urlopen(req, timeout=self.timeout)
            with resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            raise CatalogFetchError(label, f"HTTP {e.code} from {url}") from e
        except urllib.error.URLError as e:
            raise CatalogFetchError(label, f"cannot reach {url}: {e.reason}") from e
        except (OSError, ValueError, http.client.HTTPException) as e:
            raise CatalogFetchError(label, f"cannot fetch {url}: {e}") from e

        return body.decode("utf-8", errors="replace").splitlines()


class StaticRoleCatalog:
    """In-memory catalog. Roles missing from the mapping fail like a 404."""

    def __init__(self, roles: Mapping[str, Sequence[str]]):
        self._roles = {name: list(lines) for name, lines in roles.items()}
        self.fetch_log: list[str] = []

    def fetch(self, role: str) -> list[str]:
        self.fetch_log.append(role)
        if role not in self._roles:
            raise CatalogFetchError(role, "not found")
        return list(self._roles[role])

    def list_roles(self) -> list[str]:
        return sorted(self._roles)
