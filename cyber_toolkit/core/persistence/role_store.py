"""
Role store — atomic read/write of the persisted role set.

The role set lives in a plain text file (default ``~/.roles/roles.cnf``),
one role per line, UTF-8. Writes are atomic (write to temp file, then
rename) so a crash mid-write leaves the previous set intact.

No file locking: concurrent invocations can race on read-modify-write.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterable
from pathlib import Path

from cyber_toolkit.core.models.role import normalize_roles

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the role set cannot be read or written."""


class RoleStore:
    """Load and save a RoleSet at a fixed path."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> tuple[str, ...]:
        """Read the persisted role set.

        Returns:
            Sorted, deduplicated roles. Empty if the file does not exist.

        Raises:
            PersistenceError: On any I/O or decoding error other than
                "not found".
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No role file at %s — starting with no roles", self.path)
            return ()
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Cannot read roles from {self.path}: {e}") from e

        roles = normalize_roles(raw.splitlines())
        logger.debug("Loaded %d role(s) from %s", len(roles), self.path)
        return roles

    def save(self, roles: Iterable[str]) -> tuple[str, ...]:
        """Write the role set (atomic write).

        Returns:
            The normalized roles actually written.

        Raises:
            PersistenceError: If the file or its directory cannot be written.
        """
        normalized = normalize_roles(roles)
        content = "".join(f"{role}\n" for role in normalized)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=".roles_",
                suffix=".tmp",
            )
            tmp = Path(tmp_path)
            try:
                with open(fd, "w", encoding="utf-8") as fh:
                    fh.write(content)
                tmp.replace(self.path)
            except BaseException:
                tmp.unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Failed to save roles to %s: %s", self.path, e)
            raise PersistenceError(f"Cannot write roles to {self.path}: {e}") from e

        logger.info("Saved roles %s to %s", list(normalized), self.path)
        return normalized
