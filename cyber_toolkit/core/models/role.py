"""
Role and tool identifiers — normalization and the reconciliation plan.

Roles and tools are plain strings. Everything that enters the system
(CLI arguments, catalog lines, the persisted role file) goes through
the normalizers here, so the rest of the code can treat a
``tuple[str, ...]`` as a clean, sorted, duplicate-free set.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, Field

Operation = Literal["add", "remove", "update"]

_QUOTES = ('"', "'")


def normalize_role(raw: str) -> str:
    """Trim surrounding whitespace from a role identifier."""
    return raw.strip()


def normalize_roles(raw: Iterable[str]) -> tuple[str, ...]:
    """Normalize a role sequence into its canonical RoleSet form.

    Trims, drops empties, deduplicates, and sorts.
    """
    return tuple(sorted({r for r in (normalize_role(x) for x in raw) if r}))


def normalize_tool(raw: str) -> str:
    """Normalize one catalog line into a tool name.

    Applied in order: trim, strip a single trailing comma, trim again,
    strip one layer of matching surrounding quotes. Returns ``""`` for
    lines that carry no tool name.
    """
    s = raw.strip()
    if s.endswith(","):
        s = s[:-1]
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in _QUOTES:
        s = s[1:-1]
    return s


def normalize_tools(raw: Iterable[str]) -> tuple[str, ...]:
    """Normalize catalog lines into a sorted, duplicate-free ToolSet."""
    return tuple(sorted({t for t in (normalize_tool(x) for x in raw) if t}))


class ReconciliationPlan(BaseModel):
    """The tool-level delta for one role operation.

    Built by the planners in ``cyber_toolkit.core.engine.reconciler``
    from already-resolved tool sets. Transient: created per command
    and discarded after reporting.
    """

    operation: Operation
    previous_roles: list[str] = Field(default_factory=list)
    resulting_roles: list[str] = Field(default_factory=list)
    removed_roles: list[str] = Field(default_factory=list)
    tools_to_install: list[str] = Field(default_factory=list)
    tools_to_uninstall: list[str] = Field(default_factory=list)
    skipped_roles: dict[str, str] = Field(default_factory=dict)  # role → fetch error
    uninstall_withheld: bool = False

    @property
    def added_roles(self) -> list[str]:
        """Roles present after the operation that were not there before."""
        before = set(self.previous_roles)
        return [r for r in self.resulting_roles if r not in before]

    @property
    def is_noop(self) -> bool:
        """Whether the plan changes neither roles nor packages."""
        return (
            self.resulting_roles == self.previous_roles
            and not self.tools_to_install
            and not self.tools_to_uninstall
        )

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["added_roles"] = self.added_roles
        return data
