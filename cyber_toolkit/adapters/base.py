"""
Adapter base — the contract between the batch executor and a package manager.

The executor only talks to package managers through this protocol,
never directly to subprocess. That is what lets the bulk/fallback
logic run against a recording double in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cyber_toolkit.core.models.action import PackageInvocation, Receipt


class Adapter(ABC):
    """Abstract base class for package-manager adapters.

    Adapters perform the privileged side effect and return receipts.
    They NEVER raise: a non-zero exit is a failed receipt, and a
    command that cannot be started is a failed receipt with
    ``launch_failed=True``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'pacman', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the underlying command (and sudo, if needed) exists.

        Should be fast and never raise.
        """

    @abstractmethod
    def build_argv(self, invocation: PackageInvocation) -> list[str]:
        """Return the exact argv that ``execute`` would run."""

    @abstractmethod
    def execute(self, invocation: PackageInvocation) -> Receipt:
        """Run the invocation and return a receipt.

        MUST never raise exceptions.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
