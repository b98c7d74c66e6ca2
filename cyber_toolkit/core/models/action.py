"""
Package invocations and receipts — the execution contract.

An invocation is one package-manager call: a verb applied to a list of
tools. A receipt is its outcome. Adapters take invocations and return
receipts. Never exceptions.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

Verb = Literal["install", "uninstall"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class PackageInvocation(BaseModel):
    """A single package-manager call to be executed by an adapter."""

    verb: Verb
    tools: list[str] = Field(default_factory=list)
    mode: Literal["bulk", "individual"] = "bulk"

    @property
    def label(self) -> str:
        """Short human-readable description for logs."""
        if len(self.tools) == 1:
            return f"{self.verb} {self.tools[0]}"
        return f"{self.verb} {len(self.tools)} tools ({self.mode})"


class Receipt(BaseModel):
    """Result of one package-manager invocation.

    ``launch_failed`` distinguishes "could not start the command at all"
    from "the command ran and exited non-zero". Both are ``failed``.
    """

    adapter: str
    verb: Verb
    tools: list[str] = Field(default_factory=list)
    status: Literal["ok", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    returncode: int | None = None
    launch_failed: bool = False
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the invocation succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the invocation failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        adapter: str,
        invocation: PackageInvocation,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(
            adapter=adapter,
            verb=invocation.verb,
            tools=list(invocation.tools),
            status="ok",
            returncode=0,
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        invocation: PackageInvocation,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt for a command that ran and failed."""
        return cls(
            adapter=adapter,
            verb=invocation.verb,
            tools=list(invocation.tools),
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def launch_failure(
        cls,
        adapter: str,
        invocation: PackageInvocation,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt for a command that could not be started."""
        return cls(
            adapter=adapter,
            verb=invocation.verb,
            tools=list(invocation.tools),
            status="failed",
            launch_failed=True,
            error=error,
            **kwargs,
        )
