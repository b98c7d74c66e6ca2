"""
OperationResult — the partial-success report of one batch.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from cyber_toolkit.core.models.action import Receipt, Verb


class OperationResult(BaseModel):
    """Outcome of applying one verb to a tool list.

    Every input tool appears exactly once, in either ``succeeded`` or
    ``failed``, in input order.
    """

    verb: Verb
    succeeded: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    mode: Literal["none", "bulk", "individual"] = "none"
    launch_error: str | None = None
    receipts: list[Receipt] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def status(self) -> str:
        if not self.failed:
            return "ok"
        if self.succeeded:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "verb": self.verb,
            "mode": self.mode,
            "status": self.status,
            "total": self.total,
            "succeeded": list(self.succeeded),
            "failed": list(self.failed),
            "launch_error": self.launch_error,
        }
