"""
Batch executor — apply one verb to a tool list, bulk first, then per tool.

Flow:
    BULK_ATTEMPT ── ok ──────────────────────────────→ DONE
         └──── failed ──→ INDIVIDUAL_FALLBACK ───────→ DONE

Invocations are strictly sequential: the package database lock means
two package-manager processes must never run at once. Partial failure
is reported in the OperationResult, never raised.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from cyber_toolkit.adapters.base import Adapter
from cyber_toolkit.core.models.action import PackageInvocation, Receipt, Verb
from cyber_toolkit.core.models.result import OperationResult

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    BULK_ATTEMPT = "bulk_attempt"
    INDIVIDUAL_FALLBACK = "individual_fallback"
    DONE = "done"


@dataclass
class _BatchState:
    verb: Verb
    tools: list[str]
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    receipts: list[Receipt] = field(default_factory=list)
    mode: str = "bulk"
    launch_error: str | None = None
    stages: list[Stage] = field(default_factory=list)


class BatchOperationExecutor:
    """Run package-manager verbs through an adapter with per-tool fallback."""

    def __init__(self, adapter: Adapter):
        self.adapter = adapter
        self.last_stages: list[Stage] = []

    def apply(self, verb: Verb, tools: Iterable[str]) -> OperationResult:
        """Apply ``verb`` to ``tools``.

        Every input tool ends up in exactly one of ``succeeded`` or
        ``failed``. Tool order within each invocation follows the input.
        """
        ordered = list(dict.fromkeys(tools))
        self.last_stages = []

        if not ordered:
            return OperationResult(verb=verb, mode="none")

        if not self.adapter.is_available():
            error = f"Package manager '{self.adapter.name}' is not available"
            logger.error("%s; %d tool(s) not processed", error, len(ordered))
            return OperationResult(
                verb=verb,
                failed=ordered,
                mode="none",
                launch_error=error,
            )

        state = _BatchState(verb=verb, tools=ordered)
        stage = Stage.BULK_ATTEMPT
        while stage is not Stage.DONE:
            state.stages.append(stage)
            stage = self._run_stage(stage, state)
        state.stages.append(Stage.DONE)
        self.last_stages = state.stages

        result = OperationResult(
            verb=verb,
            succeeded=state.succeeded,
            failed=state.failed,
            mode=state.mode,
            launch_error=state.launch_error,
            receipts=state.receipts,
        )
        logger.info(
            "%s: %d succeeded, %d failed (%s)",
            verb,
            len(result.succeeded),
            len(result.failed),
            result.mode,
        )
        return result

    def _run_stage(self, stage: Stage, state: _BatchState) -> Stage:
        if stage is Stage.BULK_ATTEMPT:
            return self._bulk_attempt(state)
        if stage is Stage.INDIVIDUAL_FALLBACK:
            return self._individual_fallback(state)
        raise ValueError(f"No handler for stage {stage}")

    def _bulk_attempt(self, state: _BatchState) -> Stage:
        invocation = PackageInvocation(verb=state.verb, tools=state.tools, mode="bulk")
        logger.info("Attempting bulk %s of %d tool(s)", state.verb, len(state.tools))
        receipt = self.adapter.execute(invocation)
        state.receipts.append(receipt)

        if receipt.ok:
            state.succeeded = list(state.tools)
            return Stage.DONE

        logger.warning(
            "Bulk %s failed (%s); retrying each tool individually",
            state.verb,
            receipt.error or f"exit {receipt.returncode}",
        )
        return Stage.INDIVIDUAL_FALLBACK

    def _individual_fallback(self, state: _BatchState) -> Stage:
        state.mode = "individual"
        launch_failures = 0

        for tool in state.tools:
            invocation = PackageInvocation(verb=state.verb, tools=[tool], mode="individual")
            receipt = self.adapter.execute(invocation)
            state.receipts.append(receipt)

            if receipt.ok:
                state.succeeded.append(tool)
                continue

            state.failed.append(tool)
            if receipt.launch_failed:
                launch_failures += 1
            logger.warning("%s failed for '%s': %s", state.verb, tool, receipt.error)

        if launch_failures == len(state.tools):
            state.launch_error = (
                f"Could not launch '{self.adapter.name}' for any of {len(state.tools)} tool(s)"
            )
            logger.error(state.launch_error)

        return Stage.DONE
