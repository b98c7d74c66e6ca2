"""
Recording adapter — test double for package-manager invocations.

Used by the test suite and by the CLI's ``--mock`` mode to exercise
the bulk/fallback logic without touching a real package manager.
Succeeds by default; individual tools, bulk calls, or launching can
be configured to fail.
"""

from __future__ import annotations

from collections.abc import Iterable

from cyber_toolkit.adapters.base import Adapter
from cyber_toolkit.core.models.action import PackageInvocation, Receipt


class RecordingAdapter(Adapter):
    """Records every invocation and answers from configured failures.

    A call fails if any of its tools is in ``fail_tools`` (so a bulk
    call containing one bad tool fails as a whole, like a real package
    manager), or if it is a bulk call and ``fail_bulk`` is set.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        fail_tools: Iterable[str] = (),
        fail_bulk: bool = False,
        launch_fail_tools: Iterable[str] = (),
        launch_fail_all: bool = False,
    ):
        self._name = adapter_name
        self._available = available
        self._fail_tools = set(fail_tools)
        self._fail_bulk = fail_bulk
        self._launch_fail_tools = set(launch_fail_tools)
        self._launch_fail_all = launch_fail_all
        self._call_log: list[PackageInvocation] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[PackageInvocation]:
        """All invocations this adapter has received, in order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, *tools: str) -> None:
        """Make any call that includes one of these tools exit non-zero."""
        self._fail_tools.update(tools)

    def set_launch_failure(self, *tools: str) -> None:
        """Make any call that includes one of these tools fail to start."""
        self._launch_fail_tools.update(tools)

    def build_argv(self, invocation: PackageInvocation) -> list[str]:
        return [self._name, invocation.verb, "--", *invocation.tools]

    def execute(self, invocation: PackageInvocation) -> Receipt:
        self._call_log.append(invocation)
        tools = set(invocation.tools)

        if self._launch_fail_all or tools & self._launch_fail_tools:
            return Receipt.launch_failure(
                adapter=self._name,
                invocation=invocation,
                error="[mock] could not launch",
            )

        if (self._fail_bulk and invocation.mode == "bulk") or tools & self._fail_tools:
            return Receipt.failure(
                adapter=self._name,
                invocation=invocation,
                error="[mock] exit status 1",
                returncode=1,
            )

        return Receipt.success(
            adapter=self._name,
            invocation=invocation,
            output=f"[mock] {invocation.label}",
            metadata={"mock": True},
        )

