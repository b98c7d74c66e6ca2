"""
Reconciliation engine — move the machine from its persisted roles to the requested ones.

Planning is set algebra over resolved tool lists:

    add     resulting = persisted ∪ requested
            install   = tools(resulting)
    remove  kept      = persisted \\ requested
            removed   = persisted ∩ requested
            uninstall = tools(removed) \\ tools(kept)
    update  install   = tools(target)             (applied first)
            uninstall = tools(persisted \\ target) \\ tools(target)

A tool needed by a role that stays is never uninstalled. If a role
that stays could not be resolved, its tools are unknown, so the plan
withholds all uninstalls rather than risk removing one of them.

The engine then executes the plan and persists the resulting roles.
The role write does not depend on package success. A role file that
could not be read is never rewritten by remove.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from cyber_toolkit.core.engine.batch import BatchOperationExecutor
from cyber_toolkit.core.models.result import OperationResult
from cyber_toolkit.core.models.role import ReconciliationPlan, normalize_roles
from cyber_toolkit.core.persistence.role_store import PersistenceError, RoleStore
from cyber_toolkit.core.services.resolver import ToolSetResolver

logger = logging.getLogger(__name__)


# ── Planning (no side effects beyond catalog reads) ─────────────


def plan_add(
    persisted: Iterable[str],
    requested: Iterable[str],
    resolver: ToolSetResolver,
) -> ReconciliationPlan:
    previous = normalize_roles(persisted)
    resulting = normalize_roles([*previous, *requested])
    resolution = resolver.resolve_report(resulting)

    return ReconciliationPlan(
        operation="add",
        previous_roles=list(previous),
        resulting_roles=list(resulting),
        tools_to_install=list(resolution.tools),
        skipped_roles=dict(resolution.skipped_roles),
    )


def plan_remove(
    persisted: Iterable[str],
    requested: Iterable[str],
    resolver: ToolSetResolver,
) -> ReconciliationPlan:
    previous = normalize_roles(persisted)
    to_remove = set(normalize_roles(requested))
    kept = [r for r in previous if r not in to_remove]
    removed = [r for r in previous if r in to_remove]

    plan = ReconciliationPlan(
        operation="remove",
        previous_roles=list(previous),
        resulting_roles=kept,
        removed_roles=removed,
    )
    if not removed:
        return plan

    kept_resolution = resolver.resolve_report(kept)
    removed_resolution = resolver.resolve_report(removed)
    plan.skipped_roles = {**kept_resolution.skipped_roles, **removed_resolution.skipped_roles}
    _fill_uninstall(plan, removed_resolution.tools, kept_resolution.tools, kept_resolution.complete)
    return plan


def plan_update(
    persisted: Iterable[str],
    target: Iterable[str],
    resolver: ToolSetResolver,
) -> ReconciliationPlan:
    previous = normalize_roles(persisted)
    resulting = normalize_roles(target)
    wanted = set(resulting)
    removed = [r for r in previous if r not in wanted]

    target_resolution = resolver.resolve_report(resulting)
    plan = ReconciliationPlan(
        operation="update",
        previous_roles=list(previous),
        resulting_roles=list(resulting),
        removed_roles=removed,
        tools_to_install=list(target_resolution.tools),
        skipped_roles=dict(target_resolution.skipped_roles),
    )
    if not removed:
        return plan

    removed_resolution = resolver.resolve_report(removed)
    plan.skipped_roles.update(removed_resolution.skipped_roles)
    _fill_uninstall(
        plan,
        removed_resolution.tools,
        target_resolution.tools,
        target_resolution.complete,
    )
    return plan


def _fill_uninstall(
    plan: ReconciliationPlan,
    removed_tools: Iterable[str],
    kept_tools: Iterable[str],
    kept_complete: bool,
) -> None:
    keep = set(kept_tools)
    candidates = sorted(t for t in set(removed_tools) if t not in keep)
    if candidates and not kept_complete:
        logger.warning(
            "Not uninstalling %d tool(s): could not resolve every remaining role",
            len(candidates),
        )
        plan.uninstall_withheld = True
        return
    plan.tools_to_uninstall = candidates


# ── Execution ───────────────────────────────────────────────────


@dataclass
class ReconcileReport:
    """Everything that happened during one reconcile command."""

    plan: ReconciliationPlan
    install: OperationResult | None = None
    uninstall: OperationResult | None = None
    persisted_roles: list[str] | None = None
    persist_error: str | None = None
    load_error: str | None = None
    dry_run: bool = False

    @property
    def persisted(self) -> bool:
        return self.persisted_roles is not None

    @property
    def results(self) -> list[OperationResult]:
        return [r for r in (self.install, self.uninstall) if r is not None]

    @property
    def failed_tools(self) -> list[str]:
        return [t for r in self.results for t in r.failed]

    @property
    def launch_error(self) -> str | None:
        for r in self.results:
            if r.launch_error:
                return r.launch_error
        return None

    @property
    def exit_code(self) -> int:
        """Non-zero only for a failed role write or a total launch failure."""
        if self.persist_error or self.launch_error:
            return 1
        return 0

    def to_dict(self) -> dict:
        return {
            "plan": self.plan.to_dict(),
            "install": self.install.to_dict() if self.install else None,
            "uninstall": self.uninstall.to_dict() if self.uninstall else None,
            "persisted_roles": self.persisted_roles,
            "persist_error": self.persist_error,
            "load_error": self.load_error,
            "dry_run": self.dry_run,
            "exit_code": self.exit_code,
        }


class ReconciliationEngine:
    """Apply add/remove/update to the persisted role set.

    Args:
        store: Where the role set is persisted.
        resolver: Role → tool resolution.
        executor: Runs install/uninstall batches.
        dry_run: Plan only; run no package commands and write nothing.
    """

    def __init__(
        self,
        store: RoleStore,
        resolver: ToolSetResolver,
        executor: BatchOperationExecutor,
        dry_run: bool = False,
    ):
        self.store = store
        self.resolver = resolver
        self.executor = executor
        self.dry_run = dry_run

    def current(self) -> tuple[str, ...]:
        """The persisted role set (empty if unreadable)."""
        roles, _ = self._load()
        return roles

    def add(self, roles: Iterable[str]) -> ReconcileReport:
        persisted, load_error = self._load()
        plan = plan_add(persisted, roles, self.resolver)
        report = ReconcileReport(plan=plan, load_error=load_error, dry_run=self.dry_run)
        logger.info("Add: %s → %s", plan.previous_roles, plan.resulting_roles)

        if self.dry_run:
            return report

        report.install = self.executor.apply("install", plan.tools_to_install)
        self._persist(report, plan.resulting_roles)
        return report

    def remove(self, roles: Iterable[str]) -> ReconcileReport:
        persisted, load_error = self._load()
        plan = plan_remove(persisted, roles, self.resolver)
        report = ReconcileReport(plan=plan, load_error=load_error, dry_run=self.dry_run)

        if not plan.removed_roles:
            logger.info("None of the requested roles are configured; nothing to remove")
        else:
            logger.info("Remove: %s (keeping %s)", plan.removed_roles, plan.resulting_roles)

        if self.dry_run:
            return report

        if plan.removed_roles:
            report.uninstall = self.executor.apply("uninstall", plan.tools_to_uninstall)
        if load_error:
            # An unreadable role file is left as is.
            logger.warning("Not rewriting unreadable role file %s", self.store.path)
            return report
        self._persist(report, plan.resulting_roles)
        return report

    def update(self, roles: Iterable[str]) -> ReconcileReport:
        """Set the role set to exactly ``roles``: install first, then remove."""
        persisted, load_error = self._load()
        plan = plan_update(persisted, roles, self.resolver)
        report = ReconcileReport(plan=plan, load_error=load_error, dry_run=self.dry_run)
        logger.info(
            "Update: %s → %s (removing %s)",
            plan.previous_roles,
            plan.resulting_roles,
            plan.removed_roles,
        )

        if self.dry_run:
            return report

        report.install = self.executor.apply("install", plan.tools_to_install)
        if not plan.removed_roles:
            self._persist(report, plan.resulting_roles)
            return report

        # Intermediate state: target roles present, old roles not yet dropped.
        if not self._persist(report, [*plan.previous_roles, *plan.resulting_roles]):
            return report

        report.uninstall = self.executor.apply("uninstall", plan.tools_to_uninstall)
        self._persist(report, plan.resulting_roles)
        return report

    def _load(self) -> tuple[tuple[str, ...], str | None]:
        try:
            return self.store.load(), None
        except PersistenceError as e:
            logger.warning("%s — continuing with no roles", e)
            return (), str(e)

    def _persist(self, report: ReconcileReport, roles: Iterable[str]) -> bool:
        try:
            report.persisted_roles = list(self.store.save(roles))
        except PersistenceError as e:
            report.persist_error = str(e)
            return False
        return True
