"""
Tests for domain models — normalization, plans, receipts, results.
"""

import pytest

from cyber_toolkit.core.models import (
    OperationResult,
    PackageInvocation,
    Receipt,
    ReconciliationPlan,
    normalize_role,
    normalize_roles,
    normalize_tool,
    normalize_tools,
)


class TestNormalizeRole:
    def test_trims(self):
        assert normalize_role("  blue-teamer\t") == "blue-teamer"

    def test_case_sensitive(self):
        assert normalize_roles(["Blue", "blue"]) == ("Blue", "blue")

    def test_sorted_dedup_no_empties(self):
        assert normalize_roles(["red", " blue ", "", "red", "   "]) == ("blue", "red")


class TestNormalizeTool:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("nmap", "nmap"),
            ("  nmap  ", "nmap"),
            ("nmap,", "nmap"),
            ('"nmap",', "nmap"),
            ("'nmap'", "nmap"),
            (' "nmap" , ', "nmap"),
            ("nmap,,", "nmap,"),
            ("\"nmap'", "\"nmap'"),
            ('""', ""),
            ('"', '"'),
            ('""nmap""', '"nmap"'),
            ("", ""),
            (",", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_tool(raw) == expected

    def test_tools_drop_empty_and_dedup(self):
        lines = ["nmap", '"nmap",', "", "  ", "'wireshark'", ","]
        assert normalize_tools(lines) == ("nmap", "wireshark")


class TestReconciliationPlan:
    def test_added_roles(self):
        plan = ReconciliationPlan(
            operation="add",
            previous_roles=["blue"],
            resulting_roles=["blue", "red"],
        )
        assert plan.added_roles == ["red"]

    def test_noop(self):
        plan = ReconciliationPlan(
            operation="remove",
            previous_roles=["blue"],
            resulting_roles=["blue"],
        )
        assert plan.is_noop

    def test_not_noop_with_installs(self):
        plan = ReconciliationPlan(
            operation="add",
            previous_roles=["blue"],
            resulting_roles=["blue"],
            tools_to_install=["nmap"],
        )
        assert not plan.is_noop

    def test_to_dict(self):
        plan = ReconciliationPlan(operation="update", resulting_roles=["x"])
        d = plan.to_dict()
        assert d["operation"] == "update"
        assert d["added_roles"] == ["x"]
        assert d["uninstall_withheld"] is False


class TestReceipt:
    def test_success(self):
        inv = PackageInvocation(verb="install", tools=["nmap"])
        r = Receipt.success(adapter="mock", invocation=inv)
        assert r.ok
        assert r.returncode == 0
        assert r.tools == ["nmap"]

    def test_failure(self):
        inv = PackageInvocation(verb="uninstall", tools=["nmap"])
        r = Receipt.failure(adapter="mock", invocation=inv, error="boom", returncode=1)
        assert r.failed
        assert not r.launch_failed

    def test_launch_failure(self):
        inv = PackageInvocation(verb="install", tools=["nmap"])
        r = Receipt.launch_failure(adapter="mock", invocation=inv, error="no pacman")
        assert r.failed
        assert r.launch_failed
        assert r.returncode is None

    def test_invocation_label(self):
        assert PackageInvocation(verb="install", tools=["a"]).label == "install a"
        assert "2 tools" in PackageInvocation(verb="install", tools=["a", "b"]).label


class TestOperationResult:
    def test_status(self):
        assert OperationResult(verb="install", succeeded=["a"]).status == "ok"
        assert OperationResult(verb="install", succeeded=["a"], failed=["b"]).status == "partial"
        assert OperationResult(verb="install", failed=["b"]).status == "failed"

    def test_empty_is_ok(self):
        r = OperationResult(verb="install")
        assert r.ok
        assert r.total == 0

    def test_to_dict(self):
        r = OperationResult(verb="uninstall", succeeded=["a"], failed=["b"], mode="individual")
        d = r.to_dict()
        assert d["status"] == "partial"
        assert d["total"] == 2
        assert d["mode"] == "individual"
        assert "receipts" not in d
