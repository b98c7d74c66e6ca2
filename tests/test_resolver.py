"""
Tests for the tool-set resolver and the in-memory catalog.
"""

from cyber_toolkit.core.services.catalog import CatalogFetchError, StaticRoleCatalog
from cyber_toolkit.core.services.resolver import ToolSetResolver


class FlakyCatalog(StaticRoleCatalog):
    """Static catalog where some roles fail like a network error."""

    def __init__(self, roles, broken):
        super().__init__(roles)
        self.broken = set(broken)

    def fetch(self, role):
        if role in self.broken:
            self.fetch_log.append(role)
            raise CatalogFetchError(role, "connection refused")
        return super().fetch(role)


class TestToolSetResolver:
    def test_union_dedup_across_roles(self, resolver):
        tools = resolver.resolve(["blue-teamer", "red-teamer"])
        assert tools == ("metasploit", "nmap", "wireshark")

    def test_order_independent(self, resolver):
        a = resolver.resolve(["red-teamer", "blue-teamer", "forensics"])
        b = resolver.resolve(["forensics", "blue-teamer", "red-teamer"])
        assert a == b

    def test_empty_roles_no_fetch(self, catalog):
        resolver = ToolSetResolver(catalog)
        assert resolver.resolve([]) == ()
        assert catalog.fetch_log == []

    def test_blank_and_duplicate_roles_fetched_once(self, catalog):
        resolver = ToolSetResolver(catalog)
        resolver.resolve(["blue-teamer", " blue-teamer ", ""])
        assert catalog.fetch_log == ["blue-teamer"]

    def test_missing_role_skipped(self, resolver):
        report = resolver.resolve_report(["nope", "blue-teamer"])
        assert report.tools == ("nmap", "wireshark")
        assert "nope" in report.skipped_roles
        assert not report.complete

    def test_network_error_does_not_abort(self):
        catalog = FlakyCatalog(
            {"a": ["one"], "b": ["two"], "c": ["three"]},
            broken=["b"],
        )
        report = ToolSetResolver(catalog).resolve_report(["a", "b", "c"])
        assert report.tools == ("one", "three")
        assert report.skipped_roles == {"b": "connection refused"}
        assert catalog.fetch_log == ["a", "b", "c"]

    def test_empty_role_resolves_to_nothing(self, resolver):
        report = resolver.resolve_report(["empty"])
        assert report.tools == ()
        assert report.complete

    def test_empty_role_adds_nothing_to_union(self, resolver):
        assert resolver.resolve(["empty", "red-teamer"]) == ("metasploit", "nmap")


class TestStaticRoleCatalog:
    def test_list_roles_sorted(self, catalog):
        assert catalog.list_roles() == ["blue-teamer", "empty", "forensics", "red-teamer"]

    def test_fetch_returns_copy(self, catalog):
        lines = catalog.fetch("blue-teamer")
        lines.append("evil")
        assert catalog.fetch("blue-teamer") == ["nmap", "wireshark"]
