"""
Tests for the HTTP role catalog (urlopen is stubbed; no network).
"""

import io
import urllib.error
import urllib.request

import pytest

from cyber_toolkit.core.services.catalog import CatalogFetchError, HttpRoleCatalog

BASE = "https://example.test/roles/"


class _FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


@pytest.fixture
def served(monkeypatch: pytest.MonkeyPatch):
    """Serve a dict of URL → body (bytes) or exception; record requests."""
    pages: dict = {}
    calls: list = []

    def fake_urlopen(req, timeout=None):
        url = req.full_url
        calls.append((url, timeout))
        page = pages.get(url)
        if page is None:
            raise urllib.error.HTTPError(url, 404, "Not Found", {}, None)
        if isinstance(page, Exception):
            raise page
        return _FakeResponse(page)

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    return pages, calls


class TestHttpRoleCatalog:
    def test_fetch_lines(self, served):
        pages, calls = served
        pages[BASE + "blue-teamer"] = b"nmap\n\"wireshark\",\n\n"
        catalog = HttpRoleCatalog(BASE)
        assert catalog.fetch("blue-teamer") == ["nmap", '"wireshark",', ""]
        assert calls == [(BASE + "blue-teamer", None)]

    def test_timeout_passed(self, served):
        pages, calls = served
        pages[BASE + "x"] = b"a\n"
        HttpRoleCatalog(BASE, timeout=2.5).fetch("x")
        assert calls[0][1] == 2.5

    def test_base_url_gets_trailing_slash(self):
        assert HttpRoleCatalog("https://example.test/roles").url_for("x") == BASE + "x"

    def test_role_is_quoted(self):
        catalog = HttpRoleCatalog(BASE)
        assert catalog.url_for("../secret") == BASE + "..%2Fsecret"
        assert catalog.url_for("a b") == BASE + "a%20b"

    @pytest.mark.parametrize("role", [".", ".."])
    def test_dot_segment_role_not_requested(self, served, role):
        _, calls = served
        with pytest.raises(CatalogFetchError, match="not a valid role name"):
            HttpRoleCatalog(BASE).fetch(role)
        assert calls == []

    def test_http_error(self, served):
        with pytest.raises(CatalogFetchError) as exc:
            HttpRoleCatalog(BASE).fetch("missing")
        assert exc.value.role == "missing"
        assert "404" in exc.value.reason

    def test_network_error(self, served):
        pages, _ = served
        pages[BASE + "x"] = urllib.error.URLError("connection refused")
        with pytest.raises(CatalogFetchError) as exc:
            HttpRoleCatalog(BASE).fetch("x")
        assert "connection refused" in exc.value.reason

    def test_socket_timeout(self, served):
        pages, _ = served
        pages[BASE + "x"] = TimeoutError("timed out")
        with pytest.raises(CatalogFetchError):
            HttpRoleCatalog(BASE).fetch("x")

    def test_list_roles(self, served):
        pages, _ = served
        pages[BASE + "role_names"] = b"blue-teamer\n  red-teamer  \n\n"
        assert HttpRoleCatalog(BASE).list_roles() == ["blue-teamer", "red-teamer"]

    def test_custom_index(self, served):
        pages, _ = served
        pages[BASE + "index.txt"] = b"a\n"
        assert HttpRoleCatalog(BASE, index_name="index.txt").list_roles() == ["a"]
