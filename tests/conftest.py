"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from cyber_toolkit.adapters.mock import RecordingAdapter
from cyber_toolkit.core.engine.batch import BatchOperationExecutor
from cyber_toolkit.core.engine.reconciler import ReconciliationEngine
from cyber_toolkit.core.persistence.role_store import RoleStore
from cyber_toolkit.core.services.catalog import StaticRoleCatalog
from cyber_toolkit.core.services.resolver import ToolSetResolver

CATALOG = {
    "blue-teamer": ["nmap", "wireshark"],
    "red-teamer": ['"nmap",', "metasploit"],
    "forensics": ["volatility", "sleuthkit", "wireshark"],
    "empty": ["", "   "],
}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the real home directory and CTK_* settings."""
    for name in (
        "CTK_CONFIG",
        "CTK_CATALOG_URL",
        "CTK_ROLE_FILE",
        "CTK_PACKAGE_MANAGER",
        "CTK_HTTP_TIMEOUT",
        "CTK_LOG_LEVEL",
        "CTK_LOG_FILE",
        "CTK_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def catalog() -> StaticRoleCatalog:
    return StaticRoleCatalog(CATALOG)


@pytest.fixture
def resolver(catalog: StaticRoleCatalog) -> ToolSetResolver:
    return ToolSetResolver(catalog)


@pytest.fixture
def role_file(tmp_path: Path) -> Path:
    return tmp_path / ".roles" / "roles.cnf"


@pytest.fixture
def store(role_file: Path) -> RoleStore:
    return RoleStore(role_file)


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def engine(store: RoleStore, resolver: ToolSetResolver, adapter: RecordingAdapter) -> ReconciliationEngine:
    return ReconciliationEngine(
        store=store,
        resolver=resolver,
        executor=BatchOperationExecutor(adapter),
    )
