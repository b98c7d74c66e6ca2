"""
Domain models — Pydantic types for the toolkit.

All models are re-exported here for convenient access:

    from cyber_toolkit.core.models import ReconciliationPlan, OperationResult
"""

from cyber_toolkit.core.models.action import PackageInvocation, Receipt, Verb
from cyber_toolkit.core.models.result import OperationResult
from cyber_toolkit.core.models.role import (
    Operation,
    ReconciliationPlan,
    normalize_role,
    normalize_roles,
    normalize_tool,
    normalize_tools,
)

__all__ = [
    # role.py
    "Operation",
    # result.py
    "OperationResult",
    # action.py
    "PackageInvocation",
    "Receipt",
    "ReconciliationPlan",
    "Verb",
    "normalize_role",
    "normalize_roles",
    "normalize_tool",
    "normalize_tools",
]
