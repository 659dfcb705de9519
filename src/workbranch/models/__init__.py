"""Data models for workbranch."""

from workbranch.models.results import (
    CredentialError,
    GitResult,
    LoginResult,
    LookupFailure,
    ProvisionError,
    ProvisionResult,
    TitleResult,
    TokenResult,
)
from workbranch.models.state import (
    DEFAULT_BRANCH_TYPE,
    BranchRequest,
    BranchType,
    ProvisionState,
    RollbackAction,
    RunConfig,
    WorkItem,
)

__all__ = [
    # Results
    "CredentialError",
    "LookupFailure",
    "ProvisionError",
    "TokenResult",
    "TitleResult",
    "GitResult",
    "ProvisionResult",
    "LoginResult",
    # State
    "ProvisionState",
    "RollbackAction",
    "BranchType",
    "DEFAULT_BRANCH_TYPE",
    "BranchRequest",
    "RunConfig",
    "WorkItem",
]
