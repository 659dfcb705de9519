"""Result models for credential, lookup, provisioning, and login operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CredentialError(Enum):
    """Why a PAT could not be configured."""

    EMPTY_INPUT = "empty_input"
    ABORTED = "aborted"


class LookupFailure(Enum):
    """Why a work item title could not be resolved."""

    NOT_FOUND = "not_found"
    AUTH_FAILED = "auth_failed"
    CLI_MISSING = "cli_missing"


class ProvisionError(Enum):
    """Failure kinds reported by the branch provisioner."""

    INVALID_INPUT = "invalid_input"
    INVALID_BRANCH_TYPE = "invalid_branch_type"
    AUTH_ERROR = "auth_error"
    NOT_A_REPOSITORY = "not_a_repository"
    TITLE_UNRESOLVED = "title_unresolved"
    BRANCH_ALREADY_EXISTS = "branch_already_exists"
    STASH_FAILED = "stash_failed"
    CHECKOUT_FAILED = "checkout_failed"
    PULL_FAILED = "pull_failed"
    BRANCH_CREATE_FAILED = "branch_create_failed"
    STASH_RESTORE_FAILED = "stash_restore_failed"


@dataclass
class TokenResult:
    """Outcome of ensuring a PAT is available."""

    token: Optional[str] = None
    error: Optional[CredentialError] = None
    prompted: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.token)


@dataclass
class TitleResult:
    """Outcome of a work item title lookup."""

    title: Optional[str] = None
    error: Optional[LookupFailure] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.title)


@dataclass
class GitResult:
    """Outcome of a single version control command."""

    ok: bool
    output: str = ""
    # Commit of the entry a stash push created; None when nothing was saved
    stash_commit: Optional[str] = None


@dataclass
class ProvisionResult:
    """Outcome of a create_branch call."""

    branch_name: Optional[str] = None
    error: Optional[ProvisionError] = None
    message: str = ""
    rollback_notes: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LoginResult:
    """Outcome of logging in to every configured AWS profile."""

    logged_in: list[str] = field(default_factory=list)
    already_valid: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed
