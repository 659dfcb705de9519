"""State models for the branch provisioning workflow."""

from dataclasses import dataclass
from enum import Enum, auto


class ProvisionState(Enum):
    """States in the branch provisioning state machine."""

    IDLE = auto()
    TITLE_RESOLVED = auto()
    STASH_CHECKED = auto()  # Dirty check done, nothing stashed yet
    STASHED = auto()
    MAIN_CHECKED_OUT = auto()
    MAIN_PULLED = auto()
    BRANCH_CREATED = auto()
    STASH_RESTORED = auto()
    SUCCESS = auto()  # Terminal
    FAILED = auto()  # Terminal


class RollbackAction(Enum):
    """Recovery steps attempted after a failure."""

    RETURN_TO_ORIGIN = auto()
    RESTORE_STASH = auto()


class BranchType(str, Enum):
    """Allowed branch type tags, in the order shown to users."""

    FEATURE = "feature"
    BUGFIX = "bugfix"
    FORMAT = "format"
    REFACTORING = "refactoring"

    @classmethod
    def values(cls) -> list[str]:
        return [t.value for t in cls]


DEFAULT_BRANCH_TYPE = BranchType.FEATURE


@dataclass(frozen=True)
class WorkItem:
    """A tracker work item as read for naming a branch."""

    id: str
    title: str


@dataclass(frozen=True)
class BranchRequest:
    """Validated caller input for create_branch."""

    work_item_id: str
    branch_type: BranchType = DEFAULT_BRANCH_TYPE


@dataclass
class RunConfig:
    """CLI arguments bundled together."""

    work_item_id: str
    branch_type: str
    debug: bool = False
