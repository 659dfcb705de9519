"""Branch provisioning: work item -> fresh branch off the updated default branch.

Flow (ProvisionState):
    IDLE -> TITLE_RESOLVED -> STASH_CHECKED -> [STASHED] -> MAIN_CHECKED_OUT
         -> MAIN_PULLED -> BRANCH_CREATED -> [STASH_RESTORED] -> SUCCESS

Every check that can fail without side effects runs before the first
mutating git command. After a mutation fails, the recovery steps come from
ROLLBACK_TABLE keyed by the last state reached. Once the branch exists no
rollback happens: a failed stash restore leaves the branch in place and the
changes in the stash.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from workbranch.auth import ensure_token
from workbranch.clients.boards import WorkItemTracker
from workbranch.config.settings import Settings
from workbranch.git.branch import (
    format_branch_name,
    parse_branch_type,
    parse_work_item_id,
    slugify,
)
from workbranch.git.repo import VersionControl
from workbranch.models.results import LookupFailure, ProvisionError, ProvisionResult, TokenResult
from workbranch.models.state import (
    BranchRequest,
    BranchType,
    ProvisionState,
    RollbackAction,
    WorkItem,
)
from workbranch.ui.output import log, success, warn
from workbranch.ui.timer import LiveTimer
from workbranch.utils.formatting import first_line

ROLLBACK_TABLE: dict[ProvisionState, tuple[RollbackAction, ...]] = {
    # checkout of the default branch failed
    ProvisionState.STASH_CHECKED: (RollbackAction.RESTORE_STASH,),
    ProvisionState.STASHED: (RollbackAction.RESTORE_STASH,),
    # pull failed
    ProvisionState.MAIN_CHECKED_OUT: (
        RollbackAction.RETURN_TO_ORIGIN,
        RollbackAction.RESTORE_STASH,
    ),
    # branch creation failed
    ProvisionState.MAIN_PULLED: (
        RollbackAction.RETURN_TO_ORIGIN,
        RollbackAction.RESTORE_STASH,
    ),
}


def _with_output(message: str, output: str) -> str:
    """Append the first line of git's output to a failure message, if any."""
    line = first_line(output)
    return f"{message}: {line}" if line else message


@dataclass
class _Attempt:
    """Mutable bookkeeping for one create_branch call."""

    request: BranchRequest
    state: ProvisionState = ProvisionState.IDLE
    work_item: Optional[WorkItem] = None
    branch_name: str = ""
    origin_ref: str = ""
    stashed: bool = False
    stash_commit: Optional[str] = None
    states: list[ProvisionState] = field(default_factory=list)

    def advance(self, state: ProvisionState) -> None:
        self.state = state
        self.states.append(state)


class Provisioner:
    """Creates work item branches against an injected repo and tracker."""

    def __init__(
        self,
        settings: Settings,
        vcs: VersionControl,
        tracker: WorkItemTracker,
        credentials: Callable[[], TokenResult] = ensure_token,
    ):
        self.settings = settings
        self.vcs = vcs
        self.tracker = tracker
        self.credentials = credentials
        self.last_states: list[ProvisionState] = []
        self.last_work_item: Optional[WorkItem] = None

    def _fail(
        self, attempt: Optional[_Attempt], error: ProvisionError, message: str
    ) -> ProvisionResult:
        notes: list[str] = []
        if attempt is not None:
            notes = self._rollback(attempt)
            attempt.advance(ProvisionState.FAILED)
            self.last_states = attempt.states
            self.last_work_item = attempt.work_item
        return ProvisionResult(
            branch_name=(attempt.branch_name or None) if attempt else None,
            error=error,
            message=message,
            rollback_notes=notes,
        )

    def _restore_stash(self, attempt: _Attempt) -> bool:
        result = self.vcs.stash_pop(attempt.stash_commit)
        if result.ok:
            attempt.stashed = False
            log("Restored uncommitted changes")
            return True
        warn("Failed to restore stashed changes. Your changes are still in the stash.")
        return False

    def _rollback(self, attempt: _Attempt) -> list[str]:
        """Best-effort recovery for the state reached. Outcomes are reported, not raised."""
        notes: list[str] = []
        actions = ROLLBACK_TABLE.get(attempt.state, ())
        for action in actions:
            if action is RollbackAction.RETURN_TO_ORIGIN:
                if not attempt.origin_ref:
                    notes.append("original branch unknown, not switching back")
                    break
                result = self.vcs.checkout(attempt.origin_ref)
                if not result.ok:
                    warn(f"Could not switch back to {attempt.origin_ref}: {result.output}")
                    notes.append(f"could not switch back to {attempt.origin_ref}")
                    break
                log(f"Switched back to {attempt.origin_ref}")
                notes.append(f"switched back to {attempt.origin_ref}")
            elif action is RollbackAction.RESTORE_STASH and attempt.stashed:
                if self._restore_stash(attempt):
                    notes.append("restored stashed changes")
                else:
                    notes.append("stash restore failed")

        if actions and attempt.stashed:
            warn("Uncommitted changes remain in the stash (see `git stash list`).")
        return notes

    def create_branch(
        self, work_item_id: Optional[str], branch_type: Optional[str] = None
    ) -> ProvisionResult:
        """Create `AB#<id>/<type>-<slug>` from the freshly pulled default branch.

        Uncommitted changes are stashed first and restored on every exit path
        after the stash. Returns a ProvisionResult; never raises for git or
        tracker failures.
        """
        self.last_states = []
        self.last_work_item = None

        parsed_id = parse_work_item_id(work_item_id)
        if parsed_id is None:
            return self._fail(
                None,
                ProvisionError.INVALID_INPUT,
                "Usage: workbranch <work-item-id> [branch-type] (id must be a positive integer)",
            )

        parsed_type = parse_branch_type(branch_type)
        if parsed_type is None:
            allowed = ", ".join(BranchType.values())
            return self._fail(
                None,
                ProvisionError.INVALID_BRANCH_TYPE,
                f"Invalid branch type '{branch_type}'. Use one of: {allowed}",
            )

        attempt = _Attempt(request=BranchRequest(work_item_id=parsed_id, branch_type=parsed_type))
        attempt.advance(ProvisionState.IDLE)

        token = self.credentials()
        if not token.ok:
            return self._fail(
                attempt, ProvisionError.AUTH_ERROR, "Azure DevOps PAT is not configured"
            )

        if not self.vcs.is_inside_work_tree():
            return self._fail(attempt, ProvisionError.NOT_A_REPOSITORY, "Not in a git repository")

        with LiveTimer(f"Fetching work item {parsed_id}...", print_final=False):
            lookup = self.tracker.fetch_title(parsed_id)
        if not lookup.ok:
            kind = (
                ProvisionError.AUTH_ERROR
                if lookup.error is LookupFailure.AUTH_FAILED
                else ProvisionError.TITLE_UNRESOLVED
            )
            return self._fail(
                attempt,
                kind,
                f"Could not fetch work item title from Azure DevOps. {lookup.message}".strip(),
            )

        slug = slugify(lookup.title or "")
        if not slug:
            return self._fail(
                attempt,
                ProvisionError.TITLE_UNRESOLVED,
                f"Work item title '{lookup.title}' has no letters or digits to name a branch",
            )
        attempt.work_item = WorkItem(id=parsed_id, title=lookup.title)
        attempt.advance(ProvisionState.TITLE_RESOLVED)
        log(f"Work item: {lookup.title}")

        request = attempt.request
        attempt.branch_name = format_branch_name(
            request.work_item_id, request.branch_type, slug, prefix=self.settings.branch_prefix
        )
        if self.vcs.ref_exists(attempt.branch_name):
            return self._fail(
                attempt,
                ProvisionError.BRANCH_ALREADY_EXISTS,
                f"Branch '{attempt.branch_name}' already exists",
            )

        attempt.origin_ref = self.vcs.current_ref()
        dirty = self.vcs.is_dirty()
        attempt.advance(ProvisionState.STASH_CHECKED)

        if dirty:
            log("Stashing uncommitted changes...")
            stash = self.vcs.stash_push(self.settings.stash_message)
            if not stash.ok:
                return self._fail(
                    attempt,
                    ProvisionError.STASH_FAILED,
                    _with_output("Failed to stash changes", stash.output),
                )
            if stash.stash_commit:
                attempt.stashed = True
                attempt.stash_commit = stash.stash_commit
                attempt.advance(ProvisionState.STASHED)
            else:
                log("Nothing was stashed, continuing without a stash entry")

        default = self.settings.default_branch
        checkout = self.vcs.checkout(default)
        if not checkout.ok:
            return self._fail(
                attempt,
                ProvisionError.CHECKOUT_FAILED,
                _with_output(f"Failed to checkout {default} branch", checkout.output),
            )
        attempt.advance(ProvisionState.MAIN_CHECKED_OUT)

        pull = self.vcs.pull(self.settings.remote, default)
        if not pull.ok:
            return self._fail(
                attempt,
                ProvisionError.PULL_FAILED,
                _with_output(f"Failed to pull latest changes from {default}", pull.output),
            )
        attempt.advance(ProvisionState.MAIN_PULLED)

        create = self.vcs.create_branch(attempt.branch_name)
        if not create.ok:
            return self._fail(
                attempt,
                ProvisionError.BRANCH_CREATE_FAILED,
                _with_output(f"Failed to create branch '{attempt.branch_name}'", create.output),
            )
        attempt.advance(ProvisionState.BRANCH_CREATED)

        if attempt.stashed:
            log("Restoring uncommitted changes...")
            if not self._restore_stash(attempt):
                # Point of no return: the branch stays, the stash is left for manual recovery
                return self._fail(
                    attempt,
                    ProvisionError.STASH_RESTORE_FAILED,
                    (
                        f"Created branch '{attempt.branch_name}' but failed to restore "
                        "stashed changes. Your changes are still in the stash."
                    ),
                )
            attempt.advance(ProvisionState.STASH_RESTORED)

        attempt.advance(ProvisionState.SUCCESS)
        self.last_states = attempt.states
        self.last_work_item = attempt.work_item
        success(f"Created and switched to branch: {attempt.branch_name}")
        return ProvisionResult(branch_name=attempt.branch_name)
