"""Shared test fixtures."""

from typing import Optional

import pytest

from workbranch.clients.boards import WorkItemTracker
from workbranch.config.settings import AwsProfile, CodeArtifactSettings, RdsSettings, Settings
from workbranch.git.repo import VersionControl
from workbranch.models.results import GitResult, LookupFailure, TitleResult, TokenResult


class FakeRepo(VersionControl):
    """In-memory working tree.

    Initial state comes from the constructor; operations mutate it the way git
    would. `fail` holds operation names ("stash_push", "stash_pop", "pull",
    "create_branch", "checkout:<ref>") that should report failure.
    `unstashable` models changes git reports as dirty but `stash push` does
    not capture, such as edits inside a submodule.
    `calls` records every operation for assertions.
    """

    def __init__(
        self,
        *,
        branches: Optional[set[str]] = None,
        current: str = "work",
        changes: Optional[str] = None,
        stash: Optional[list[str]] = None,
        inside_work_tree: bool = True,
        fail: Optional[set[str]] = None,
        unstashable: bool = False,
    ):
        self.branches = set(branches) if branches is not None else {"main", "work"}
        self.current = current
        self.changes = changes
        self.stash = list(stash or [])
        self.stash_ids = [f"old{i}" for i in range(len(self.stash))]
        self._commits = 0
        self.unstashable = unstashable
        self.inside_work_tree = inside_work_tree
        self.fail = set(fail or ())
        self.calls: list[str] = []
        self.pulled: list[tuple[str, str]] = []

    def _failing(self, op: str) -> bool:
        return op in self.fail

    def is_inside_work_tree(self) -> bool:
        self.calls.append("is_inside_work_tree")
        return self.inside_work_tree

    def current_ref(self) -> str:
        self.calls.append("current_ref")
        return self.current

    def ref_exists(self, branch: str) -> bool:
        self.calls.append(f"ref_exists:{branch}")
        return branch in self.branches

    def is_dirty(self) -> bool:
        self.calls.append("is_dirty")
        return bool(self.changes)

    def stash_push(self, message: str) -> GitResult:
        self.calls.append("stash_push")
        if self._failing("stash_push"):
            return GitResult(ok=False, output="error: could not write index")
        if self.unstashable:
            return GitResult(ok=True, output="No local changes to save")
        self._commits += 1
        commit = f"c{self._commits}"
        self.stash.insert(0, self.changes or "")
        self.stash_ids.insert(0, commit)
        self.changes = None
        return GitResult(
            ok=True, output=f"Saved working directory: {message}", stash_commit=commit
        )

    def stash_pop(self, commit: Optional[str] = None) -> GitResult:
        self.calls.append("stash_pop")
        if self._failing("stash_pop") or not self.stash:
            return GitResult(ok=False, output="CONFLICT (content): Merge conflict in app.py")
        if commit is None:
            index = 0
        elif commit in self.stash_ids:
            index = self.stash_ids.index(commit)
        else:
            return GitResult(ok=False, output=f"stash entry {commit} is no longer in the stash")
        self.stash_ids.pop(index)
        self.changes = self.stash.pop(index)
        return GitResult(ok=True)

    def checkout(self, ref: str) -> GitResult:
        self.calls.append(f"checkout:{ref}")
        if self._failing(f"checkout:{ref}") or ref not in self.branches:
            return GitResult(ok=False, output=f"error: pathspec '{ref}' did not match")
        self.current = ref
        return GitResult(ok=True)

    def pull(self, remote: str, branch: str) -> GitResult:
        self.calls.append("pull")
        if self._failing("pull"):
            return GitResult(ok=False, output="fatal: unable to access remote")
        self.pulled.append((remote, branch))
        return GitResult(ok=True)

    def create_branch(self, name: str) -> GitResult:
        self.calls.append(f"create_branch:{name}")
        if self._failing("create_branch"):
            return GitResult(ok=False, output=f"fatal: cannot lock ref 'refs/heads/{name}'")
        self.branches.add(name)
        self.current = name
        return GitResult(ok=True)

    @property
    def mutations(self) -> list[str]:
        read_only = ("is_inside_work_tree", "current_ref", "ref_exists", "is_dirty")
        return [c for c in self.calls if not c.startswith(read_only)]


class FakeTracker(WorkItemTracker):
    """Tracker returning canned titles by id."""

    def __init__(
        self,
        titles: Optional[dict[str, str]] = None,
        failure: Optional[LookupFailure] = None,
    ):
        self.titles = titles or {}
        self.failure = failure
        self.requested: list[str] = []

    def fetch_title(self, work_item_id: str) -> TitleResult:
        self.requested.append(work_item_id)
        if self.failure:
            return TitleResult(error=self.failure, message="lookup failed")
        title = self.titles.get(work_item_id)
        if not title:
            return TitleResult(error=LookupFailure.NOT_FOUND, message="no title")
        return TitleResult(title=title)


@pytest.fixture
def settings():
    return Settings(organization="https://dev.azure.com/Example")


@pytest.fixture
def aws_settings():
    return Settings(
        organization="https://dev.azure.com/Example",
        aws_region="ap-southeast-2",
        aws_profiles=(
            AwsProfile(
                name="nonprod",
                eks_clusters=("atanga",),
                ecr_registries=("123.dkr.ecr.ap-southeast-2.amazonaws.com",),
            ),
            AwsProfile(name="tooling"),
        ),
        codeartifact=CodeArtifactSettings(profile="tooling", domain="dom", domain_owner="999"),
        rds=RdsSettings(profile="nonprod", hostname="db.example.com", port=5432, username="ro"),
        env={"AWS_REGION": "ap-southeast-2"},
    )


@pytest.fixture
def valid_credentials():
    return lambda: TokenResult(token="pat-123")


@pytest.fixture
def make_repo():
    return FakeRepo


@pytest.fixture
def make_tracker():
    return FakeTracker


@pytest.fixture
def token_paths(tmp_path, monkeypatch):
    """Point token storage at tmp_path and clear the PAT env var."""
    import workbranch.auth as auth_mod

    monkeypatch.setattr(auth_mod, "TOKEN_DIR", tmp_path / "config")
    monkeypatch.setattr(auth_mod, "TOKEN_FILE", tmp_path / "config" / "auth.json")
    monkeypatch.setattr(auth_mod, "LEGACY_PAT_FILE", tmp_path / ".azure_devops_pat")
    # setenv first so teardown also removes a value exported during the test
    monkeypatch.setenv(auth_mod.PAT_ENV_VAR, "")
    monkeypatch.delenv(auth_mod.PAT_ENV_VAR)
    return tmp_path


@pytest.fixture
def reset_config_cache():
    import workbranch.config.settings as settings_mod

    settings_mod._config = None
    settings_mod._loaded_sources = []
    yield
    settings_mod._config = None
    settings_mod._loaded_sources = []


@pytest.fixture
def reset_output_stream():
    import workbranch.ui.output as output

    output.use_stderr(False)
    yield
    output.use_stderr(False)

