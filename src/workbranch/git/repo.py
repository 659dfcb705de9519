"""Version control interface and the git CLI implementation.

Architecture:
- VersionControl: abstract interface used by the provisioner
- GitRepo: production implementation shelling out to git
"""

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from workbranch.models.results import GitResult
from workbranch.utils.debug import debug_log
from workbranch.utils.formatting import fmt_command


class VersionControl(ABC):
    """Operations the branch provisioner needs from a working tree."""

    @abstractmethod
    def is_inside_work_tree(self) -> bool: ...

    @abstractmethod
    def current_ref(self) -> str:
        """Current branch name, or the HEAD commit when detached. Empty if unknown."""
        ...

    @abstractmethod
    def ref_exists(self, branch: str) -> bool:
        """Whether refs/heads/<branch> exists locally."""
        ...

    @abstractmethod
    def is_dirty(self) -> bool:
        """Whether the working tree has changes a stash would capture."""
        ...

    @abstractmethod
    def stash_push(self, message: str) -> GitResult:
        """Stash local changes. `stash_commit` is set only if a new entry was created."""
        ...

    @abstractmethod
    def stash_pop(self, commit: Optional[str] = None) -> GitResult:
        """Pop the entry whose commit is `commit`, or the newest entry when None."""
        ...

    @abstractmethod
    def checkout(self, ref: str) -> GitResult: ...

    @abstractmethod
    def pull(self, remote: str, branch: str) -> GitResult: ...

    @abstractmethod
    def create_branch(self, name: str) -> GitResult:
        """Create and switch to a new branch from HEAD."""
        ...


class GitRepo(VersionControl):
    """VersionControl backed by the git executable."""

    def __init__(
        self, cwd: Optional[Path] = None, include_untracked: bool = False, debug: bool = False
    ):
        self.cwd = cwd
        self.include_untracked = include_untracked
        self.debug = debug

    def _git(self, *args: str) -> subprocess.CompletedProcess:
        cmd = ["git", *args]
        result = subprocess.run(cmd, capture_output=True, text=True, cwd=self.cwd)
        debug_log(
            self.debug,
            fmt_command(cmd),
            {"returncode": result.returncode, "stdout": result.stdout, "stderr": result.stderr},
        )
        return result

    def _result(self, *args: str) -> GitResult:
        result = self._git(*args)
        output = (result.stderr or result.stdout).strip()
        return GitResult(ok=result.returncode == 0, output=output)

    def is_inside_work_tree(self) -> bool:
        result = self._git("rev-parse", "--is-inside-work-tree")
        return result.returncode == 0 and result.stdout.strip() == "true"

    def current_ref(self) -> str:
        result = self._git("branch", "--show-current")
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
        # Detached HEAD
        result = self._git("rev-parse", "--verify", "HEAD")
        return result.stdout.strip() if result.returncode == 0 else ""

    def ref_exists(self, branch: str) -> bool:
        result = self._git("show-ref", "--verify", "--quiet", f"refs/heads/{branch}")
        return result.returncode == 0

    def is_dirty(self) -> bool:
        untracked = "--untracked-files=normal" if self.include_untracked else "--untracked-files=no"
        result = self._git("status", "--porcelain", untracked)
        return result.returncode == 0 and bool(result.stdout.strip())

    def _stash_head(self) -> Optional[str]:
        result = self._git("rev-parse", "-q", "--verify", "refs/stash")
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def stash_push(self, message: str) -> GitResult:
        # git exits 0 with "No local changes to save" when nothing is captured,
        # e.g. changes that only live inside a submodule
        before = self._stash_head()
        args = ["stash", "push", "-m", message]
        if self.include_untracked:
            args.append("--include-untracked")
        result = self._result(*args)
        if not result.ok:
            return result
        after = self._stash_head()
        if after and after != before:
            result.stash_commit = after
        return result

    def stash_pop(self, commit: Optional[str] = None) -> GitResult:
        if commit is None:
            return self._result("stash", "pop")
        listing = self._git("stash", "list", "--format=%H")
        entries = listing.stdout.split() if listing.returncode == 0 else []
        if commit not in entries:
            return GitResult(ok=False, output=f"stash entry {commit} is no longer in the stash")
        return self._result("stash", "pop", f"stash@{{{entries.index(commit)}}}")

    def checkout(self, ref: str) -> GitResult:
        return self._result("checkout", ref)

    def pull(self, remote: str, branch: str) -> GitResult:
        return self._result("pull", remote, branch)

    def create_branch(self, name: str) -> GitResult:
        return self._result("checkout", "-b", name)
