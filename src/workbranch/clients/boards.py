"""Azure Boards work item lookup via the az CLI."""

import json
import os
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import Optional

from workbranch.auth import PAT_ENV_VAR
from workbranch.models.results import LookupFailure, TitleResult
from workbranch.utils.debug import debug_log
from workbranch.utils.formatting import first_line, fmt_command

TITLE_FIELD = "System.Title"

# az devops / REST auth failures as they surface on stderr
_AUTH_FAILURE = re.compile(
    r"\b(401|403)\b|TF400813|unauthori[sz]ed|authenticat|az login|\bPAT\b|access token",
    re.IGNORECASE,
)


class WorkItemTracker(ABC):
    """Read-only access to work item titles."""

    @abstractmethod
    def fetch_title(self, work_item_id: str) -> TitleResult: ...


def extract_title(fields: object) -> Optional[str]:
    """Pull the title out of a work item's `fields` JSON object."""
    if not isinstance(fields, dict):
        return None
    title = fields.get(TITLE_FIELD)
    if not isinstance(title, str) or not title.strip():
        return None
    return title.strip()


class AzureBoards(WorkItemTracker):
    """WorkItemTracker backed by `az boards work-item show`."""

    def __init__(self, organization: str, token: Optional[str] = None, debug: bool = False):
        self.organization = organization
        self.token = token
        self.debug = debug

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        if self.token:
            env[PAT_ENV_VAR] = self.token
        return env

    def fetch_title(self, work_item_id: str) -> TitleResult:
        """Single attempt, no retries. Failures are classified from az's stderr."""
        if not shutil.which("az"):
            return TitleResult(
                error=LookupFailure.CLI_MISSING,
                message="Azure CLI (az) not found. Install it and the azure-devops extension.",
            )

        cmd = [
            "az",
            "boards",
            "work-item",
            "show",
            "--id",
            work_item_id,
            "--organization",
            self.organization,
            "--query",
            "fields",
            "-o",
            "json",
        ]
        result = subprocess.run(cmd, capture_output=True, text=True, env=self._env())
        debug_log(
            self.debug,
            fmt_command(cmd),
            {"returncode": result.returncode, "stdout": result.stdout, "stderr": result.stderr},
        )

        if result.returncode != 0:
            stderr = result.stderr or ""
            if _AUTH_FAILURE.search(stderr):
                return TitleResult(
                    error=LookupFailure.AUTH_FAILED,
                    message=f"Azure DevOps rejected the PAT: {first_line(stderr)}",
                )
            return TitleResult(
                error=LookupFailure.NOT_FOUND,
                message=f"Work item {work_item_id} lookup failed: {first_line(stderr)}",
            )

        try:
            fields = json.loads(result.stdout)
        except json.JSONDecodeError:
            fields = None

        title = extract_title(fields)
        if not title:
            return TitleResult(
                error=LookupFailure.NOT_FOUND,
                message=f"Work item {work_item_id} has no title",
            )
        return TitleResult(title=title)
