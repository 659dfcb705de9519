"""Azure DevOps personal access token storage and prompting."""

import getpass
import json
import os
import re
from pathlib import Path
from typing import Callable, Optional

from workbranch.models.results import CredentialError, TokenResult
from workbranch.ui.output import error, log, success

PAT_ENV_VAR = "AZURE_DEVOPS_EXT_PAT"
PLACEHOLDER_PAT = "ReplaceWithYourPAT"

TOKEN_DIR = Path.home() / ".config" / "workbranch"
TOKEN_FILE = TOKEN_DIR / "auth.json"

# Shell file written by the old configure_azure_devops_pat function, read-only here
LEGACY_PAT_FILE = Path.home() / ".azure_devops_pat"
_LEGACY_EXPORT = re.compile(r'^\s*export\s+AZURE_DEVOPS_EXT_PAT=["\']?([^"\'\n]*)["\']?\s*$', re.M)


def is_usable(token: Optional[str]) -> bool:
    """A token is usable when non-empty and not the template placeholder."""
    return bool(token) and token != PLACEHOLDER_PAT


def _save_token(token: str) -> None:
    """Save token to disk with restricted permissions."""
    TOKEN_DIR.mkdir(parents=True, exist_ok=True)
    fd = os.open(TOKEN_FILE, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    try:
        os.write(fd, json.dumps({"azure_devops_pat": token}).encode())
    finally:
        os.close(fd)
    # O_CREAT mode is ignored for existing files
    os.chmod(TOKEN_FILE, 0o600)


def _load_stored_token() -> Optional[str]:
    """Load token from disk."""
    if not TOKEN_FILE.exists():
        return None
    try:
        data = json.loads(TOKEN_FILE.read_text())
    except (json.JSONDecodeError, OSError):
        return None
    if not isinstance(data, dict):
        return None
    return data.get("azure_devops_pat")


def _load_legacy_token() -> Optional[str]:
    """Read the PAT from the old sourced shell file, if present."""
    if not LEGACY_PAT_FILE.exists():
        return None
    try:
        content = LEGACY_PAT_FILE.read_text()
    except OSError:
        return None
    match = _LEGACY_EXPORT.search(content)
    return match.group(1) if match else None


def load_token() -> Optional[str]:
    """Current usable token: env var, then stored file, then legacy shell file."""
    for token in (os.environ.get(PAT_ENV_VAR), _load_stored_token(), _load_legacy_token()):
        if is_usable(token):
            return token
    return None


def ensure_token(
    force_update: bool = False, prompt: Callable[[str], str] = getpass.getpass
) -> TokenResult:
    """Ensure a usable PAT is configured, prompting for one if needed.

    Returns immediately when a token is already available and force_update is
    False. Otherwise prompts without echo, persists the token to TOKEN_FILE
    (owner read/write only) and exports it into the process environment.
    """
    existing = load_token()
    if existing and not force_update:
        os.environ[PAT_ENV_VAR] = existing
        return TokenResult(token=existing)

    if force_update:
        log("Forcing update of Azure DevOps Personal Access Token (PAT).")
    else:
        log("Azure DevOps Personal Access Token (PAT) is not configured.")

    try:
        entered = prompt("Please enter your Azure DevOps PAT: ").strip()
    except (EOFError, KeyboardInterrupt):
        print()
        error("PAT entry aborted")
        return TokenResult(error=CredentialError.ABORTED, prompted=True)

    if not entered:
        error("No PAT provided")
        return TokenResult(error=CredentialError.EMPTY_INPUT, prompted=True)

    _save_token(entered)
    os.environ[PAT_ENV_VAR] = entered
    success(f"PAT saved securely to {TOKEN_FILE}")
    return TokenResult(token=entered, prompted=True)


def clear_token() -> bool:
    """Delete the stored PAT. Returns True if a file was removed."""
    if TOKEN_FILE.exists():
        TOKEN_FILE.unlink()
        return True
    return False
