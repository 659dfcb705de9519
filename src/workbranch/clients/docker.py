"""Docker registry login and credential store repair."""

import json
import os
import subprocess
import sys
from pathlib import Path

from workbranch.ui.output import error, log, success, warn
from workbranch.utils.debug import debug_log
from workbranch.utils.formatting import first_line, fmt_command

DOCKER_CONFIG = Path.home() / ".docker" / "config.json"

CREDS_STORE_ERROR = "error storing credentials"


def fix_docker_credentials() -> bool:
    """Repair the credsStore setting in ~/.docker/config.json.

    On macOS credsStore is set to "osxkeychain"; elsewhere it is removed so
    docker falls back to file-based storage. A missing config becomes `{}`.
    """
    log("Docker credentials storage error detected. Fixing configuration...")
    DOCKER_CONFIG.parent.mkdir(parents=True, exist_ok=True)

    if not DOCKER_CONFIG.exists():
        DOCKER_CONFIG.write_text("{}\n")
        return True

    try:
        data = json.loads(DOCKER_CONFIG.read_text() or "{}")
    except json.JSONDecodeError as e:
        error(f"Cannot parse {DOCKER_CONFIG}: {e}")
        return False
    if not isinstance(data, dict):
        error(f"Unexpected content in {DOCKER_CONFIG}")
        return False

    if sys.platform == "darwin":
        data["credsStore"] = "osxkeychain"
    else:
        data.pop("credsStore", None)

    tmp_path = DOCKER_CONFIG.with_name(DOCKER_CONFIG.name + ".tmp")
    tmp_path.write_text(json.dumps(data, indent=2) + "\n")
    os.replace(tmp_path, DOCKER_CONFIG)
    return True


def docker_login(registry: str, password: str, debug: bool = False) -> subprocess.CompletedProcess:
    """Run `docker login` for AWS with the password on stdin."""
    cmd = ["docker", "login", "--username", "AWS", "--password-stdin", registry]
    result = subprocess.run(cmd, input=password, capture_output=True, text=True)
    # Never log the password, only the outcome
    debug_log(
        debug,
        fmt_command(cmd),
        {"returncode": result.returncode, "stdout": result.stdout, "stderr": result.stderr},
    )
    return result


def login_with_repair(registry: str, password: str, debug: bool = False) -> bool:
    """docker login, repairing the credential store and retrying once on a storage error."""
    result = docker_login(registry, password, debug=debug)
    if result.returncode == 0:
        success(f"Docker logged in to {registry}")
        return True

    output = f"{result.stdout}\n{result.stderr}"
    if CREDS_STORE_ERROR not in output:
        error(f"Docker login failed: {first_line(result.stderr or result.stdout)}")
        return False

    if not fix_docker_credentials():
        return False

    warn("Retrying docker login...")
    retry = docker_login(registry, password, debug=debug)
    if retry.returncode != 0:
        error(f"Docker login failed after repair: {first_line(retry.stderr or retry.stdout)}")
        return False
    success(f"Docker logged in to {registry}")
    return True
