"""AWS SSO login and the follow-up actions run for each profile."""

import subprocess
import sys
from pathlib import Path
from typing import Optional

from workbranch.clients.docker import login_with_repair
from workbranch.config.settings import AwsProfile, Settings
from workbranch.models.results import LoginResult
from workbranch.ui.output import error, log, success, warn
from workbranch.utils.debug import debug_log
from workbranch.utils.formatting import first_line, fmt_command

ENV_FILE = Path.home() / ".config" / "workbranch" / "env"

CODEARTIFACT_ENV_VAR = "CODEARTIFACT_AUTH_TOKEN"


def _aws(args: list[str], debug: bool = False, secret: bool = False) -> subprocess.CompletedProcess:
    """Run an aws CLI command, capturing output. `secret` keeps stdout out of the debug log."""
    cmd = ["aws", *args]
    result = subprocess.run(cmd, capture_output=True, text=True)
    debug_log(
        debug,
        fmt_command(cmd),
        {
            "returncode": result.returncode,
            "stdout": "<redacted>" if secret else result.stdout,
            "stderr": result.stderr,
        },
    )
    return result


def identity_valid(profile: str, debug: bool = False) -> bool:
    """Whether the profile's current credentials still resolve to an identity."""
    result = _aws(["sts", "get-caller-identity", "--profile", profile], debug=debug)
    return result.returncode == 0


def sso_login(profile: str) -> bool:
    """Interactive SSO login. Its prompts go to stderr so stdout stays eval-safe."""
    result = subprocess.run(["aws", "sso", "login", "--profile", profile], stdout=sys.stderr)
    return result.returncode == 0


def update_kubeconfig(cluster: str, profile: str, region: str, debug: bool = False) -> bool:
    result = _aws(
        ["eks", "update-kubeconfig", "--region", region, "--name", cluster, "--profile", profile],
        debug=debug,
    )
    if result.returncode != 0:
        error(f"EKS kubeconfig update for {cluster} failed: {first_line(result.stderr)}")
        return False
    success(f"Updated kubeconfig for {cluster}")
    return True


def ecr_login(profile: str, registry: str, region: str, debug: bool = False) -> bool:
    """Log docker in to an ECR registry using the profile's credentials."""
    result = _aws(
        ["ecr", "get-login-password", "--region", region, "--profile", profile],
        debug=debug,
        secret=True,
    )
    if result.returncode != 0 or not result.stdout.strip():
        error(f"Could not get ECR login password: {first_line(result.stderr)}")
        return False
    return login_with_repair(registry, result.stdout.strip(), debug=debug)


def _follow_up(profile: AwsProfile, settings: Settings) -> Optional[str]:
    """Run post-login actions for a profile. Returns a failure reason or None."""
    for cluster in profile.eks_clusters:
        if not update_kubeconfig(cluster, profile.name, settings.aws_region, settings.debug):
            return f"kubeconfig update failed for {cluster}"
    for registry in profile.ecr_registries:
        if not ecr_login(profile.name, registry, settings.aws_region, settings.debug):
            return f"docker login failed for {registry}"
    return None


def codeartifact_token(settings: Settings) -> Optional[str]:
    ca = settings.codeartifact
    if ca is None:
        return None
    result = _aws(
        [
            "codeartifact",
            "get-authorization-token",
            "--region",
            settings.aws_region,
            "--profile",
            ca.profile,
            "--domain",
            ca.domain,
            "--domain-owner",
            ca.domain_owner,
            "--query",
            "authorizationToken",
            "--output",
            "text",
        ],
        debug=settings.debug,
        secret=True,
    )
    if result.returncode != 0 or not result.stdout.strip():
        error(f"CodeArtifact token request failed: {first_line(result.stderr)}")
        return None
    return result.stdout.strip()


def rds_token(settings: Settings) -> Optional[str]:
    """Generate an IAM auth token for the configured RDS instance."""
    rds = settings.rds
    if rds is None:
        error("No aws.rds section configured")
        return None
    result = _aws(
        [
            "rds",
            "generate-db-auth-token",
            "--hostname",
            rds.hostname,
            "--port",
            str(rds.port),
            "--region",
            settings.aws_region,
            "--username",
            rds.username,
            "--profile",
            rds.profile,
        ],
        debug=settings.debug,
        secret=True,
    )
    if result.returncode != 0 or not result.stdout.strip():
        error(f"RDS token generation failed: {first_line(result.stderr)}")
        return None
    return result.stdout.strip()


def write_env_file(env: dict[str, str], path: Optional[Path] = None) -> Path:
    """Write non-secret KEY=value settings for shells to source."""
    path = path or ENV_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [f"{key}={value}" for key, value in sorted(env.items())]
    path.write_text("\n".join(lines) + "\n" if lines else "")
    return path


def login(settings: Settings) -> LoginResult:
    """Log in to every configured profile whose identity is no longer valid.

    A failing profile is recorded and the loop moves on; profiles already
    logged in are not rolled back.
    """
    outcome = LoginResult()

    for profile in settings.aws_profiles:
        if identity_valid(profile.name, settings.debug):
            log(f"Profile {profile.name} already authenticated")
            outcome.already_valid.append(profile.name)
            continue

        log(f"Logging in to {profile.name} via SSO...")
        if not sso_login(profile.name):
            error(f"SSO login failed for {profile.name}")
            outcome.failed[profile.name] = "sso login failed"
            continue

        reason = _follow_up(profile, settings)
        if reason:
            warn(f"{profile.name}: {reason}")
            outcome.failed[profile.name] = reason
            continue
        success(f"Logged in to {profile.name}")
        outcome.logged_in.append(profile.name)

    if settings.env:
        path = write_env_file(settings.env)
        log(f"Environment written to {path}")
        outcome.env.update(settings.env)

    token = codeartifact_token(settings)
    if token:
        outcome.env[CODEARTIFACT_ENV_VAR] = token

    return outcome
