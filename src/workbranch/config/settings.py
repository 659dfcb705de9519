"""Config loading with layered overrides.

Priority chain: bundled defaults < ~/.config/workbranch/config.yaml < .workbranch/config.yaml
Deep merge: dicts merge recursively, lists/scalars replace.
"""

import importlib.resources
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from workbranch.config.utils import deep_merge, load_yaml

_config: Optional[dict] = None
_loaded_sources: list[str] = []

GLOBAL_CONFIG = Path.home() / ".config" / "workbranch" / "config.yaml"
PROJECT_CONFIG = Path(".workbranch") / "config.yaml"


def _load_defaults() -> dict:
    """Load bundled default config."""
    try:
        files = importlib.resources.files("workbranch")
        config_path = files / "defaults" / "config.yaml"
        content = config_path.read_text()
        return yaml.safe_load(content)
    except (FileNotFoundError, TypeError):
        dev_path = Path(__file__).parent.parent / "defaults" / "config.yaml"
        if dev_path.exists():
            with open(dev_path) as f:
                return yaml.safe_load(f)
        raise FileNotFoundError("Could not find defaults/config.yaml")


def load_config() -> dict:
    """Load config with layered overrides: defaults < global < project."""
    global _loaded_sources
    _loaded_sources = []

    result = _load_defaults()
    _loaded_sources.append("defaults")

    global_overrides = load_yaml(GLOBAL_CONFIG)
    if global_overrides:
        result = deep_merge(result, global_overrides)
        _loaded_sources.append(str(GLOBAL_CONFIG))

    project_overrides = load_yaml(PROJECT_CONFIG)
    if project_overrides:
        result = deep_merge(result, project_overrides)
        _loaded_sources.append(str(PROJECT_CONFIG))

    return result


def get_config() -> dict:
    """Get cached config (loads on first access)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> dict:
    """Force reload config."""
    global _config
    _config = load_config()
    return _config


def get_config_loaded_sources() -> list[str]:
    """Return list of config sources that were loaded (for logging)."""
    return _loaded_sources


@dataclass(frozen=True)
class AwsProfile:
    """An SSO profile and the follow-up actions run after logging in to it."""

    name: str
    eks_clusters: tuple[str, ...] = ()
    ecr_registries: tuple[str, ...] = ()


@dataclass(frozen=True)
class CodeArtifactSettings:
    profile: str
    domain: str
    domain_owner: str


@dataclass(frozen=True)
class RdsSettings:
    profile: str
    hostname: str
    port: int
    username: str


@dataclass(frozen=True)
class Settings:
    """Typed view of the merged config, passed explicitly to collaborators."""

    organization: str
    branch_prefix: str = "AB#"
    default_branch: str = "main"
    remote: str = "origin"
    stash_message: str = "Temporary stash before creating new branch"
    include_untracked: bool = False
    aws_region: str = "ap-southeast-2"
    aws_profiles: tuple[AwsProfile, ...] = ()
    codeartifact: Optional[CodeArtifactSettings] = None
    rds: Optional[RdsSettings] = None
    env: dict[str, str] = field(default_factory=dict)
    debug: bool = False

    @classmethod
    def from_config(cls, config: dict, debug: bool = False) -> "Settings":
        devops = config.get("azure_devops") or {}
        branch = config.get("branch") or {}
        git = config.get("git") or {}
        aws = config.get("aws") or {}

        profiles = tuple(
            AwsProfile(
                name=p["name"],
                eks_clusters=tuple(p.get("eks_clusters") or ()),
                ecr_registries=tuple(p.get("ecr_registries") or ()),
            )
            for p in aws.get("profiles") or []
        )

        codeartifact = None
        if aws.get("codeartifact"):
            ca = aws["codeartifact"]
            codeartifact = CodeArtifactSettings(
                profile=ca["profile"], domain=ca["domain"], domain_owner=str(ca["domain_owner"])
            )

        rds = None
        if aws.get("rds"):
            r = aws["rds"]
            rds = RdsSettings(
                profile=r["profile"],
                hostname=r["hostname"],
                port=int(r.get("port", 5432)),
                username=r["username"],
            )

        return cls(
            organization=devops.get("organization", ""),
            branch_prefix=branch.get("prefix", "AB#"),
            default_branch=git.get("default_branch", "main"),
            remote=git.get("remote", "origin"),
            stash_message=git.get("stash_message", cls.stash_message),
            include_untracked=bool(git.get("include_untracked", False)),
            aws_region=aws.get("region", "ap-southeast-2"),
            aws_profiles=profiles,
            codeartifact=codeartifact,
            rds=rds,
            env={str(k): str(v) for k, v in (config.get("env") or {}).items()},
            debug=debug,
        )


def get_settings(debug: bool = False) -> Settings:
    """Build typed settings from the cached layered config."""
    return Settings.from_config(get_config(), debug=debug)
