"""CLI entry point and argument parsing."""

import argparse
import shlex
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Optional

try:
    __version__ = get_version("workbranch")
except PackageNotFoundError:
    __version__ = "dev"

from workbranch.config.settings import Settings, get_config_loaded_sources, get_settings
from workbranch.models.results import ProvisionError
from workbranch.models.state import DEFAULT_BRANCH_TYPE, BranchType, RunConfig
from workbranch.ui.output import GREEN, NC, error, log, success, use_stderr, warn
from workbranch.utils.debug import DEBUG_LOG

VERBS = ("configure-pat", "logout", "login", "ecr-login", "rds-token")


def parse_args(argv: Optional[list[str]] = None) -> RunConfig:
    parser = argparse.ArgumentParser(
        prog="workbranch",
        description="Create a git branch for an Azure Boards work item.",
        epilog="""
Commands:
  workbranch configure-pat [-f]          Store the Azure DevOps PAT (-f to replace it)
  workbranch logout                      Delete the stored Azure DevOps PAT
  workbranch login [--export]            AWS SSO login for all configured profiles
  workbranch ecr-login PROFILE REGISTRY  Docker login to an ECR registry
  workbranch rds-token                   Print an RDS IAM auth token

Examples:
  %(prog)s 12345                Feature branch AB#12345/feature-<title>
  %(prog)s 12345 bugfix         Bugfix branch AB#12345/bugfix-<title>
  eval "$(workbranch login --export)"

How it works:
  1. Fetches the work item title from Azure DevOps (az boards)
  2. Builds the branch name AB#<id>/<type>-<Title-Slug>
  3. Stashes uncommitted changes
  4. Checks out main and pulls the latest changes
  5. Creates the new branch from main
  6. Restores the stashed changes

If checkout, pull, or branch creation fails, the original branch is checked
out again and the stash is restored.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("work_item", metavar="WORK_ITEM_ID", help="Azure Boards work item number")
    parser.add_argument(
        "branch_type",
        metavar="BRANCH_TYPE",
        nargs="?",
        default=DEFAULT_BRANCH_TYPE.value,
        help=f"One of {', '.join(BranchType.values())} (default: {DEFAULT_BRANCH_TYPE.value})",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Log every external command and its output to {DEBUG_LOG}",
    )
    args = parser.parse_args(argv)
    return RunConfig(work_item_id=args.work_item, branch_type=args.branch_type, debug=args.debug)


def log_config(settings: Settings) -> None:
    """Log which config files were applied (debug mode only)."""
    if not settings.debug:
        return
    overrides = [s for s in get_config_loaded_sources() if s != "defaults"]
    if overrides:
        log(f"Config overrides: {', '.join(overrides)}")
    log(f"Debug logging to {DEBUG_LOG}")


def run_new_branch(config: RunConfig) -> int:
    from workbranch.clients.boards import AzureBoards
    from workbranch.git.repo import GitRepo
    from workbranch.provisioner import Provisioner

    settings = get_settings(debug=config.debug)
    log_config(settings)

    provisioner = Provisioner(
        settings,
        GitRepo(include_untracked=settings.include_untracked, debug=settings.debug),
        AzureBoards(settings.organization, debug=settings.debug),
    )
    result = provisioner.create_branch(config.work_item_id, config.branch_type)
    if not result.ok:
        error(result.message)
        if result.error is ProvisionError.AUTH_ERROR:
            log("Update the PAT with `workbranch configure-pat -f`")
        return 1
    print(result.branch_name)
    return 0


def run_configure_pat(force: bool) -> int:
    from workbranch.auth import ensure_token, load_token

    if not force and load_token():
        log("Azure DevOps PAT is already configured. Use -f to force update.")
        return 0
    return 0 if ensure_token(force_update=force).ok else 1


def run_logout() -> int:
    from workbranch.auth import TOKEN_FILE, clear_token

    if clear_token():
        success(f"Removed {TOKEN_FILE}")
    else:
        log("No stored PAT to remove")
    return 0


def run_login(export: bool, debug: bool) -> int:
    from workbranch.clients.aws import login

    if export:
        use_stderr()
    settings = get_settings(debug=debug)
    log_config(settings)
    result = login(settings)

    if export:
        # stdout is meant for eval; everything else above is decoration
        for key, value in result.env.items():
            print(f"export {key}={shlex.quote(value)}")
    elif result.env:
        log(f"Run {GREEN}eval \"$(workbranch login --export)\"{NC} to load the environment")

    if not result.ok:
        for profile, reason in result.failed.items():
            error(f"{profile}: {reason}")
        return 1
    return 0


def run_ecr_login(args: list[str], debug: bool) -> int:
    from workbranch.clients.aws import ecr_login

    if len(args) != 2:
        error("Usage: workbranch ecr-login <profile> <registry-url>")
        return 1
    settings = get_settings(debug=debug)
    profile, registry = args
    return 0 if ecr_login(profile, registry, settings.aws_region, debug=debug) else 1


def run_rds_token(debug: bool) -> int:
    from workbranch.clients.aws import rds_token

    token = rds_token(get_settings(debug=debug))
    if not token:
        return 1
    print(token)
    return 0


def dispatch(argv: list[str]) -> int:
    """Handle verbs before argparse (which expects a positional work item id)."""
    debug = "--debug" in argv
    verb, *rest = [a for a in argv if a != "--debug"]

    if verb == "configure-pat":
        unknown = [a for a in rest if a not in ("-f", "--force")]
        if unknown:
            error(f"Unknown option: {unknown[0]}")
            error("Usage: workbranch configure-pat [-f|--force]")
            return 1
        return run_configure_pat(force=bool(rest))
    if verb == "logout":
        return run_logout()
    if verb == "login":
        return run_login(export="--export" in rest, debug=debug)
    if verb == "ecr-login":
        return run_ecr_login(rest, debug=debug)
    if verb == "rds-token":
        return run_rds_token(debug=debug)

    warn(f"Unknown command: {verb}")
    return 1


def main() -> None:
    argv = sys.argv[1:]
    # --debug may come before the verb
    words = [a for a in argv if a != "--debug"]
    if words and words[0] in VERBS:
        sys.exit(dispatch(argv))

    config = parse_args(argv)
    sys.exit(run_new_branch(config))


if __name__ == "__main__":
    main()
