"""Git operations for branch naming and working tree management."""

from workbranch.git.branch import (
    format_branch_name,
    parse_branch_type,
    parse_work_item_id,
    slugify,
)
from workbranch.git.repo import GitRepo, VersionControl

__all__ = [
    # Branch
    "slugify",
    "format_branch_name",
    "parse_work_item_id",
    "parse_branch_type",
    # Repo
    "VersionControl",
    "GitRepo",
]
