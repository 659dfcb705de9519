"""Branch naming: slugs, branch names, and request validation."""

import re
from typing import Optional

from workbranch.models.state import DEFAULT_BRANCH_TYPE, BranchType

DEFAULT_PREFIX = "AB#"

# Letters and digits in any script survive; everything else (incl. "_") is a separator
_NON_ALNUM_RUN = re.compile(r"[\W_]+")


def slugify(title: str) -> str:
    """Collapse every run of non-alphanumeric characters to a single '-'.

    Leading and trailing separators are dropped, so the result is idempotent:
    slugify(slugify(t)) == slugify(t).

    e.g., 'Fix login bug!!' -> 'Fix-login-bug'
    """
    return _NON_ALNUM_RUN.sub("-", title).strip("-")


def format_branch_name(
    work_item_id: str, branch_type: BranchType, slug: str, prefix: str = DEFAULT_PREFIX
) -> str:
    """Build '<prefix><id>/<type>-<slug>', e.g. 'AB#12345/bugfix-Fix-login-bug'."""
    return f"{prefix}{work_item_id}/{branch_type.value}-{slug}"


def parse_work_item_id(raw: Optional[str]) -> Optional[str]:
    """Normalise a work item id. Returns None unless it is a positive integer."""
    if raw is None:
        return None
    value = raw.strip()
    if not value.isdigit() or int(value) <= 0:
        return None
    return str(int(value))


def parse_branch_type(raw: Optional[str]) -> Optional[BranchType]:
    """Map a branch type token to BranchType. Missing/blank means the default."""
    if raw is None or not raw.strip():
        return DEFAULT_BRANCH_TYPE
    try:
        return BranchType(raw.strip())
    except ValueError:
        return None
