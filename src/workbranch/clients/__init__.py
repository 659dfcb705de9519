"""Clients for Azure Boards, AWS, and Docker."""

from workbranch.clients.aws import ecr_login, login, rds_token, write_env_file
from workbranch.clients.boards import AzureBoards, WorkItemTracker, extract_title
from workbranch.clients.docker import fix_docker_credentials, login_with_repair

__all__ = [
    # Azure Boards
    "WorkItemTracker",
    "AzureBoards",
    "extract_title",
    # AWS
    "login",
    "ecr_login",
    "rds_token",
    "write_env_file",
    # Docker
    "fix_docker_credentials",
    "login_with_repair",
]
