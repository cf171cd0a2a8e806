"""
GitHub API client wrapper for commit status notifications.

This module provides a thin wrapper around the GitHub API operations
needed to post commit statuses. It uses the `gh` CLI for authentication
and API access; token generation is left to whatever supplies GH_TOKEN.
"""

import json
import os
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from . import config


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""
    pass


@dataclass(frozen=True)
class GitHubOptions:
    """
    Connection options for the GitHub service.

    Attributes:
        token: GitHub token; falls back to GH_TOKEN / GITHUB_TOKEN, then gh CLI auth
        enterprise_base_url: GitHub Enterprise API URL, e.g.
            "https://ghe.example.com/api/v3"; empty for github.com
    """
    token: str = ""
    enterprise_base_url: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitHubOptions":
        """Build from a config mapping using camelCase keys."""
        return cls(
            token=str(data.get("token") or ""),
            enterprise_base_url=str(data.get("enterpriseBaseURL") or ""),
        )

    def resolve_token(self) -> Optional[str]:
        if self.token:
            return self.token
        for name in config.TOKEN_ENV_VARS:
            value = os.environ.get(name)
            if value:
                return value
        return None

    def hostname(self) -> Optional[str]:
        """Host gh should talk to, or None for github.com."""
        if not self.enterprise_base_url:
            return None
        host = urlsplit(self.enterprise_base_url).hostname
        if not host:
            raise GitHubClientError(
                f"Invalid enterprise base URL: {self.enterprise_base_url}"
            )
        return host


class GitHubClient:
    """
    GitHub API client for commit status operations.

    Uses the `gh` CLI for authentication and API access. Unlike a
    repository-scoped client, every call names its target repository,
    since each notification resolves its own owner/repo.
    """

    def __init__(self, token: Optional[str] = None, hostname: Optional[str] = None):
        """
        Initialize the GitHub client.

        Args:
            token: Optional GitHub token (uses gh CLI auth if not provided)
            hostname: Optional GitHub Enterprise host (defaults to github.com)
        """
        self.token = token
        self.hostname = hostname

    @classmethod
    def from_options(cls, options: GitHubOptions) -> "GitHubClient":
        return cls(token=options.resolve_token(), hostname=options.hostname())

    def _run_gh(
        self,
        args: List[str],
        check: bool = True,
        timeout: Optional[float] = None
    ) -> str:
        """
        Run a gh CLI command and return output.

        Args:
            args: Command arguments (without 'gh')
            check: Whether to raise on non-zero exit code
            timeout: Seconds to wait before giving up on the command

        Returns:
            Command output as string

        Raises:
            GitHubClientError: If command fails and check=True, or times out
        """
        cmd = ["gh"] + args
        env = None
        if self.token:
            # Extend environment with GH_TOKEN, don't replace it
            env = {**os.environ, "GH_TOKEN": self.token}

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
                env=env,
                timeout=timeout
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitHubClientError(f"gh command failed: {e.stderr}") from e
        except subprocess.TimeoutExpired as e:
            raise GitHubClientError(f"gh command timed out after {timeout}s") from e

    def create_status(
        self,
        owner: str,
        repo: str,
        sha: str,
        state: str,
        description: str = "",
        context: str = "",
        target_url: str = "",
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Create a commit status on a revision.

        Args:
            owner: Repository owner
            repo: Repository name
            sha: Commit SHA (or ref) to attach the status to
            state: One of "error", "failure", "pending", "success"
            description: Short status description
            context: Status label; GitHub uses "default" when empty
            target_url: Link shown with the status; omitted when empty
            timeout: Seconds to wait for the API call

        Returns:
            Created status data

        Raises:
            GitHubClientError: If the API call fails
        """
        args = [
            "api", "-X", "POST",
            f"repos/{owner}/{repo}/statuses/{sha}",
            "-f", f"state={state}",
            "-f", f"description={description}",
        ]
        if context:
            args.extend(["-f", f"context={context}"])
        if target_url:
            args.extend(["-f", f"target_url={target_url}"])
        if self.hostname:
            args.extend(["--hostname", self.hostname])

        output = self._run_gh(args, timeout=timeout)
        try:
            return json.loads(output) if output.strip() else {}
        except json.JSONDecodeError as e:
            raise GitHubClientError(f"Unexpected response from status API: {e}") from e
