"""
GitHub commit status notification service.

Sends a rendered Notification to GitHub as a commit status on the
payload's revision.
"""

import logging
from typing import Any, Optional

from . import config
from .github_client import GitHubClient, GitHubOptions
from .notification import Notification, NotificationError
from .repo_url import split_slug

logger = logging.getLogger(__name__)


class GitHubConfigError(NotificationError):
    """Raised when a notification has no GitHub status payload."""
    pass


def truncate(message: str, limit: int = config.MAX_DESCRIPTION_LENGTH) -> str:
    """
    Shorten a message to at most `limit` characters.

    Longer messages keep their first `limit - 3` characters followed by
    "...". Lengths count code points, not bytes.
    """
    if len(message) > limit:
        return message[:limit - len(config.ELLIPSIS)] + config.ELLIPSIS
    return message


class GitHubService:
    """
    Posts notifications as GitHub commit statuses.

    Errors from the client propagate unchanged; retrying is left to
    the caller.
    """

    def __init__(self, client: GitHubClient, timeout: Optional[float] = None):
        """
        Args:
            client: GitHub client used for the status API
            timeout: Default seconds to wait for each status call
        """
        self.client = client
        self.timeout = timeout

    @classmethod
    def from_options(
        cls,
        options: GitHubOptions,
        timeout: Optional[float] = None
    ) -> "GitHubService":
        return cls(GitHubClient.from_options(options), timeout=timeout)

    def send(
        self,
        notification: Notification,
        destination: Any = None,
        timeout: Optional[float] = None
    ) -> None:
        """
        Create a commit status from a rendered notification.

        Args:
            notification: Notification with a populated github payload
            destination: Unused; the target comes from the payload
            timeout: Seconds to wait for the API call (defaults to the service timeout)

        Raises:
            GitHubConfigError: If the notification has no github payload
            RepoURLResolutionError: If the payload's repoURL doesn't name owner/repo
            GitHubClientError: If the status API call fails
        """
        payload = notification.github
        if payload is None:
            raise GitHubConfigError("Notification is missing the GitHub status payload")

        owner, repo = split_slug(payload.repo_url)
        description = truncate(notification.message)

        self.client.create_status(
            owner,
            repo,
            sha=payload.revision,
            state=payload.state,
            description=description,
            context=payload.label,
            target_url=payload.target_url,
            timeout=timeout if timeout is not None else self.timeout,
        )
        logger.info(
            f"Created {payload.state} status '{payload.label}' on "
            f"{owner}/{repo}@{payload.revision[:8]}"
        )
