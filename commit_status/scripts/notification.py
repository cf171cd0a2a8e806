"""
Notification data model for commit status delivery.

A Notification carries the plain-text message used as the status
description and, once rendered, a GitHubNotification payload with the
resolved status fields.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from . import config


class NotificationError(Exception):
    """Base exception for commit status notification errors."""
    pass


@dataclass(frozen=True)
class GitHubNotificationConfig:
    """
    Raw status field templates for one notification definition.

    Attributes:
        state: Template for the status state (pending, success, error, failure)
        label: Template for the status context shown in the GitHub UI
        target_url: Template for the link attached to the status
        repo_url: Template for the repository URL; empty uses the default
        revision: Template for the commit SHA; empty uses the default
    """
    state: str = ""
    label: str = ""
    target_url: str = ""
    repo_url: str = ""
    revision: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitHubNotificationConfig":
        """Build from a config mapping using camelCase field names."""
        return cls(
            state=str(data.get(config.FIELD_STATE) or ""),
            label=str(data.get(config.FIELD_LABEL) or ""),
            target_url=str(data.get(config.FIELD_TARGET_URL) or ""),
            repo_url=str(data.get(config.FIELD_REPO_URL) or ""),
            revision=str(data.get(config.FIELD_REVISION) or ""),
        )


@dataclass
class GitHubNotification:
    """Resolved commit status fields, written by GitHubTemplater."""
    state: str = ""
    label: str = ""
    target_url: str = ""
    repo_url: str = ""
    revision: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            config.FIELD_STATE: self.state,
            config.FIELD_LABEL: self.label,
            config.FIELD_TARGET_URL: self.target_url,
            config.FIELD_REPO_URL: self.repo_url,
            config.FIELD_REVISION: self.revision,
        }


@dataclass
class Notification:
    """Outer notification: message text plus optional status payload."""
    message: str = ""
    github: Optional[GitHubNotification] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"message": self.message}
        if self.github is not None:
            result["github"] = self.github.to_dict()
        return result
