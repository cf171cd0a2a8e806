"""
Notification definitions: a message template plus optional status templates.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pystache.parsed import ParsedTemplate

from . import config
from .github_templater import (
    FunctionMap,
    GitHubTemplater,
    check_missing_tags,
    compile_github_templater,
    compile_template,
    render_compiled,
)
from .notification import GitHubNotificationConfig, Notification


@dataclass(frozen=True)
class NotificationTemplate:
    """Raw templates of one notification definition."""
    message: str = ""
    github: Optional[GitHubNotificationConfig] = None
    missing_tags: str = config.DEFAULT_MISSING_TAGS


@dataclass(frozen=True)
class NotificationTemplater:
    """Compiled notification definition; call it to build a Notification."""
    name: str
    functions: FunctionMap
    message: ParsedTemplate
    github: Optional[GitHubTemplater] = None
    missing_tags: str = config.DEFAULT_MISSING_TAGS

    def __call__(self, variables: Mapping[str, Any]) -> Notification:
        """
        Render the message and, if configured, the GitHub status payload.

        Raises:
            TemplateExecutionError: If any template fails to render
        """
        notification = Notification(
            message=render_compiled(
                self.name, "message", self.message,
                self.functions, variables, self.missing_tags,
            )
        )
        if self.github is not None:
            self.github(notification, variables)
        return notification


def compile_notification_templater(
    name: str,
    functions: Optional[FunctionMap],
    template: NotificationTemplate,
    missing_tags: Optional[str] = None,
) -> NotificationTemplater:
    """
    Compile a notification definition.

    missing_tags overrides the mode set on the template.

    Raises:
        TemplateCompileError: If the message or any status field is invalid
    """
    if missing_tags is None:
        missing_tags = template.missing_tags
    check_missing_tags(missing_tags)
    message = compile_template(name, "message", template.message)
    github = None
    if template.github is not None:
        github = compile_github_templater(name, functions, template.github, missing_tags)
    return NotificationTemplater(
        name=name,
        functions=MappingProxyType(dict(functions or {})),
        message=message,
        github=github,
        missing_tags=missing_tags,
    )
