"""
Loads notification definitions and GitHub service options from YAML.

The document follows the notifications config map layout:

    service.github:
      enterpriseBaseURL: https://ghe.example.com/api/v3

    template.app-sync-succeeded: |
      message: Application {{app.metadata.name}} has been synced
      github:
        state: success
        label: continuous-delivery/{{app.metadata.name}}
        targetURL: https://cd.example.com/applications/{{app.metadata.name}}

Template values may be mappings or YAML strings (as stored in a config
map). Keys that are neither templates nor services are ignored.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import config
from .github_client import GitHubOptions
from .github_templater import FunctionMap
from .notification import GitHubNotificationConfig, NotificationError
from .notification_templater import (
    NotificationTemplate,
    NotificationTemplater,
    compile_notification_templater,
)


class NotificationConfigError(NotificationError):
    """Raised when the notification config document is invalid."""
    pass


@dataclass
class NotifierConfig:
    """Parsed notification config document."""
    github: GitHubOptions = field(default_factory=GitHubOptions)
    templates: Dict[str, NotificationTemplate] = field(default_factory=dict)

    def compile(self, functions: Optional[FunctionMap] = None) -> Dict[str, NotificationTemplater]:
        """
        Compile every notification definition.

        Raises:
            TemplateCompileError: On the first definition that fails to compile
        """
        return {
            name: compile_notification_templater(name, functions, template)
            for name, template in self.templates.items()
        }


def _load_mapping(value: Any, what: str) -> Dict[str, Any]:
    if isinstance(value, str):
        try:
            value = yaml.safe_load(value)
        except yaml.YAMLError as e:
            raise NotificationConfigError(f"Invalid YAML syntax in {what}: {e}") from e
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise NotificationConfigError(f"{what} must be a mapping")
    return value


def _parse_template(name: str, value: Any) -> NotificationTemplate:
    what = f"{config.TEMPLATE_KEY_PREFIX}{name}"
    data = _load_mapping(value, what)

    github = None
    if data.get("github") is not None:
        github_data = data["github"]
        if not isinstance(github_data, dict):
            raise NotificationConfigError(f"{what}: github must be a mapping")
        github = GitHubNotificationConfig.from_dict(github_data)

    missing_tags = data.get("missingTags") or config.DEFAULT_MISSING_TAGS
    if missing_tags not in (config.MISSING_TAGS_STRICT, config.MISSING_TAGS_IGNORE):
        raise NotificationConfigError(
            f"{what}: missingTags must be "
            f"'{config.MISSING_TAGS_STRICT}' or '{config.MISSING_TAGS_IGNORE}'"
        )

    return NotificationTemplate(
        message=str(data.get("message") or ""),
        github=github,
        missing_tags=missing_tags,
    )


def parse_notification_config(content: str) -> NotifierConfig:
    """
    Parse a notification config document.

    Args:
        content: YAML text

    Returns:
        NotifierConfig with service options and raw templates

    Raises:
        NotificationConfigError: If the document or a template entry is invalid
    """
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise NotificationConfigError(f"Invalid YAML syntax in notification config: {e}") from e

    if document is None:
        return NotifierConfig()
    if not isinstance(document, dict):
        raise NotificationConfigError("Notification config must be a mapping")

    result = NotifierConfig()
    for key, value in document.items():
        key = str(key)
        if key == config.GITHUB_SERVICE_KEY:
            result.github = GitHubOptions.from_dict(_load_mapping(value, key))
        elif key.startswith(config.TEMPLATE_KEY_PREFIX):
            name = key[len(config.TEMPLATE_KEY_PREFIX):]
            if not name:
                raise NotificationConfigError(f"Template key '{key}' has no name")
            result.templates[name] = _parse_template(name, value)
    return result


def load_notification_config(path: str) -> NotifierConfig:
    """
    Read and parse a notification config file.

    Raises:
        FileNotFoundError: If the file does not exist
        NotificationConfigError: If the document is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Notification config not found: {config_path}")
    return parse_notification_config(config_path.read_text())
