"""
Commit status templates for GitHub notifications.

Compiles the five status field templates of a notification definition
into an immutable GitHubTemplater, and renders them against a variable
context to populate a Notification's GitHub payload.

Templates are Mustache, rendered with pystache. Functions are injected
as callables at the bottom of the context stack, so a template can use
``{{now}}`` for a zero-argument callable or ``{{#upper}}...{{/upper}}``
for a section lambda. Context variables shadow functions of the same name.
"""

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import pystache
from pystache.parsed import ParsedTemplate
from pystache.parser import ParsingError

from . import config
from .notification import (
    GitHubNotification,
    GitHubNotificationConfig,
    Notification,
    NotificationError,
)

logger = logging.getLogger(__name__)

FunctionMap = Mapping[str, Callable[..., Any]]

_SECTION_TAG_RE = re.compile(r"\{\{\s*([#^/])\s*(.+?)\s*\}\}")


class TemplateCompileError(NotificationError):
    """Raised when a template field has invalid syntax."""

    def __init__(self, name: str, field: str, reason: str):
        self.name = name
        self.field = field
        self.reason = reason
        super().__init__(
            f"Notification '{name}': failed to compile {field} template: {reason}"
        )


class TemplateExecutionError(NotificationError):
    """Raised when a compiled template fails to render."""

    def __init__(self, name: str, field: str, reason: str):
        self.name = name
        self.field = field
        self.reason = reason
        super().__init__(
            f"Notification '{name}': failed to render {field} template: {reason}"
        )


def find_syntax_error(source: str) -> Optional[str]:
    """
    Check a Mustache template for problems pystache parses silently.

    pystache treats an unterminated ``{{`` as literal text and drops a
    section that is never closed, so both are detected here.

    Args:
        source: Template text

    Returns:
        Description of the first problem found, or None
    """
    if "{{=" in source:
        # Custom delimiters, tag positions can't be checked with {{ }}
        return None

    pos = 0
    while True:
        start = source.find("{{", pos)
        if start == -1:
            break
        # Triple mustache needs a matching triple close
        opener, closer = ("{{{", "}}}") if source.startswith("{{{", start) else ("{{", "}}")
        end = source.find(closer, start + len(opener))
        if end == -1 or source.find("{{", start + len(opener), end) != -1:
            return f"unclosed tag at offset {start}"
        pos = end + len(closer)

    open_sections = []
    for match in _SECTION_TAG_RE.finditer(source):
        kind, key = match.groups()
        if kind in "#^":
            open_sections.append(key)
        elif open_sections and open_sections[-1] == key:
            open_sections.pop()
        else:
            return f"unexpected closing tag for section '{key}'"
    if open_sections:
        return f"unclosed section '{open_sections[-1]}'"
    return None


def check_missing_tags(mode: str) -> None:
    """Raise ValueError unless mode is a pystache missing_tags setting we support."""
    if mode not in (config.MISSING_TAGS_STRICT, config.MISSING_TAGS_IGNORE):
        raise ValueError(f"Unknown missing_tags mode: {mode}")


def compile_template(name: str, field: str, source: str) -> ParsedTemplate:
    """
    Compile one template field.

    Args:
        name: Notification definition name (for error messages)
        field: Field being compiled (for error messages)
        source: Template text

    Returns:
        Parsed template, reusable across renders

    Raises:
        TemplateCompileError: If the template has invalid syntax
    """
    problem = find_syntax_error(source)
    if problem:
        raise TemplateCompileError(name, field, problem)
    try:
        return pystache.parse(source)
    except ParsingError as e:
        raise TemplateCompileError(name, field, str(e)) from e


class _StatusRenderer(pystache.Renderer):
    """Renderer that renders None values as empty strings."""

    def str_coerce(self, val):
        if val is None:
            return ""
        return str(val)


def render_compiled(
    name: str,
    field: str,
    template: ParsedTemplate,
    functions: FunctionMap,
    variables: Mapping[str, Any],
    missing_tags: str = config.DEFAULT_MISSING_TAGS,
) -> str:
    """
    Render a compiled template against functions and variables.

    A new Renderer is built per call: pystache keeps per-render state
    on the renderer, while the parsed template itself is never modified.

    Raises:
        TemplateExecutionError: If rendering fails, including missing keys
            in strict mode and errors raised by injected functions
    """
    renderer = _StatusRenderer(
        missing_tags=missing_tags,
        escape=lambda x: x,  # Plain text status fields
    )
    # pystache only looks up keys in real dicts
    try:
        return renderer.render(template, dict(functions), dict(variables))
    except Exception as e:
        raise TemplateExecutionError(name, field, str(e)) from e


@dataclass(frozen=True)
class GitHubTemplater:
    """
    Compiled status templates for one notification definition.

    Built once by compile_github_templater() and called per event. All
    five templates render into a scratch mapping first; the notification
    is only touched once every field rendered successfully.
    """
    name: str
    functions: FunctionMap
    repo_url: ParsedTemplate
    revision: ParsedTemplate
    state: ParsedTemplate
    label: ParsedTemplate
    target_url: ParsedTemplate
    missing_tags: str = config.DEFAULT_MISSING_TAGS

    def _fields(self) -> Tuple[Tuple[str, ParsedTemplate], ...]:
        return (
            (config.FIELD_REPO_URL, self.repo_url),
            (config.FIELD_REVISION, self.revision),
            (config.FIELD_STATE, self.state),
            (config.FIELD_LABEL, self.label),
            (config.FIELD_TARGET_URL, self.target_url),
        )

    def render(self, variables: Mapping[str, Any]) -> Dict[str, str]:
        """
        Render all status fields without touching any notification.

        Returns:
            Dict keyed by field name (repoURL, revision, state, label, targetURL)

        Raises:
            TemplateExecutionError: On the first field that fails to render
        """
        return {
            field: render_compiled(
                self.name, field, template, self.functions, variables, self.missing_tags
            )
            for field, template in self._fields()
        }

    def __call__(self, notification: Notification, variables: Mapping[str, Any]) -> None:
        """
        Populate notification.github from the compiled templates.

        Allocates the payload if the notification has none, otherwise
        overwrites the existing payload's fields.

        Raises:
            TemplateExecutionError: If any field fails; notification unchanged
        """
        rendered = self.render(variables)

        if notification.github is None:
            notification.github = GitHubNotification()
        payload = notification.github
        payload.repo_url = rendered[config.FIELD_REPO_URL]
        payload.revision = rendered[config.FIELD_REVISION]
        payload.state = rendered[config.FIELD_STATE]
        payload.label = rendered[config.FIELD_LABEL]
        payload.target_url = rendered[config.FIELD_TARGET_URL]


def compile_github_templater(
    name: str,
    functions: Optional[FunctionMap],
    github_config: GitHubNotificationConfig,
    missing_tags: str = config.DEFAULT_MISSING_TAGS,
) -> GitHubTemplater:
    """
    Compile the status templates of a notification definition.

    Empty repoURL and revision templates fall back to the defaults, which
    read the application's source repository and last synced revision.
    Fields compile in order repoURL, revision, state, label, targetURL;
    the first failure aborts and no templater is returned.

    Args:
        name: Notification definition name
        functions: Named callables available to templates
        github_config: Raw field templates
        missing_tags: "strict" to fail on missing keys, "ignore" to render them empty

    Returns:
        GitHubTemplater ready to be called per event

    Raises:
        TemplateCompileError: If any field has invalid syntax
        ValueError: If missing_tags is not a known mode
    """
    check_missing_tags(missing_tags)

    repo_url_source = github_config.repo_url or config.DEFAULT_REPO_URL_TEMPLATE
    revision_source = github_config.revision or config.DEFAULT_REVISION_TEMPLATE

    repo_url = compile_template(name, config.FIELD_REPO_URL, repo_url_source)
    revision = compile_template(name, config.FIELD_REVISION, revision_source)
    state = compile_template(name, config.FIELD_STATE, github_config.state)
    label = compile_template(name, config.FIELD_LABEL, github_config.label)
    target_url = compile_template(name, config.FIELD_TARGET_URL, github_config.target_url)

    logger.debug(f"Compiled status templates for notification '{name}'")

    return GitHubTemplater(
        name=name,
        functions=MappingProxyType(dict(functions or {})),
        repo_url=repo_url,
        revision=revision,
        state=state,
        label=label,
        target_url=target_url,
        missing_tags=missing_tags,
    )
