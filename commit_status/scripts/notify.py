#!/usr/bin/env python3
"""
Post a commit status from a notification definition.

Loads the notification config, renders the named definition against a
context file (JSON or YAML) and creates the resulting commit status on
GitHub. With --dry-run the rendered notification is printed instead.

Usage:
    commit-status-notify --config notifications.yaml \\
        --template app-sync-succeeded --context app.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .github_client import GitHubClientError
from .github_service import GitHubService
from .notification import NotificationError
from .notification_loader import load_notification_config
from .notification_templater import compile_notification_templater

logger = logging.getLogger(__name__)


def load_context(path: str) -> Dict[str, Any]:
    """
    Read the template context from a JSON or YAML file.

    YAML is a superset of JSON, so both parse with yaml.safe_load.

    Raises:
        FileNotFoundError: If the file does not exist
        NotificationError: If the file is not a mapping
    """
    context_path = Path(path)
    if not context_path.exists():
        raise FileNotFoundError(f"Context file not found: {context_path}")
    try:
        data = yaml.safe_load(context_path.read_text())
    except yaml.YAMLError as e:
        raise NotificationError(f"Invalid context file {context_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise NotificationError(f"Context file {context_path} must contain a mapping")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Post a GitHub commit status notification")
    parser.add_argument("--config", required=True, help="Path to the notification config YAML")
    parser.add_argument("--template", required=True, help="Name of the notification definition")
    parser.add_argument("--context", required=True, help="Path to the JSON/YAML template context")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds to wait for the GitHub API call")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the rendered notification instead of sending it")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        notifier_config = load_notification_config(args.config)
        logger.debug(
            f"Loaded {len(notifier_config.templates)} notification templates from {args.config}"
        )
        template = notifier_config.templates.get(args.template)
        if template is None:
            raise NotificationError(
                f"Notification template '{args.template}' not found in {args.config}"
            )

        templater = compile_notification_templater(args.template, None, template)
        notification = templater(load_context(args.context))

        if args.dry_run:
            print(json.dumps(notification.to_dict(), indent=2))
            return 0

        service = GitHubService.from_options(notifier_config.github, timeout=args.timeout)
        service.send(notification, None)
    except (NotificationError, GitHubClientError, FileNotFoundError) as e:
        print(f"::error::{e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
