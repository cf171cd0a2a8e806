"""
Central configuration for commit status notifications.
"""

# Default templates, used when a definition leaves repoURL/revision empty
DEFAULT_REPO_URL_TEMPLATE = "{{app.spec.source.repoURL}}"
DEFAULT_REVISION_TEMPLATE = "{{app.status.operationState.syncResult.revision}}"

# Status field names as they appear in config files and error messages,
# in the order they are compiled and executed
FIELD_REPO_URL = "repoURL"
FIELD_REVISION = "revision"
FIELD_STATE = "state"
FIELD_LABEL = "label"
FIELD_TARGET_URL = "targetURL"

# GitHub limits the status description to 140 characters
MAX_DESCRIPTION_LENGTH = 140
ELLIPSIS = "..."

# pystache missing tag handling
MISSING_TAGS_STRICT = "strict"
MISSING_TAGS_IGNORE = "ignore"
DEFAULT_MISSING_TAGS = MISSING_TAGS_STRICT

# Config document keys
TEMPLATE_KEY_PREFIX = "template."
GITHUB_SERVICE_KEY = "service.github"

# Environment variables checked for a token, in order
TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")
