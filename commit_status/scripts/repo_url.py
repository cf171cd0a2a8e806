"""
Repository URL resolution for commit status notifications.

Maps Git remote URLs onto the "owner/repo" slug used by the GitHub API.
Handles scheme URLs (https://, ssh://, git://, ...), SCP-like remotes
(git@github.com:owner/repo.git) and plain local paths.
"""

import re
from dataclasses import dataclass
from typing import Tuple
from urllib.parse import unquote, urlsplit

from .notification import NotificationError

_GIT_SUFFIX = re.compile(r"\.git$")

# user@host:path, where path does not start with a backslash (Windows drive)
_SCP_SYNTAX = re.compile(
    r"^(?:(?P<user>[A-Za-z0-9\-._~]+)@)?(?P<host>[A-Za-z0-9\-._]+):(?P<path>[A-Za-z0-9./\-_~][^\\]*)$"
)
_SCHEME_SYNTAX = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+\-.]*)://")

SUPPORTED_SCHEMES = {
    "ssh", "git", "git+ssh", "http", "https", "ftp", "ftps", "rsync", "file",
}


class RepoURLResolutionError(NotificationError):
    """Raised when a repository URL can't be resolved to a slug."""
    pass


@dataclass(frozen=True)
class GitURL:
    """Parsed Git remote reference."""
    scheme: str
    user: str
    host: str
    path: str


def parse_git_url(raw_url: str) -> GitURL:
    """
    Parse a Git remote reference.

    Args:
        raw_url: Remote URL, e.g. "https://github.com/owner/repo.git",
            "ssh://git@github.com/owner/repo.git", "git@github.com:owner/repo.git"

    Returns:
        GitURL with scheme "ssh" for SCP-like remotes and "file" for local paths

    Raises:
        RepoURLResolutionError: If the input is empty or malformed
    """
    if not raw_url or not raw_url.strip():
        raise RepoURLResolutionError("Repository URL is empty")
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw_url):
        raise RepoURLResolutionError(
            f"Repository URL contains whitespace or control characters: {raw_url!r}"
        )

    if _SCHEME_SYNTAX.match(raw_url):
        try:
            parts = urlsplit(raw_url)
            # Accessing port validates it
            parts.port
        except ValueError as e:
            raise RepoURLResolutionError(f"Malformed repository URL {raw_url!r}: {e}") from e

        scheme = parts.scheme.lower()
        if scheme not in SUPPORTED_SCHEMES:
            raise RepoURLResolutionError(
                f"Unsupported repository URL scheme '{scheme}': {raw_url}"
            )
        if scheme != "file" and not parts.hostname:
            raise RepoURLResolutionError(f"Repository URL has no host: {raw_url}")
        return GitURL(
            scheme=scheme,
            user=parts.username or "",
            host=parts.hostname or "",
            path=unquote(parts.path),
        )

    match = _SCP_SYNTAX.match(raw_url)
    if match:
        return GitURL(
            scheme="ssh",
            user=match.group("user") or "",
            host=match.group("host"),
            path=match.group("path"),
        )

    return GitURL(scheme="file", user="", host="", path=raw_url)


def resolve_slug(raw_url: str) -> str:
    """
    Resolve a repository URL to its "owner/repo" slug.

    A trailing ".git" is stripped and empty path segments are ignored.
    Paths with fewer than two segments resolve to what is left
    ("https://github.com/owner" gives "owner").

    Raises:
        RepoURLResolutionError: If the URL can't be parsed
    """
    path = _GIT_SUFFIX.sub("", parse_git_url(raw_url).path)
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) >= 2:
        return "/".join(segments[:2])
    return "".join(segments)


def split_slug(raw_url: str) -> Tuple[str, str]:
    """
    Resolve a repository URL to an (owner, repo) pair.

    Raises:
        RepoURLResolutionError: If the URL can't be parsed or doesn't name
            both an owner and a repository
    """
    slug = resolve_slug(raw_url)
    owner, _, repo = slug.partition("/")
    if not owner or not repo:
        raise RepoURLResolutionError(
            f"Repository URL must contain an owner and a repository name: {raw_url}"
        )
    return owner, repo
