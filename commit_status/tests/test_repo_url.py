"""Tests for repo_url module."""

import pytest

from commit_status.scripts.repo_url import (
    GitURL,
    RepoURLResolutionError,
    parse_git_url,
    resolve_slug,
    split_slug,
)


class TestParseGitURL:
    """Tests for parse_git_url."""

    def test_https(self):
        parsed = parse_git_url("https://github.com/owner/repo.git")
        assert parsed == GitURL(scheme="https", user="", host="github.com", path="/owner/repo.git")

    def test_ssh_scheme(self):
        parsed = parse_git_url("ssh://git@github.com:22/owner/repo.git")
        assert parsed.scheme == "ssh"
        assert parsed.user == "git"
        assert parsed.host == "github.com"
        assert parsed.path == "/owner/repo.git"

    def test_scp_like(self):
        parsed = parse_git_url("git@github.com:owner/repo.git")
        assert parsed == GitURL(scheme="ssh", user="git", host="github.com", path="owner/repo.git")

    def test_scp_like_without_user(self):
        parsed = parse_git_url("github.com:owner/repo")
        assert parsed.host == "github.com"
        assert parsed.path == "owner/repo"

    def test_path_is_percent_decoded(self):
        parsed = parse_git_url("https://github.com/o%20x/r")
        assert parsed.path == "/o x/r"

    def test_local_path(self):
        parsed = parse_git_url("/srv/git/owner/repo.git")
        assert parsed.scheme == "file"
        assert parsed.path == "/srv/git/owner/repo.git"

    @pytest.mark.parametrize("raw_url", [
        "",
        "   ",
        "https://github.com/owner/my repo",
        "https://[github.com/owner/repo",
        "https:///owner/repo",
        "https://github.com:notaport/owner/repo",
        "gopher://github.com/owner/repo",
    ])
    def test_malformed(self, raw_url):
        with pytest.raises(RepoURLResolutionError):
            parse_git_url(raw_url)


class TestResolveSlug:
    """Tests for resolve_slug."""

    @pytest.mark.parametrize("raw_url,expected", [
        ("https://github.com/owner/repo.git", "owner/repo"),
        ("https://github.com/owner/repo", "owner/repo"),
        ("git@github.com:owner/repo.git", "owner/repo"),
        ("ssh://git@github.com/owner/repo.git", "owner/repo"),
        ("git://github.com/owner/repo.git", "owner/repo"),
        ("https://github.com/owner/repo/tree/main", "owner/repo"),
        ("https://github.com//owner//repo.git", "owner/repo"),
        ("https://ghe.example.com/owner/repo.git", "owner/repo"),
    ])
    def test_two_segments(self, raw_url, expected):
        assert resolve_slug(raw_url) == expected

    def test_percent_encoded_owner(self):
        assert resolve_slug("https://github.com/o%20x/r.git") == "o x/r"

    def test_single_segment(self):
        assert resolve_slug("https://github.com/owner") == "owner"

    def test_no_path(self):
        assert resolve_slug("https://github.com") == ""

    def test_only_trailing_git_is_stripped(self):
        assert resolve_slug("https://github.com/owner/repo.github.io") == "owner/repo.github.io"

    def test_malformed_raises(self):
        with pytest.raises(RepoURLResolutionError):
            resolve_slug("https://[broken")


class TestSplitSlug:
    """Tests for split_slug."""

    def test_owner_and_repo(self):
        assert split_slug("https://github.com/o/r.git") == ("o", "r")

    def test_single_segment_is_an_error(self):
        with pytest.raises(RepoURLResolutionError) as exc_info:
            split_slug("https://github.com/owner")

        assert "owner and a repository" in str(exc_info.value)

    def test_empty_is_an_error(self):
        with pytest.raises(RepoURLResolutionError):
            split_slug("")
