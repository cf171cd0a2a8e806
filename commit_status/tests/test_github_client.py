import subprocess
import unittest
from unittest.mock import MagicMock, patch
import json


from commit_status.scripts.github_client import GitHubClient, GitHubClientError, GitHubOptions

class TestGitHubClient(unittest.TestCase):
    def setUp(self):
        self.token = "fake-token"
        self.client = GitHubClient(self.token)

    @patch("subprocess.run")
    def test_run_gh_success(self, mock_run):
        mock_result = MagicMock()
        mock_result.stdout = "output\n"
        mock_run.return_value = mock_result

        output = self.client._run_gh(["some", "cmd"])

        self.assertEqual(output, "output\n")
        # Check env contains token
        args, kwargs = mock_run.call_args
        self.assertEqual(args[0], ["gh", "some", "cmd"])
        self.assertEqual(kwargs['env']['GH_TOKEN'], "fake-token")
        self.assertIsNone(kwargs['timeout'])

    @patch("subprocess.run")
    def test_run_gh_without_token_uses_inherited_env(self, mock_run):
        mock_run.return_value = MagicMock(stdout="")

        GitHubClient()._run_gh(["cmd"])

        _, kwargs = mock_run.call_args
        self.assertIsNone(kwargs['env'])

    @patch("subprocess.run")
    def test_run_gh_failure(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(1, ["gh"], stderr="error")

        with self.assertRaises(GitHubClientError) as context:
            self.client._run_gh(["fail"])

        self.assertIn("gh command failed", str(context.exception))

    @patch("subprocess.run")
    def test_run_gh_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(["gh"], 5)

        with self.assertRaises(GitHubClientError) as context:
            self.client._run_gh(["slow"], timeout=5)

        self.assertIn("timed out", str(context.exception))
        _, kwargs = mock_run.call_args
        self.assertEqual(kwargs['timeout'], 5)

    @patch("commit_status.scripts.github_client.GitHubClient._run_gh")
    def test_create_status(self, mock_run_gh):
        mock_run_gh.return_value = json.dumps({"id": 42, "state": "success"})

        status = self.client.create_status(
            "owner", "repo", "abc123", "success",
            description="Deployed",
            context="ci/deploy",
            target_url="https://cd.example.com/app",
            timeout=3.0,
        )

        self.assertEqual(status["id"], 42)
        mock_run_gh.assert_called_once_with(
            [
                "api", "-X", "POST",
                "repos/owner/repo/statuses/abc123",
                "-f", "state=success",
                "-f", "description=Deployed",
                "-f", "context=ci/deploy",
                "-f", "target_url=https://cd.example.com/app",
            ],
            timeout=3.0,
        )

    @patch("commit_status.scripts.github_client.GitHubClient._run_gh")
    def test_create_status_omits_empty_context_and_target(self, mock_run_gh):
        mock_run_gh.return_value = "{}"

        self.client.create_status("owner", "repo", "abc123", "pending")

        args = mock_run_gh.call_args.args[0]
        self.assertNotIn("context=", " ".join(args))
        self.assertNotIn("target_url=", " ".join(args))
        self.assertIn("description=", args)

    @patch("commit_status.scripts.github_client.GitHubClient._run_gh")
    def test_create_status_enterprise_hostname(self, mock_run_gh):
        mock_run_gh.return_value = "{}"
        client = GitHubClient(self.token, hostname="ghe.example.com")

        client.create_status("owner", "repo", "abc123", "failure")

        args = mock_run_gh.call_args.args[0]
        self.assertEqual(args[-2:], ["--hostname", "ghe.example.com"])

    @patch("commit_status.scripts.github_client.GitHubClient._run_gh")
    def test_create_status_error_propagates(self, mock_run_gh):
        mock_run_gh.side_effect = GitHubClientError("gh command failed: HTTP 404")

        with self.assertRaises(GitHubClientError):
            self.client.create_status("owner", "repo", "abc123", "success")

    @patch("commit_status.scripts.github_client.GitHubClient._run_gh")
    def test_create_status_bad_response(self, mock_run_gh):
        mock_run_gh.return_value = "not json"

        with self.assertRaises(GitHubClientError):
            self.client.create_status("owner", "repo", "abc123", "success")


class TestGitHubOptions(unittest.TestCase):
    def test_from_dict(self):
        options = GitHubOptions.from_dict({
            "token": "abc",
            "enterpriseBaseURL": "https://ghe.example.com/api/v3",
            "appID": 12345,
        })

        self.assertEqual(options.token, "abc")
        self.assertEqual(options.hostname(), "ghe.example.com")

    def test_hostname_defaults_to_none(self):
        self.assertIsNone(GitHubOptions().hostname())

    def test_invalid_enterprise_url(self):
        with self.assertRaises(GitHubClientError):
            GitHubOptions(enterprise_base_url="not a url").hostname()

    @patch.dict("os.environ", {"GH_TOKEN": "", "GITHUB_TOKEN": "from-env"})
    def test_token_from_environment(self):
        self.assertEqual(GitHubOptions().resolve_token(), "from-env")

    @patch.dict("os.environ", {"GITHUB_TOKEN": "from-env"})
    def test_explicit_token_wins(self):
        self.assertEqual(GitHubOptions(token="explicit").resolve_token(), "explicit")

if __name__ == '__main__':
    unittest.main()
