import unittest
from unittest.mock import Mock, patch

from drivevault import cli
from drivevault.models import RootFolderRecord


class TestCli(unittest.TestCase):
    def test_command_is_required(self) -> None:
        with self.assertRaises(SystemExit):
            cli.main([])

    def test_setup_oauth_prints_env_lines(self) -> None:
        creds = Mock(client_id="cid", client_secret="secret", refresh_token="rt")
        with patch.object(cli.OAuthClient, "run_consent_flow", return_value=creds) as flow:
            with patch("builtins.print") as printed:
                code = cli.main(["setup-oauth", "--client-secrets", "client_secrets.json"])

        self.assertEqual(code, 0)
        flow.assert_called_once_with("client_secrets.json", cli.DRIVE_SCOPES)
        lines = [c.args[0] for c in printed.call_args_list]
        self.assertEqual(
            lines,
            ["GOOGLE_CLIENT_ID=cid", "GOOGLE_CLIENT_SECRET=secret", "GOOGLE_REFRESH_TOKEN=rt"],
        )

    def test_init_user_prints_folder_id(self) -> None:
        service = Mock()
        service.initialize_user.return_value = RootFolderRecord("u1", "R1")
        settings = Mock(log_level="INFO")
        with patch.object(cli.Settings, "from_env", return_value=settings), patch.object(
            cli.VaultService, "from_settings", return_value=service
        ), patch("builtins.print") as printed:
            code = cli.main(["init-user", "u1", "--email", "u1@example.com"])

        self.assertEqual(code, 0)
        caller = service.initialize_user.call_args.args[0]
        self.assertEqual((caller.uid, caller.email), ("u1", "u1@example.com"))
        printed.assert_called_once_with("R1")

    def test_errors_exit_non_zero(self) -> None:
        with patch("sys.stderr"):
            code = cli.main(["setup-oauth", "--client-secrets", "/nonexistent/secrets.json"])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
