import unittest

from drivevault.auth import AuthInfo


class TestAuthInfo(unittest.TestCase):
    def test_auth_info_valid_oauth(self) -> None:
        info = AuthInfo(
            kind="oauth",
            data={
                "client_secrets_file": "/tmp/client_secrets.json",
                "token_file": "/tmp/token.json",
            },
        )
        self.assertEqual(info.kind, "oauth")
        self.assertEqual(info.token_file, "/tmp/token.json")
        self.assertEqual(info.client_secrets_file, "/tmp/client_secrets.json")

    def test_from_refresh_token(self) -> None:
        info = AuthInfo.from_refresh_token("cid", "secret", "rt")
        self.assertEqual(info.kind, "refresh_token")
        self.assertEqual(info.data["refresh_token"], "rt")

    def test_repr_hides_secrets(self) -> None:
        info = AuthInfo.from_refresh_token("cid", "very-secret", "very-refresh")
        text = repr(info)
        self.assertNotIn("very-secret", text)
        self.assertNotIn("very-refresh", text)

    def test_auth_info_invalid_kind(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="service_account", data={})

    def test_auth_info_missing_keys(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="oauth", data={"client_secrets_file": "x"})
        with self.assertRaises(ValueError):
            AuthInfo.from_refresh_token("cid", "secret", "  ")

    def test_auth_info_data_must_be_dict(self) -> None:
        with self.assertRaises(TypeError):
            AuthInfo(kind="oauth", data=[("token_file", "x")])  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
