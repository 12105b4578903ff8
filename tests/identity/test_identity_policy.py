import unittest

from drivevault.config import IsolationPolicy
from drivevault.errors import InvalidTokenError, UnauthenticatedError
from drivevault.identity import SHARED_IDENTITY, CallerIdentity, RequestAuthenticator


class _StubVerifier:
    def __init__(self) -> None:
        self.tokens: list[str] = []

    def verify(self, token: str) -> CallerIdentity:
        self.tokens.append(token)
        if token == "bad":
            raise InvalidTokenError("Unauthorized: Invalid token")
        return CallerIdentity(uid=f"uid-{token}", email=f"{token}@example.com")


class TestRequestAuthenticator(unittest.TestCase):
    def test_token_policy_uses_verified_subject(self) -> None:
        auth = RequestAuthenticator(_StubVerifier(), IsolationPolicy.TOKEN)
        identity = auth.authenticate("Bearer alice", "someone-else")
        self.assertEqual(identity.uid, "uid-alice")

    def test_header_policy_uses_header(self) -> None:
        verifier = _StubVerifier()
        auth = RequestAuthenticator(verifier, IsolationPolicy.HEADER)
        identity = auth.authenticate("Bearer alice", " u42 ")
        self.assertEqual(identity.uid, "u42")
        self.assertEqual(identity.email, "alice@example.com")
        # The token is still verified.
        self.assertEqual(verifier.tokens, ["alice"])

    def test_header_policy_requires_header(self) -> None:
        auth = RequestAuthenticator(_StubVerifier(), IsolationPolicy.HEADER)
        with self.assertRaises(UnauthenticatedError) as ctx:
            auth.authenticate("Bearer alice", None)
        self.assertEqual(ctx.exception.message, "User ID required")

    def test_none_policy_maps_to_shared_identity(self) -> None:
        auth = RequestAuthenticator(_StubVerifier(), IsolationPolicy.NONE)
        self.assertEqual(auth.authenticate("Bearer alice").uid, SHARED_IDENTITY)
        self.assertEqual(auth.authenticate("Bearer bob").uid, SHARED_IDENTITY)
        self.assertIs(auth.policy, IsolationPolicy.NONE)

    def test_every_policy_requires_a_token(self) -> None:
        for policy in IsolationPolicy:
            with self.subTest(policy=policy):
                auth = RequestAuthenticator(_StubVerifier(), policy)
                with self.assertRaises(UnauthenticatedError):
                    auth.authenticate(None, "u1")
                with self.assertRaises(InvalidTokenError):
                    auth.authenticate("Bearer bad", "u1")


if __name__ == "__main__":
    unittest.main()
