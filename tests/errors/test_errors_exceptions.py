import unittest

from drivevault.errors.exceptions import (
    ConfigurationError,
    DriveVaultError,
    ForbiddenScopeError,
    HttpErrorInfo,
    InternalUpstreamError,
    InvalidFolderIdError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
    UnauthenticatedError,
    UpstreamUnavailableError,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = DriveVaultError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.message, "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)
        self.assertEqual(err.http_status, 500)

    def test_http_status_per_class(self) -> None:
        self.assertEqual(UnauthenticatedError("x").http_status, 401)
        self.assertEqual(InvalidTokenError("x").http_status, 403)
        self.assertEqual(InvalidInputError("x").http_status, 400)
        self.assertEqual(InvalidFolderIdError("x").http_status, 400)
        self.assertEqual(ForbiddenScopeError("x").http_status, 403)
        self.assertEqual(NotFoundError("x").http_status, 404)
        self.assertEqual(UpstreamUnavailableError("x").http_status, 503)
        self.assertEqual(InternalUpstreamError("x").http_status, 500)
        self.assertEqual(ConfigurationError("x").http_status, 500)

    def test_invalid_token_is_an_authentication_failure(self) -> None:
        self.assertIsInstance(InvalidTokenError("x"), UnauthenticatedError)
        self.assertIsInstance(InvalidFolderIdError("x"), InvalidInputError)

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404, message="not found"))
        self.assertIsInstance(err, NotFoundError)

        err = map_http_error(HttpErrorInfo(status_code=400, message="bad req"))
        self.assertIsInstance(err, InternalUpstreamError)

        err = map_http_error(HttpErrorInfo(status_code=429, message="rate"))
        self.assertIsInstance(err, UpstreamUnavailableError)

        err = map_http_error(HttpErrorInfo(status_code=401, message="auth"))
        self.assertIsInstance(err, UpstreamUnavailableError)
        self.assertEqual(err.details["status_code"], 401)

    def test_map_http_error_403_quota_vs_permission(self) -> None:
        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="userRateLimitExceeded", message="quota")
        )
        self.assertIsInstance(err, UpstreamUnavailableError)

        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="insufficientPermissions", message="x")
        )
        self.assertIsInstance(err, InternalUpstreamError)

    def test_map_http_error_5xx_is_unavailable(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=503, message="unavail"))
        self.assertIsInstance(err, UpstreamUnavailableError)

    def test_map_http_error_other_is_internal(self) -> None:
        cause = RuntimeError("teapot")
        err = map_http_error(HttpErrorInfo(status_code=418), cause=cause)
        self.assertIsInstance(err, InternalUpstreamError)
        self.assertEqual(err.message, "HTTP error 418")
        self.assertIs(err.cause, cause)


if __name__ == "__main__":
    unittest.main()
