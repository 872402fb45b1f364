import logging
import unittest
from unittest.mock import patch

from ecommerce.core.config import ConfigError, load_settings
from ecommerce.core.security import (
    INVALID_TOKEN_MESSAGE,
    MISSING_TOKEN_MESSAGE,
    AuthGate,
    GateRejected,
    parse_bearer_token,
)
from ecommerce.core.tokens import InvalidSignatureError, TokenExpiredError
from ecommerce.logging_config import HealthCheckFilter, get_logging_config


class _FakeVerifier:
    def __init__(self, principal: str = "alice", error: Exception | None = None) -> None:
        self.principal = principal
        self.error = error
        self.calls: list[str] = []

    def verify_token(self, token: str) -> str:
        self.calls.append(token)
        if self.error is not None:
            raise self.error
        return self.principal


class TestConfig(unittest.TestCase):
    def test_load_settings_success_minimal(self) -> None:
        with patch.dict("os.environ", {"JWT_SECRET": "secret"}, clear=True):
            settings = load_settings()
            self.assertEqual(settings.jwt_secret, "secret")
            self.assertEqual(settings.token_ttl_minutes, 120)
            self.assertEqual(settings.sqlite_path, "./data/ecommerce.sqlite3")
            self.assertEqual(settings.log_level, "INFO")

    def test_load_settings_from_injected_environ(self) -> None:
        settings = load_settings(
            {"JWT_SECRET": " s3 ", "TOKEN_TTL_MINUTES": "30", "SQLITE_PATH": ":memory:", "LOG_LEVEL": "debug"}
        )
        self.assertEqual(settings.jwt_secret, "s3")
        self.assertEqual(settings.token_ttl_minutes, 30)
        self.assertEqual(settings.sqlite_path, ":memory:")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_load_settings_missing_secret(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            load_settings({})
        self.assertIn("JWT_SECRET", str(ctx.exception))

    def test_load_settings_ttl_invalid(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            load_settings({"JWT_SECRET": "x", "TOKEN_TTL_MINUTES": "abc"})
        self.assertIn("TOKEN_TTL_MINUTES", str(ctx.exception))
        with self.assertRaises(ConfigError):
            load_settings({"JWT_SECRET": "x", "TOKEN_TTL_MINUTES": "0"})


class TestBearerParsing(unittest.TestCase):
    def test_parse_bearer_token(self) -> None:
        self.assertEqual(parse_bearer_token("Bearer a1"), "a1")
        self.assertEqual(parse_bearer_token("Bearer "), "")
        self.assertIsNone(parse_bearer_token(None))
        self.assertIsNone(parse_bearer_token(""))
        self.assertIsNone(parse_bearer_token("Basic abc"))
        self.assertIsNone(parse_bearer_token("Bearer"))
        self.assertIsNone(parse_bearer_token("bearer a1"))


class TestAuthGate(unittest.TestCase):
    def test_missing_header_never_calls_verifier(self) -> None:
        verifier = _FakeVerifier()
        gate = AuthGate(verifier)
        for header in (None, "", "Token abc", "Basic abc"):
            with self.assertRaises(GateRejected) as ctx:
                gate.authenticate(header)
            self.assertEqual(ctx.exception.message, MISSING_TOKEN_MESSAGE)
            self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(verifier.calls, [])

    def test_valid_token_returns_principal(self) -> None:
        verifier = _FakeVerifier(principal="bob")
        gate = AuthGate(verifier)
        self.assertEqual(gate.authenticate("Bearer tok"), "bob")
        self.assertEqual(verifier.calls, ["tok"])

    def test_any_verifier_error_collapses_to_invalid_token(self) -> None:
        for error in (InvalidSignatureError("sig"), TokenExpiredError("exp")):
            verifier = _FakeVerifier(error=error)
            gate = AuthGate(verifier)
            with self.assertRaises(GateRejected) as ctx:
                gate.authenticate("Bearer tok")
            self.assertEqual(ctx.exception.message, INVALID_TOKEN_MESSAGE)
            self.assertEqual(len(verifier.calls), 1)


class TestLoggingConfig(unittest.TestCase):
    def test_health_check_filter(self) -> None:
        f = HealthCheckFilter()
        quiet = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"GET /healthz HTTP/1.1" 200', None, None)
        loud = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"GET /products HTTP/1.1" 200', None, None)
        self.assertFalse(f.filter(quiet))
        self.assertTrue(f.filter(loud))

    def test_level_applies_to_package_logger(self) -> None:
        cfg = get_logging_config("debug")
        self.assertEqual(cfg["loggers"]["ecommerce"]["level"], "DEBUG")


if __name__ == "__main__":
    unittest.main()
