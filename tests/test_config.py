import dataclasses
import logging
import unittest

from beyclient import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    ClientConfig,
    ClientConfigBuilder,
    LoggerSink,
    RetryPolicy,
    config_from_env,
)


class TestClientConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = ClientConfig(api_key="k")
        self.assertEqual(cfg.base_url, DEFAULT_BASE_URL)
        self.assertEqual(cfg.base_url, "https://api.bey.dev")
        self.assertEqual(cfg.timeout_ms, DEFAULT_TIMEOUT_MS)
        self.assertEqual(cfg.retry, RetryPolicy(attempts=3, base_delay_ms=1000, max_delay_ms=10000))
        self.assertIsNone(cfg.logger)
        self.assertIsNone(cfg.http)

    def test_requires_api_key(self):
        with self.assertRaises(ValueError):
            ClientConfig()
        with self.assertRaises(ValueError):
            ClientConfig(api_key="")

    def test_rejects_bad_timeout(self):
        for bad in (0, -5, 1.5, True):
            with self.assertRaises(ValueError):
                ClientConfig(api_key="k", timeout_ms=bad)

    def test_is_immutable(self):
        cfg = ClientConfig(api_key="k")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            cfg.api_key = "other"

    def test_api_key_hidden_from_repr(self):
        self.assertNotIn("secret-key", repr(ClientConfig(api_key="secret-key")))

    def test_with_api_key_copies_everything_else(self):
        sink = LoggerSink()
        cfg = ClientConfig(api_key="k1", base_url="https://x.test", timeout_ms=5, logger=sink)
        rotated = cfg.with_api_key("k2")
        self.assertEqual(rotated.api_key, "k2")
        self.assertEqual(cfg.api_key, "k1")
        self.assertEqual(dataclasses.replace(rotated, api_key="k1"), cfg)

    def test_builder(self):
        cfg = (
            ClientConfigBuilder()
            .with_api_key("k")
            .with_base_url("https://x.test")
            .with_timeout_ms(1000)
            .with_retry(RetryPolicy(attempts=1))
            .build()
        )
        self.assertEqual(cfg.base_url, "https://x.test")
        self.assertEqual(cfg.timeout_ms, 1000)
        self.assertEqual(cfg.retry.attempts, 1)


class TestConfigFromEnv(unittest.TestCase):
    def test_reads_environment(self):
        cfg = config_from_env(
            {"BEY_API_KEY": " k ", "BEY_BASE_URL": "https://x.test", "BEY_TIMEOUT_MS": "1500"}
        )
        self.assertEqual(cfg.api_key, "k")
        self.assertEqual(cfg.base_url, "https://x.test")
        self.assertEqual(cfg.timeout_ms, 1500)

    def test_missing_key(self):
        with self.assertRaises(ValueError) as ctx:
            config_from_env({})
        self.assertIn("BEY_API_KEY", str(ctx.exception))

    def test_overrides_win(self):
        cfg = config_from_env({"BEY_API_KEY": "k"}, timeout_ms=10)
        self.assertEqual(cfg.timeout_ms, 10)
        self.assertEqual(config_from_env({}, api_key="o").api_key, "o")

    def test_bad_timeout(self):
        with self.assertRaises(ValueError):
            config_from_env({"BEY_API_KEY": "k", "BEY_TIMEOUT_MS": "soon"})


class TestLoggerSink(unittest.TestCase):
    def test_missing_slot_is_dropped(self):
        got = []
        sink = LoggerSink(info=lambda msg, data: got.append((msg, data)))
        sink.emit("debug", "ignored")
        sink.emit("info", "hello", {"a": 1})
        self.assertEqual(got, [("hello", {"a": 1})])

    def test_raising_callback_is_ignored(self):
        def boom(msg, data):
            raise RuntimeError("boom")

        LoggerSink(error=boom).emit("error", "x")

    def test_from_logging(self):
        logger = logging.getLogger("beyclient.test")
        sink = LoggerSink.from_logging(logger)
        with self.assertLogs(logger, level="DEBUG") as logs:
            sink.emit("debug", "d")
            sink.emit("warn", "w", {"delay_ms": 1000})
        self.assertEqual(logs.records[0].levelno, logging.DEBUG)
        self.assertEqual(logs.records[1].levelno, logging.WARNING)
        self.assertIn("delay_ms", logs.records[1].getMessage())
