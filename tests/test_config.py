"""Tests for configuration loading helpers."""

import logging
import os
import unittest

from pokertable.config import Config

_SETTINGS = (
    "USE_REDIS",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_DB",
    "REDIS_PASS",
    "SNAPSHOT_TTL_SECONDS",
    "DEBUG",
    "SMALL_BLIND",
    "BIG_BLIND",
    "INITIAL_CHIPS",
    "PLAYER_NAMES",
)


class ConfigEnvTestCase(unittest.TestCase):
    """Ensure config-related environment variables are isolated per test."""

    def _managed(self, key: str) -> bool:
        return key.startswith("POKERTABLE_") or key in _SETTINGS

    def setUp(self) -> None:  # noqa: D401 - short description inherited
        self._original_env = {
            key: os.environ[key]
            for key in os.environ
            if self._managed(key)
        }
        for key in list(os.environ):
            if self._managed(key):
                del os.environ[key]

    def tearDown(self) -> None:
        for key in list(os.environ):
            if self._managed(key):
                del os.environ[key]
        for key, value in self._original_env.items():
            os.environ[key] = value


class TestConfig(ConfigEnvTestCase):
    def test_defaults(self) -> None:
        cfg = Config()

        self.assertFalse(cfg.USE_REDIS)
        self.assertEqual(cfg.REDIS_HOST, "localhost")
        self.assertEqual(cfg.REDIS_PORT, 6379)
        self.assertEqual(cfg.SMALL_BLIND, 5)
        self.assertEqual(cfg.BIG_BLIND, 10)
        self.assertEqual(cfg.INITIAL_CHIPS, 1000)
        self.assertEqual(cfg.SNAPSHOT_TTL_SECONDS, 43200)
        self.assertEqual(len(cfg.PLAYER_NAMES), 2)
        self.assertEqual(cfg.log_level, logging.INFO)
        cfg.validate()

    def test_prefixed_name_wins_over_bare_name(self) -> None:
        os.environ["POKERTABLE_BIG_BLIND"] = "20"
        os.environ["BIG_BLIND"] = "50"
        os.environ["SMALL_BLIND"] = "10"

        cfg = Config()

        self.assertEqual(cfg.BIG_BLIND, 20)
        self.assertEqual(cfg.SMALL_BLIND, 10)

    def test_player_names_split_and_trimmed(self) -> None:
        os.environ["POKERTABLE_PLAYER_NAMES"] = " Ann, Ben ,,Cy "

        cfg = Config()

        self.assertEqual(cfg.PLAYER_NAMES, ["Ann", "Ben", "Cy"])

    def test_debug_enables_debug_logging(self) -> None:
        os.environ["POKERTABLE_DEBUG"] = "yes"

        self.assertEqual(Config().log_level, logging.DEBUG)

    def test_non_integer_setting_raises(self) -> None:
        os.environ["POKERTABLE_INITIAL_CHIPS"] = "lots"

        with self.assertRaises(ValueError):
            Config()

    def test_validate_rejects_bad_tables(self) -> None:
        os.environ["POKERTABLE_SMALL_BLIND"] = "20"
        with self.assertRaises(ValueError):
            Config().validate()

        os.environ["POKERTABLE_SMALL_BLIND"] = "5"
        os.environ["POKERTABLE_PLAYER_NAMES"] = "Solo"
        with self.assertRaises(ValueError):
            Config().validate()

        os.environ["POKERTABLE_PLAYER_NAMES"] = "A,B"
        os.environ["POKERTABLE_INITIAL_CHIPS"] = "5"
        with self.assertRaises(ValueError):
            Config().validate()


if __name__ == "__main__":
    unittest.main()
