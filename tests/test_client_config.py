from __future__ import annotations

import json
import os
import tempfile
import unittest
from datetime import timedelta

from sdk_session.auth_manager import AuthManager
from sdk_session.client_config import ClientConfig, load_config, save_config
from sdk_session.http_client import HttpTransport


class ClientConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "sdk-session.json")

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_missing_file_gives_defaults(self) -> None:
        config = load_config(self.path, environ={})
        self.assertEqual(config, ClientConfig())
        self.assertEqual(config.environment, "_")
        self.assertEqual(config.refresh_interval, 10.0)
        self.assertEqual(config.refresh_threshold, 30.0)

    def test_reads_file_and_ignores_unknown_keys(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"url": "https://api.example.com", "environment": "staging", "colour": "blue"}, f)
        config = load_config(self.path, environ={})
        self.assertEqual(config.url, "https://api.example.com")
        self.assertEqual(config.environment, "staging")

    def test_invalid_json_gives_defaults(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertLogs("sdk_session.client_config", level="WARNING"):
            config = load_config(self.path, environ={})
        self.assertEqual(config, ClientConfig())

    def test_environment_overrides_file(self) -> None:
        save_config(self.path, ClientConfig(url="https://file.example.com", timeout=9))
        config = load_config(
            self.path,
            environ={"SDK_URL": "https://env.example.com", "SDK_ENV": "prod", "SDK_TIMEOUT": "2.5"},
        )
        self.assertEqual(config.url, "https://env.example.com")
        self.assertEqual(config.environment, "prod")
        self.assertEqual(config.timeout, 2.5)

    def test_invalid_timeout_override_is_ignored(self) -> None:
        save_config(self.path, ClientConfig(timeout=9))
        with self.assertLogs("sdk_session.client_config", level="WARNING"):
            config = load_config(self.path, environ={"SDK_TIMEOUT": "soon"})
        self.assertEqual(config.timeout, 9)

    def test_manager_from_config(self) -> None:
        config = ClientConfig(
            url="https://api.example.com",
            environment="e",
            timeout=7,
            refresh_interval=5,
            refresh_threshold=60,
        )
        manager = AuthManager.from_config(config)
        self.assertEqual(manager.url, "https://api.example.com")
        self.assertEqual(manager.environment, "e")
        self.assertEqual(manager.refresh_threshold, timedelta(seconds=60))
        self.assertIsInstance(manager.transport, HttpTransport)
        self.assertEqual(manager.transport.timeout, 7)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
