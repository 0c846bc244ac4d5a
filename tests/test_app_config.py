import json
import tempfile
import unittest
from pathlib import Path

from codex_mcp_server.app_config import load_json_config, parse_app_config


class AppConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        app = parse_app_config({}, environ={})
        self.assertEqual("codex", app.codex_executable)
        self.assertEqual(180.0, app.command_timeout_seconds)
        self.assertEqual(40_000, app.default_page_size)
        self.assertEqual(1_000, app.min_page_size)
        self.assertEqual(200_000, app.max_page_size)
        self.assertEqual(24 * 60, app.session_ttl_minutes)
        self.assertEqual(10, app.cursor_ttl_minutes)
        self.assertEqual(500, app.max_sessions)
        self.assertIsNone(app.default_model)
        self.assertTrue(app.enable_resume)
        self.assertTrue(app.echo_page_token)
        self.assertEqual("INFO", app.log_level)

    def test_environment_overrides_config(self) -> None:
        app = parse_app_config(
            {"CommandTimeoutMs": 1000, "PageSize": 5000, "DefaultModel": "from-config"},
            environ={
                "CODEX_CMD_TIMEOUT_MS": "2500",
                "CODEX_PAGE_SIZE": "8000",
                "CODEX_DEFAULT_MODEL": "from-env",
                "CODEX_EXECUTABLE": "/usr/local/bin/codex",
            },
        )
        self.assertEqual(2.5, app.command_timeout_seconds)
        self.assertEqual(8000, app.default_page_size)
        self.assertEqual("from-env", app.default_model)
        self.assertEqual("/usr/local/bin/codex", app.codex_executable)

    def test_invalid_environment_values_fall_back(self) -> None:
        app = parse_app_config(
            {"CommandTimeoutMs": 1000},
            environ={"CODEX_CMD_TIMEOUT_MS": "soon", "CODEX_PAGE_SIZE": "-3"},
        )
        self.assertEqual(1.0, app.command_timeout_seconds)
        self.assertEqual(40_000, app.default_page_size)

    def test_debug_env_sets_log_level(self) -> None:
        self.assertEqual("DEBUG", parse_app_config({"LogLevel": "WARNING"}, environ={"DEBUG": "1"}).log_level)
        self.assertEqual("WARNING", parse_app_config({"LogLevel": "WARNING"}, environ={}).log_level)

    def test_boolean_strings(self) -> None:
        app = parse_app_config({"EnableResume": "false", "EchoPageTokenInContent": "no"}, environ={})
        self.assertFalse(app.enable_resume)
        self.assertFalse(app.echo_page_token)

    def test_load_json_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            self.assertEqual({}, load_json_config(path))
            path.write_text(json.dumps({"PageSize": 1234}), encoding="utf-8")
            self.assertEqual({"PageSize": 1234}, load_json_config(path))
