import asyncio
import unittest

from codex_mcp_server.app_config import parse_app_config
from codex_mcp_server.bootstrap import bootstrap_runtime

_EXPECTED_TOOLS = [
    "listTools",
    "codex",
    "listSessions",
    "sessionStats",
    "deleteSession",
    "help",
    "listModels",
    "resume",
    "ping",
]


class BootstrapTests(unittest.TestCase):
    def test_registers_full_catalogue(self) -> None:
        runtime = bootstrap_runtime(parse_app_config({}, environ={}), configure_logging=False)
        self.assertEqual(_EXPECTED_TOOLS, [t.name for t in runtime.tools])
        self.assertEqual(_EXPECTED_TOOLS, runtime.server.tool_names)
        self.assertEqual([], runtime.log_descriptions)

    def test_resume_can_be_disabled(self) -> None:
        runtime = bootstrap_runtime(parse_app_config({"EnableResume": False}, environ={}), configure_logging=False)
        self.assertNotIn("resume", [t.name for t in runtime.tools])

    def test_config_reaches_components(self) -> None:
        app = parse_app_config(
            {"SessionTtlMinutes": 5, "CommandTimeoutMs": 4000}, environ={}
        )
        runtime = bootstrap_runtime(app, configure_logging=False)
        self.assertEqual(300, runtime.sessions.ttl.total_seconds())
        self.assertEqual(4.0, runtime.runner.timeout_seconds)

    def test_codex_call_round_trip_through_server(self) -> None:
        runtime = bootstrap_runtime(parse_app_config({}, environ={}), configure_logging=False)
        result = asyncio.run(runtime.server.call_tool("codex", {}))
        self.assertTrue(result.isError)
        self.assertIn("prompt", result.content[0].text)
