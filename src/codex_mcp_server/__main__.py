import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from codex_mcp_server.app_config import load_json_config, parse_app_config
from codex_mcp_server.bootstrap import bootstrap_runtime


async def main() -> None:
    load_dotenv()

    app = parse_app_config(load_json_config())
    runtime = bootstrap_runtime(app)

    logger.info(
        "Tools: {tools}",
        tools=", ".join(t.name for t in runtime.tools),
    )
    if runtime.log_descriptions:
        logger.info("Logging: {sinks}", sinks=", ".join(runtime.log_descriptions))

    await runtime.server.run_stdio()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception as ex:
        logger.error(f"Failed to start server: {ex}")
        sys.exit(1)


if __name__ == "__main__":
    run()
