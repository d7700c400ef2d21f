import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from print_agent.env import AGENT_HOST, AGENT_PORT, LOG_FILE, LOG_LEVEL
from print_agent.lifecycle import ServiceController

logger = logging.getLogger("print_agent")


def configure_logging():
    handlers = [logging.FileHandler(LOG_FILE, encoding="utf-8")] if LOG_FILE else None
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )


def build_server(app: Optional[FastAPI] = None) -> uvicorn.Server:
    if app is None:
        from print_agent.api import create_app
        app = create_app()
    # log_config=None leaves uvicorn's loggers to our basicConfig
    config = uvicorn.Config(app, host=AGENT_HOST, port=AGENT_PORT, log_config=None)
    return uvicorn.Server(config)


def main():
    configure_logging()
    controller = ServiceController(build_server())
    logger.info("Listening on %s:%s", AGENT_HOST, AGENT_PORT)
    controller.run()


if __name__ == "__main__":
    main()
