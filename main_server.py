"""
jpanki: HTTP server
-------------------

Serves the card generation API and the generated media.

Usage:
    python main_server.py
"""

import uvicorn

from jpanki.api import create_app
from jpanki.config import Config
from jpanki.utils import setup_logger

logger = setup_logger()


def main() -> None:
    app = create_app()
    logger.info("Server running at http://%s:%s", Config.HOST, Config.PORT)
    uvicorn.run(app, host=Config.HOST, port=Config.PORT, log_level=Config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
