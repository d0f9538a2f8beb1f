"""Single entry point: starts the Pitch room server.

Usage:
    python3 run.py

Environment variables (all optional):
    FLASK_PORT         port for the web server              (default 3000)
    FLASK_HOST         bind address                         (default 0.0.0.0)
    FLASK_DEBUG        1 = enable Flask reloader            (default 0)
    ROOM_STORE         memory | postgres                    (default memory)
    LOG_LEVEL          logging level                        (default INFO)
    GAME_LOG_DIR       directory for per-room move logs     (default off)
"""

import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import config
from app import app as web_app


def main():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    web_app.run(host=config.FLASK_HOST, port=config.FLASK_PORT, debug=config.FLASK_DEBUG)


if __name__ == '__main__':
    main()
