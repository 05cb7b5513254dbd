#!/usr/bin/env python3
import os

import uvicorn

from app import LOG_FILE, LOG_JSON, LOG_LEVEL, app
from logs import configure_logging, get_logger

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "3001"))


def main():
    configure_logging(level=LOG_LEVEL, log_json=LOG_JSON, log_file=LOG_FILE or None)
    get_logger("server").info("starting", url=f"http://{HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)


if __name__ == "__main__":
    main()
