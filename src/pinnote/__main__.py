"""Run the pinnote service: python -m pinnote"""

import logging

import uvicorn

from pinnote.config import load_config

config = load_config()
logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
uvicorn.run("pinnote.app:create_app", host=config.host, port=config.port, factory=True)
