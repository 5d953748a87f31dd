"""
Logging bootstrap. Importing this module configures the root logger once.
"""

import logging
import os

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )


setup_logging()
