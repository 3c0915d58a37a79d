#!/usr/bin/env python3
"""
Script to run the bookstore API server.
"""

import sys
from pathlib import Path

import uvicorn

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from api.main import create_app
from utilities.config import load_config
from utilities.logger import get_logger, setup_logging


def main():
    """Run the API server."""
    config = load_config()
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )

    logger = get_logger(__name__)
    logger.info(
        "Starting bookstore API server",
        host=config.host,
        port=config.port,
        database=config.mongodb_database,
        token_expiry_minutes=config.token_expire_minutes or None
    )

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
