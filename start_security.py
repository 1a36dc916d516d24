#!/usr/bin/env python3
"""Entry point for the Cat Security system."""

import argparse
import os
import sys

from cat_security_system.config_manager import ConfigManager
from cat_security_system.logging_config import get_logger, setup_logging
from cat_security_system.web.app import SecurityWebApp, create_service


def main(argv=None):
    """Load configuration, build the security service and serve the web API."""
    parser = argparse.ArgumentParser(description="Cat Security System")
    parser.add_argument("--config", default=None, help="Path to the JSON configuration file")
    args = parser.parse_args(argv)

    config_manager = ConfigManager(args.config)
    config = config_manager.get_config()

    # Logging settings come from the config, so check it first
    if not config_manager.validate_config():
        setup_logging("INFO", None)
        get_logger("start_security").error(f"Invalid configuration in {config_manager.config_path}")
        return 1

    setup_logging(config.log_level, config.log_dir)
    logger = get_logger("start_security")
    logger.info("Starting Cat Security System")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Working directory: {os.getcwd()}")

    try:
        service = create_service(config_manager)
    except Exception as e:
        logger.error(f"Security service failed to start: {e}")
        return 1

    web_app = SecurityWebApp(service, config_manager)
    try:
        web_app.run(host=config.web_host, port=config.web_port)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")

    return 0


if __name__ == "__main__":
    sys.exit(main())
