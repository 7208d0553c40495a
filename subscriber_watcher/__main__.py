"""Entry point: ``python -m subscriber_watcher [config.yaml]``."""

import logging
import sys

import uvicorn

from subscriber_watcher.app import create_app
from subscriber_watcher.config import Config
from subscriber_watcher.exceptions import ConfigError
from subscriber_watcher.logging_setup import setup_logging


def main() -> None:
    path = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        config = Config.from_yaml(path)
    except ConfigError as e:
        setup_logging()
        logging.getLogger(__name__).critical(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(config.log_level, config.log_path)
    app = create_app(config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
