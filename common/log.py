import logging

from quart import Quart

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(app: Quart, level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler()
        ]
    )
    # when served by hypercorn, log through its handlers
    hypercorn_logger = logging.getLogger('hypercorn.error')
    if hypercorn_logger.handlers:
        app.logger.handlers = hypercorn_logger.handlers
    app.logger.setLevel(level)
