import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Configures the root logger for the service.

    :param level: Log level name or number.
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
