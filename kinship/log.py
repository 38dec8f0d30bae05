import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging once at startup.

    Args:
        level: Name of the root log level (e.g. "INFO")
    """
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # The driver logs every routed query at DEBUG
    logging.getLogger("neo4j").setLevel("INFO" if level == "DEBUG" else level)
