import logging

# Libraries that log every decoded chunk or fetched URL at DEBUG/INFO
NOISY_LIBRARIES = ("PIL", "httpx", "httpcore")


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger for the API server and scripts.

    Attaches a single StreamHandler, applies the level (unknown names fall
    back to INFO) and keeps Pillow/httpx at WARNING unless debugging.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root.addHandler(handler)

    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO
    root.setLevel(level_value)

    library_level = logging.DEBUG if level_value <= logging.DEBUG else logging.WARNING
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str) -> logging.Logger:
    """Module logger; initializes logging on first use."""
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
