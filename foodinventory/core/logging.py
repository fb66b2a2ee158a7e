import logging
import os

ROOT = "foodinventory"
FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    if name == "WARN":
        name = "WARNING"
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging() -> logging.Logger:
    """Attach handlers to the package logger once; module loggers propagate to it.

    LOG_LEVEL sets the level (default INFO). LOG_FILE, when set, receives a copy
    of everything written to the console.
    """
    root = logging.getLogger(ROOT)
    if root.handlers:
        return root

    root.setLevel(_level_from_env())
    formatter = logging.Formatter(FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            root.warning("LOG_FILE %s not writable (%s), console only", log_file, e)
        else:
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    # Records stop here; the process root logger belongs to uvicorn
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"{ROOT}.{name}")
