import logging
import os
import sys


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True  # If no namespaces are specified, allow all records
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def parse_namespaces(raw: str | None) -> list[str]:
    """Splits a comma separated namespace list, e.g. "webshop.features.reports,webshop.main"."""
    if not raw:
        return []
    return [ns.strip() for ns in raw.split(",") if ns.strip()]


def configure_logging() -> logging.Logger:
    """
    Attaches the stdout handler to the "webshop" logger.

    Modules log through logging.getLogger(__name__), so every logger below
    "webshop" inherits this handler and level. Calling this twice does not
    add a second handler.
    """
    app_logger = logging.getLogger("webshop")
    app_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    if any(getattr(h, "_webshop_console", False) for h in app_logger.handlers):
        return app_logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler._webshop_console = True

    # Only let records from these namespaces through, e.g.
    # LOG_NAMESPACES="webshop.features.reports,webshop.main"
    allowed = parse_namespaces(os.getenv("LOG_NAMESPACES"))
    if allowed:
        console_handler.addFilter(NamespaceFilter(allowed))

    app_logger.addHandler(console_handler)

    # Report generation logs row counts at DEBUG
    reports_level = os.getenv("REPORTS_LOG_LEVEL")
    if reports_level:
        logging.getLogger("webshop.features.reports").setLevel(reports_level.upper())

    # sh = logging.StreamHandler(sys.stdout)
    # # will print debug sql
    # logging.getLogger("tortoise.db_client").setLevel(logging.DEBUG)
    return app_logger
