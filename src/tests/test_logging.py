import logging
import pytest
from unittest.mock import MagicMock

from webshop.core.logging_config import NamespaceFilter, configure_logging, parse_namespaces

MANAGED_LOGGERS = [
    "webshop", "webshop.features.orders", "webshop.features.reports",
    "webshop.features.reports.service", "webshop.features.inventory.service", "webshop.main",
]


def _reset_loggers():
    for logger_name in MANAGED_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.handlers = []
        logger.filters = []
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def logging_env():
    """
    A mock handler that applies its filters and keeps the records it accepts.
    Loggers are reset before and after each test.
    """
    test_handler = MagicMock()
    test_handler.level = logging.NOTSET
    test_handler.filters = []

    accepted_records = []

    def handle(record):
        if all(f.filter(record) for f in test_handler.filters):
            accepted_records.append(record)
            return True
        return False

    test_handler.addFilter = MagicMock(side_effect=test_handler.filters.append)
    test_handler.handle = MagicMock(side_effect=handle)
    test_handler.accepted_records = accepted_records

    _reset_loggers()
    yield test_handler
    _reset_loggers()


def _setup_logger(name, level, handler_to_add):
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers = [handler_to_add]
    return logger


def get_handled_messages(test_handler: MagicMock) -> list[str]:
    return [
        f"{record.name}:{record.levelname}:{record.getMessage()}"
        for record in test_handler.accepted_records
    ]


def test_default_level_propagation(logging_env):
    _setup_logger("webshop", logging.INFO, logging_env)

    orders_logger = logging.getLogger("webshop.features.orders")
    reports_logger = logging.getLogger("webshop.features.reports.service")

    orders_logger.debug("Order debug message")
    orders_logger.info("Order info message")
    reports_logger.info("Generated monthly report")

    handled_messages = get_handled_messages(logging_env)
    assert "webshop.features.orders:DEBUG:Order debug message" not in handled_messages
    assert "webshop.features.orders:INFO:Order info message" in handled_messages
    assert "webshop.features.reports.service:INFO:Generated monthly report" in handled_messages


def test_reports_debug_override(logging_env):
    """Row counts logged at DEBUG by the report service show up once its namespace is lowered."""
    _setup_logger("webshop", logging.INFO, logging_env)
    logging.getLogger("webshop.features.reports").setLevel(logging.DEBUG)

    logging.getLogger("webshop.features.reports.service").debug("Fetched 3 orders")
    logging.getLogger("webshop.features.inventory.service").debug("Inventory log entry")

    handled_messages = get_handled_messages(logging_env)
    assert "webshop.features.reports.service:DEBUG:Fetched 3 orders" in handled_messages
    assert "webshop.features.inventory.service:DEBUG:Inventory log entry" not in handled_messages


def test_namespace_filter_allow(logging_env):
    _setup_logger("webshop", logging.DEBUG, logging_env)
    logging_env.addFilter(NamespaceFilter(allowed_namespaces=["webshop.features.reports"]))

    logging.getLogger("webshop.features.reports.service").info("Report message")
    logging.getLogger("webshop.features.inventory.service").info("Inventory message")
    logging.getLogger("webshop.main").info("Main app message")

    handled_messages = get_handled_messages(logging_env)
    assert handled_messages == ["webshop.features.reports.service:INFO:Report message"]


def test_namespace_filter_allow_all_if_empty(logging_env):
    _setup_logger("webshop", logging.DEBUG, logging_env)
    logging_env.addFilter(NamespaceFilter(allowed_namespaces=[]))

    logging.getLogger("webshop.features.orders").info("Order message")
    logging.getLogger("webshop.main").info("Main message")

    assert len(get_handled_messages(logging_env)) == 2


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, []),
        ("", []),
        ("webshop.features.reports", ["webshop.features.reports"]),
        (" webshop.main , ,webshop.features.orders ", ["webshop.main", "webshop.features.orders"]),
    ],
)
def test_parse_namespaces(raw, expected):
    assert parse_namespaces(raw) == expected


def test_configure_logging_attaches_one_handler(monkeypatch, logging_env):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_NAMESPACES", "webshop.features.reports")
    monkeypatch.setenv("REPORTS_LOG_LEVEL", "debug")

    app_logger = configure_logging()
    configure_logging()

    console_handlers = [h for h in app_logger.handlers if getattr(h, "_webshop_console", False)]
    assert len(console_handlers) == 1
    assert app_logger.level == logging.WARNING
    assert any(isinstance(f, NamespaceFilter) for f in console_handlers[0].filters)
    assert logging.getLogger("webshop.features.reports").level == logging.DEBUG
