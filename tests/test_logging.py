import json
import logging

from app.core.logging import DevelopmentFormatter, LogContext, StructuredFormatter, get_logger

logger = get_logger("tests")


def test_logger_names_are_namespaced():
    assert logger.name == "dashboard.tests"


def test_context_fields_attach_and_nest(caplog):
    caplog.set_level(logging.INFO, logger="dashboard")

    with LogContext(collection="products"):
        with LogContext(record_id="product_1"):
            logger.info("inner")
        logger.info("outer")
    logger.info("after")

    inner, outer, after = caplog.records[-3:]
    assert (inner.collection, inner.record_id) == ("products", "product_1")
    assert outer.collection == "products"
    assert not hasattr(outer, "record_id")
    assert not hasattr(after, "collection")


def test_structured_formatter_includes_context(caplog):
    caplog.set_level(logging.INFO, logger="dashboard")
    with LogContext(uid="admin123"):
        logger.info("signed in")

    entry = json.loads(StructuredFormatter().format(caplog.records[-1]))
    assert entry["message"] == "signed in"
    assert entry["uid"] == "admin123"
    assert entry["logger"] == "dashboard.tests"


def test_development_formatter_lists_context(caplog):
    caplog.set_level(logging.INFO, logger="dashboard")
    with LogContext(collection="users", record_id="user456"):
        logger.warning("slow")

    line = DevelopmentFormatter().format(caplog.records[-1])
    assert "dashboard.tests: slow" in line
    assert line.endswith("[collection=users, record_id=user456]")
