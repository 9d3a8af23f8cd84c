"""Tests for log file setup: per-run file, delivery log and pruning."""

import logging

import pytest

from tourmail.logging_config import DELIVERY_FILE, NAMESPACE, configure_logging


@pytest.fixture
def app_logger(monkeypatch):
    monkeypatch.delenv("DEV_MODE", raising=False)
    logger = logging.getLogger(NAMESPACE)
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def flush(logger):
    for handler in logger.handlers:
        handler.flush()


def test_delivery_lines_go_to_delivery_log(tmp_config, app_logger):
    run_file = configure_logging(tmp_config)

    logging.getLogger("tourmail.dispatch").info("Sent  recipient=a@example.com template=welcome")
    logging.getLogger("tourmail.processor").warning("No recipient  trigger=t1 field=email id=r1")
    logging.getLogger("tourmail.store").info("Saved  emailTemplates/welcome")
    logging.getLogger("tourmail.dispatch").debug("payload built")
    flush(app_logger)

    delivery = (tmp_config.log_dir / DELIVERY_FILE).read_text()
    assert "[dispatch" in delivery
    assert "recipient=a@example.com" in delivery
    assert "No recipient  trigger=t1" in delivery
    assert "emailTemplates/welcome" not in delivery
    assert "payload built" not in delivery

    run_log = run_file.read_text()
    assert "recipient=a@example.com" in run_log
    assert "emailTemplates/welcome" in run_log


def test_quiet_run_log_still_records_deliveries(tmp_config, app_logger):
    tmp_config.set("logging.level", "WARNING", save=False)
    run_file = configure_logging(tmp_config)

    logging.getLogger("tourmail.dispatch").info("Sent  recipient=b@example.com template=welcome")
    flush(app_logger)

    assert "b@example.com" in (tmp_config.log_dir / DELIVERY_FILE).read_text()
    assert "b@example.com" not in run_file.read_text()


def test_run_logs_pruned_but_delivery_log_kept(tmp_config, app_logger):
    tmp_config.set("logging.keep", 2, save=False)
    (tmp_config.log_dir / DELIVERY_FILE).write_text("history\n")
    for day in ("01", "02", "03"):
        (tmp_config.log_dir / f"2026-03-{day}_080000.log").write_text("")

    run_file = configure_logging(tmp_config)

    remaining = sorted(p.name for p in tmp_config.log_dir.glob("*.log"))
    assert remaining == sorted(["2026-03-03_080000.log", run_file.name, DELIVERY_FILE])
    assert (tmp_config.log_dir / DELIVERY_FILE).read_text().startswith("history")


def test_reconfigure_replaces_handlers(tmp_config, app_logger):
    configure_logging(tmp_config)
    configure_logging(tmp_config)
    assert len(app_logger.handlers) == 2
    assert app_logger.propagate is False
