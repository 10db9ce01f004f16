"""Tests for the update_prices command-line script."""

import threading
from decimal import Decimal
from unittest.mock import patch

import pytest

from models import Security
from scripts.update_prices import EXIT_CODES, main, update_prices
from services.batch_session import BatchSession, RunHandle
from services.price_update_service import RunStatus
from tests.fixtures import get_or_create_security


@pytest.fixture
def script_session(db, price_service):
    return BatchSession(service=price_service, session_factory=lambda: db)


class TestUpdatePrices:
    def test_updates_given_symbols(self, db, script_session, capsys):
        code = update_prices(["AAPL", "VOD.L"], session_factory=lambda: db, batch_session=script_session)

        assert code == 0
        assert db.query(Security).filter_by(ticker="VOD.L").one().current_price == Decimal("0.725")
        out = capsys.readouterr().out
        assert "Updating prices for 2 securities" in out
        assert "  2/2" in out
        assert "Done: 2 of 2 prices updated" in out

    def test_defaults_to_all_securities(self, db, script_session, quote_source):
        get_or_create_security(db, "MSFT")
        get_or_create_security(db, "AAPL")
        db.commit()

        code = update_prices(session_factory=lambda: db, batch_session=script_session)

        assert code == 0
        assert quote_source.fetched == ["MS:AAPL", "MS:MSFT"]

    def test_no_securities(self, db, script_session, capsys):
        code = update_prices(session_factory=lambda: db, batch_session=script_session)

        assert code == 0
        assert "No securities to update" in capsys.readouterr().out

    def test_store_failure_exit_code(self, db, script_session, capsys):
        with patch.object(db, "commit", side_effect=RuntimeError("disk full")):
            code = update_prices(["AAPL"], session_factory=lambda: db, batch_session=script_session)

        assert code == EXIT_CODES[RunStatus.FAILED] == 1
        assert "Failed after 0 of 1 prices: disk full" in capsys.readouterr().out

    def test_interrupt_cancels_run(self, db, script_session, quote_source, capsys):
        gate = threading.Event()
        # Hold the worker so the batch is still queued when Ctrl-C arrives
        script_session._executor.submit(gate.wait, 5)
        real_wait = RunHandle.wait
        calls = []

        def wait(handle, timeout=None):
            calls.append(handle.run.cancelled)
            if len(calls) == 1:
                raise KeyboardInterrupt
            gate.set()
            return real_wait(handle, timeout)

        with patch.object(RunHandle, "wait", wait):
            code = update_prices(["AAPL", "MSFT"], session_factory=lambda: db, batch_session=script_session)

        assert code == EXIT_CODES[RunStatus.CANCELLED] == 130
        assert calls == [False, True]
        assert quote_source.fetched == []
        out = capsys.readouterr().out
        assert "Cancelling after the current symbol" in out
        assert "Cancelled: 0 of 2 prices updated" in out


class TestMain:
    def test_uppercases_symbols_and_exits(self):
        with patch("scripts.update_prices.setup_logging") as mock_logging, \
                patch("scripts.update_prices.init_db"), \
                patch("scripts.update_prices.update_prices", return_value=0) as mock_update:
            with pytest.raises(SystemExit) as exc_info:
                main(["aapl", "vod.l"])

        assert exc_info.value.code == 0
        mock_update.assert_called_once_with(["AAPL", "VOD.L"])
        mock_logging.assert_called_once_with(None)

    def test_verbose_enables_debug_logging(self):
        with patch("scripts.update_prices.setup_logging") as mock_logging, \
                patch("scripts.update_prices.init_db"), \
                patch("scripts.update_prices.update_prices", return_value=0) as mock_update:
            with pytest.raises(SystemExit):
                main(["-v", "AAPL"])

        mock_logging.assert_called_once_with("DEBUG")
        mock_update.assert_called_once_with(["AAPL"])

    def test_no_arguments_updates_everything(self):
        with patch("scripts.update_prices.setup_logging"), \
                patch("scripts.update_prices.init_db"), \
                patch("scripts.update_prices.update_prices", return_value=130) as mock_update:
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 130
        mock_update.assert_called_once_with([])
