"""Tests for logging infrastructure."""
import io
import json
import logging

import pytest

from dutyrota.models.schedule import ScheduleRequest
from dutyrota.solver.allocator import generate_schedule, preview_schedule
from dutyrota.utils.logging_setup import (
    TRACE,
    RunLogger,
    get_logger,
    log_check,
    log_function_call,
    parse_level,
    setup_logging,
    verbosity_to_level,
)
from dutyrota.utils.structured_logging import (
    bind_context,
    bound_context,
    clear_context,
    configure_structlog,
    get_structured_logger,
)

from conftest import TUESDAY


class TestLoggingSetup:
    """Tests for logging configuration."""

    @pytest.fixture(autouse=True)
    def _detach_handlers(self):
        yield
        logger = logging.getLogger("dutyrota")
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    def test_file_and_console_handlers(self, tmp_path):
        logger = setup_logging(level="DEBUG", log_file=str(tmp_path / "run.log"))

        assert logger.name == "dutyrota"
        assert [type(h).__name__ for h in logger.handlers] == ["StreamHandler", "RotatingFileHandler"]

    def test_log_file_created_with_parent_dirs(self, tmp_path):
        log_file = tmp_path / "logs" / "nested" / "run.log"
        logger = setup_logging(level="DEBUG", log_file=str(log_file), console_level="ERROR")
        get_logger("dutyrota.solver.allocator").info("run_started unit=U1")
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "run_started unit=U1" in text
        assert "dutyrota.solver.allocator" in text

    def test_setup_logging_no_file(self):
        logger = setup_logging(level="INFO", log_file=None)
        assert len(logger.handlers) == 1  # Console only

    def test_bad_level_falls_back_to_info(self):
        logger = setup_logging(level="LOUD")
        assert logger.handlers[0].level == logging.INFO

    def test_custom_stream(self):
        stream = io.StringIO()
        logger = setup_logging(level="INFO", stream=stream)
        logger.getChild("solver").warning("Cleared 2 existing duty slots")
        assert "Cleared 2 existing duty slots" in stream.getvalue()
        assert "\033[" not in stream.getvalue()

    def test_repeat_setup_replaces_handlers(self):
        setup_logging(level="INFO")
        logger = setup_logging(level="INFO")
        assert len(logger.handlers) == 1

    @pytest.mark.parametrize("level,expected", [
        ("debug", logging.DEBUG), ("TRACE", TRACE), (logging.ERROR, logging.ERROR), (None, logging.INFO),
    ])
    def test_parse_level(self, level, expected):
        assert parse_level(level) == expected

    @pytest.mark.parametrize("verbose,expected", [(0, "WARNING"), (1, "INFO"), (2, "DEBUG"), (3, "TRACE"), (9, "TRACE")])
    def test_verbosity_to_level(self, verbose, expected):
        assert verbosity_to_level(verbose) == expected

    def test_trace_level(self):
        assert TRACE == 5
        assert logging.getLevelName(TRACE) == "TRACE"

    def test_get_logger(self):
        assert get_logger("dutyrota.solver").name == "dutyrota.solver"


class TestLogFunctionCall:
    """Tests for function call decorator."""

    def test_decorator_traces_call_and_result(self, caplog):
        @log_function_call
        def count_slots(day, duty_type_id=None):
            return 3

        with caplog.at_level(TRACE):
            assert count_slots("2025-01-14", duty_type_id="DT1") == 3

        assert "→ count_slots('2025-01-14', duty_type_id='DT1')" in caplog.text
        assert "← count_slots returned: 3" in caplog.text

    def test_long_arguments_are_truncated(self, caplog):
        @log_function_call
        def load(rows):
            return len(rows)

        with caplog.at_level(TRACE):
            load(list(range(500)))
        entry = caplog.records[0].getMessage()
        assert entry.endswith("…)")
        assert len(entry) < 80

    def test_decorator_logs_and_reraises(self, caplog):
        @log_function_call
        def load():
            raise FileNotFoundError("units.csv")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(FileNotFoundError):
                load()
        assert "✖ load raised: FileNotFoundError: units.csv" in caplog.text

    def test_decorator_keeps_metadata(self):
        @log_function_call
        def build_context():
            """Index slots by date."""

        assert build_context.__name__ == "build_context"
        assert build_context.__doc__ == "Index slots by date."


class TestLogCheck:

    def test_passed_check_is_trace(self, caplog):
        logger = logging.getLogger("test.checks")
        with caplog.at_level(TRACE):
            log_check(logger, "same_day", True, "P1 on 2025-01-14")
        record = caplog.records[-1]
        assert record.levelno == TRACE
        assert "[✓] same_day: P1 on 2025-01-14" in caplog.text

    def test_failed_check_is_debug(self, caplog):
        logger = logging.getLogger("test.checks")
        with caplog.at_level(logging.DEBUG):
            log_check(logger, "qualifications", False)
        assert caplog.records[-1].levelno == logging.DEBUG
        assert "[✗] qualifications" in caplog.text


class TestRunLogger:

    def test_phase_logging(self, caplog):
        rlog = RunLogger("test.run")
        with caplog.at_level(logging.INFO):
            rlog.phase("Duty allocation")
        assert "Duty allocation" in caplog.text
        assert "=" in caplog.text

    def test_step_logging(self, caplog):
        rlog = RunLogger("test.run")
        with caplog.at_level(logging.INFO):
            rlog.step("Building context")
        assert "▸ Building context" in caplog.text

    def test_scope_indents_and_summarizes(self, caplog):
        rlog = RunLogger("test.run")
        with caplog.at_level(logging.DEBUG):
            with rlog.scope("2025-01-14", summary=lambda: "2 created"):
                rlog.detail("candidates", 5)
                assert rlog.depth == 1

        assert "┌─ 2025-01-14" in caplog.text
        assert "    candidates: 5" in caplog.text
        assert "└─ 2 created" in caplog.text
        assert rlog.depth == 0

    def test_scope_unwinds_on_error(self):
        rlog = RunLogger("test.run")
        with pytest.raises(RuntimeError):
            with rlog.scope("2025-01-14"):
                raise RuntimeError("boom")
        assert rlog.depth == 0


class TestStructuredLogging:

    @pytest.fixture(autouse=True)
    def _reset(self):
        clear_context()
        yield
        clear_context()
        configure_structlog()

    def test_key_value_output(self, caplog):
        configure_structlog(json_output=False)
        log = get_structured_logger("dutyrota.test")
        with caplog.at_level(logging.INFO):
            log.info("run_started", unit_id="U1", dates=3)
        assert "event='run_started'" in caplog.text
        assert "unit_id='U1'" in caplog.text

    def test_json_output_includes_bound_context(self, caplog):
        configure_structlog(json_output=True)
        log = get_structured_logger("dutyrota.test")
        bind_context(run_id="abc123")
        with caplog.at_level(logging.INFO):
            log.info("run_finished", created=4)

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "run_finished"
        assert payload["run_id"] == "abc123"
        assert payload["created"] == 4

    def test_bound_context_is_scoped(self, caplog):
        configure_structlog(json_output=True)
        log = get_structured_logger("dutyrota.test")
        with caplog.at_level(logging.INFO):
            with bound_context(mode="preview"):
                log.info("inside")
            log.info("outside")

        inside, outside = [json.loads(r.getMessage()) for r in caplog.records[-2:]]
        assert inside["mode"] == "preview"
        assert "mode" not in outside

    def test_filtered_below_level(self, caplog):
        configure_structlog()
        log = get_structured_logger("dutyrota.test.quiet")
        logging.getLogger("dutyrota.test.quiet").setLevel(logging.WARNING)
        with caplog.at_level(logging.DEBUG):
            log.info("not_shown")
        assert "not_shown" not in caplog.text

    def test_allocation_run_logs_summary(self, roster, config, caplog):
        request = ScheduleRequest(unit_id="U1", start_date=TUESDAY, end_date=TUESDAY, assigned_by="admin")
        with caplog.at_level(logging.INFO):
            generate_schedule(roster, request, config)

        assert "run_finished" in caplog.text
        assert "Duty allocation (apply)" in caplog.text

    def test_reconfiguration_reaches_module_loggers(self, roster, config, caplog):
        request = ScheduleRequest(unit_id="U1", start_date=TUESDAY, end_date=TUESDAY, assigned_by="admin")
        with caplog.at_level(logging.INFO):
            configure_structlog(json_output=False)
            preview_schedule(roster, request, config)
            configure_structlog(json_output=True)
            preview_schedule(roster, request, config)

        finished = [r.getMessage() for r in caplog.records if "run_finished" in r.getMessage()]
        assert len(finished) == 2
        assert finished[0].startswith("event='run_finished'")
        payload = json.loads(finished[1])
        assert payload["event"] == "run_finished"
        assert payload["mode"] == "preview"
