"""Unit tests for logging configuration."""

import io
import json

import structlog

from job_taxonomy.observability import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)


class TestConfigureLogging:
    """Tests for configure_logging and run context binding."""

    def teardown_method(self) -> None:
        """Restore structlog defaults."""
        clear_run_context()
        structlog.reset_defaults()

    def test_json_output_includes_run_context(self) -> None:
        """Should render JSON lines carrying the bound run context."""
        stream = io.StringIO()
        configure_logging(output=stream, json_format=True)

        bind_run_context("run-123", "Data Analyst")
        structlog.get_logger().info("designation_classified", categories=3)

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "designation_classified"
        assert record["run_id"] == "run-123"
        assert record["designation"] == "Data Analyst"
        assert record["level"] == "info"

    def test_clear_run_context(self) -> None:
        """Should drop run context once cleared."""
        stream = io.StringIO()
        configure_logging(output=stream, json_format=True)

        bind_run_context("run-123")
        clear_run_context()
        structlog.get_logger().info("classify_complete")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert "run_id" not in record

    def test_level_filters_debug(self) -> None:
        """Should drop messages below the configured level."""
        stream = io.StringIO()
        configure_logging(output=stream, json_format=True)

        structlog.get_logger().debug("retry_attempt_failed")

        assert stream.getvalue() == ""
