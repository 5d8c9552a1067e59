"""
Unit tests for background analysis and debounced validation.
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from services.pattern_builder_service.app.patterns.configuration import PatternConfiguration
from services.pattern_builder_service.app.tokenizer.tokenizer import FilenameTokenizer
from services.pattern_builder_service.app.validation.models import ValidationErrorType
from services.pattern_builder_service.app.validation.sample_validator import SampleValidator
from services.pattern_builder_service.app.worker import (
    ANALYSIS_TASK,
    AnalysisTask,
    BackgroundAnalysisService,
    DebouncedValidator,
)


class GatedTokenizer(FilenameTokenizer):
    """Tokenizer that blocks until the test opens the gate."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.gate = threading.Event()

    def tokenize(self, filename):
        self.started.set()
        self.gate.wait(timeout=5)
        return super().tokenize(filename)


@pytest.fixture
def valid_config(default_rules):
    return PatternConfiguration(
        group_pattern=r"^CAM_([A-Z0-9]+)_",
        overview_pattern="(?i).*overview.*",
        front_pattern="(?i).*front.*",
        rear_pattern="(?i).*rear.*",
        role_rules=list(default_rules),
    )


class TestBackgroundAnalysisService:
    """Test suite for BackgroundAnalysisService."""

    def test_analysis(self, distinct_id_filenames):
        """Test a submitted analysis completes with a result."""
        service = BackgroundAnalysisService(FilenameTokenizer())
        try:
            task = service.submit_analysis(distinct_id_filenames)

            analysis = task.result(timeout=5)

            assert task.kind == ANALYSIS_TASK
            assert analysis.file_count == 4
            assert task.done()
            assert not task.cancelled
        finally:
            service.shutdown()

    def test_truncates_large_sample_sets(self, grouped_filenames):
        """Test sample sets are cut to the configured maximum."""
        service = BackgroundAnalysisService(FilenameTokenizer(), max_files=2)
        try:
            task = service.submit_analysis(grouped_filenames)

            assert task.file_count == 2
            assert task.result(timeout=5).filenames == tuple(grouped_filenames[:2])
        finally:
            service.shutdown()

    def test_new_analysis_cancels_previous(self, distinct_id_filenames, grouped_filenames):
        """Test a superseded analysis never publishes a result."""
        tokenizer = GatedTokenizer()
        service = BackgroundAnalysisService(tokenizer)
        try:
            first = service.submit_analysis(distinct_id_filenames)
            assert tokenizer.started.wait(timeout=5)

            second = service.submit_analysis(grouped_filenames)
            tokenizer.gate.set()

            assert first.result(timeout=5) is None
            assert first.cancelled
            assert second.result(timeout=5).file_count == 7
        finally:
            tokenizer.gate.set()
            service.shutdown()

    def test_cancel_all(self, distinct_id_filenames):
        """Test cancelling everything stops a running analysis."""
        tokenizer = GatedTokenizer()
        service = BackgroundAnalysisService(tokenizer)
        try:
            task = service.submit_analysis(distinct_id_filenames)
            assert tokenizer.started.wait(timeout=5)

            service.cancel_all()
            tokenizer.gate.set()

            assert task.result(timeout=5) is None
        finally:
            tokenizer.gate.set()
            service.shutdown()

    def test_preview(self, grouped_filenames, valid_config):
        """Test previews are built in the background."""
        service = BackgroundAnalysisService(FilenameTokenizer(), SampleValidator())
        try:
            task = service.submit_preview(grouped_filenames, valid_config)

            previews, summary = task.result(timeout=5)

            assert len(previews) == 7
            assert summary.matched_files == 7
            assert summary.is_healthy()
        finally:
            service.shutdown()

    def test_preview_uses_configuration_snapshot(self, grouped_filenames, valid_config):
        """Test later edits to a configuration do not affect a submitted preview."""
        tokenizer = GatedTokenizer()
        service = BackgroundAnalysisService(tokenizer)
        try:
            blocker = service.submit_analysis(["CAM_A1_front.jpg"])
            assert tokenizer.started.wait(timeout=5)

            task = service.submit_preview(grouped_filenames, valid_config)
            valid_config.group_pattern = r"^NOPE_(\d+)"
            tokenizer.gate.set()

            _, summary = task.result(timeout=5)
            assert summary.matched_files == 7
            assert blocker.result(timeout=5) is not None
        finally:
            tokenizer.gate.set()
            service.shutdown()

    def test_kinds_do_not_cancel_each_other(self, grouped_filenames, valid_config):
        """Test an analysis and a preview can run side by side."""
        service = BackgroundAnalysisService(FilenameTokenizer())
        try:
            analysis_task = service.submit_analysis(grouped_filenames)
            preview_task = service.submit_preview(grouped_filenames, valid_config)

            assert analysis_task.result(timeout=5) is not None
            assert preview_task.result(timeout=5) is not None
        finally:
            service.shutdown()

    def test_shutdown_rejects_new_work(self, distinct_id_filenames):
        """Test nothing can be submitted after shutdown."""
        service = BackgroundAnalysisService(FilenameTokenizer())
        service.shutdown()

        with pytest.raises(RuntimeError):
            service.submit_analysis(distinct_id_filenames)

    def test_task_without_future(self):
        """Test an unsubmitted task has no result."""
        task = AnalysisTask(ANALYSIS_TASK, 0)

        assert task.result() is None
        assert not task.done()


class TestDebouncedValidator:
    """Test suite for DebouncedValidator."""

    def test_burst_runs_once_with_latest_request(self, grouped_filenames, valid_config):
        """Test a burst of requests is validated once using the last one."""
        results = []
        finished = threading.Event()

        def callback(result):
            results.append(result)
            finished.set()

        debouncer = DebouncedValidator(SampleValidator(), callback, delay_ms=50)
        for _ in range(5):
            debouncer.request_validation(PatternConfiguration(), grouped_filenames)
        debouncer.request_validation(valid_config, grouped_filenames)

        assert finished.wait(timeout=5)
        time.sleep(0.2)

        assert len(results) == 1
        assert results[0].is_valid
        assert not debouncer.pending

    def test_flush(self, grouped_filenames, valid_config):
        """Test flushing validates a waiting request immediately."""
        callback = MagicMock()
        debouncer = DebouncedValidator(SampleValidator(), callback, delay_ms=10_000)
        debouncer.request_validation(valid_config, grouped_filenames)

        assert debouncer.pending
        result = debouncer.flush()

        assert result.is_valid
        callback.assert_called_once_with(result)
        assert not debouncer.pending
        assert debouncer.flush() is None

    def test_cancel(self, valid_config):
        """Test cancelling drops a waiting request."""
        callback = MagicMock()
        debouncer = DebouncedValidator(SampleValidator(), callback, delay_ms=10_000)
        debouncer.request_validation(valid_config, [])

        debouncer.cancel()

        assert not debouncer.pending
        assert debouncer.flush() is None
        callback.assert_not_called()

    def test_validator_failure_is_reported(self, valid_config):
        """Test an exception in the validator becomes a failed result."""
        validator = MagicMock()
        validator.validate.side_effect = RuntimeError("boom")
        callback = MagicMock()
        debouncer = DebouncedValidator(validator, callback, delay_ms=10_000)
        debouncer.request_validation(valid_config, [])

        result = debouncer.flush()

        assert not result.is_valid
        assert result.has_error_type(ValidationErrorType.INVALID_RULE_CONFIGURATION)
        assert result.error_messages() == ["Validation failed: boom"]
        callback.assert_called_once_with(result)
