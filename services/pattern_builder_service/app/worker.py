"""Background analysis, preview generation and debounced validation."""

import threading
from collections.abc import Callable
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import Any

import structlog

from services.pattern_builder_service.app.patterns.configuration import PatternConfiguration
from services.pattern_builder_service.app.tokenizer.models import TokenAnalysis
from services.pattern_builder_service.app.tokenizer.tokenizer import FilenameTokenizer
from services.pattern_builder_service.app.validation.models import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)
from services.pattern_builder_service.app.validation.preview import FilenamePreview, PreviewSummary, build_previews
from services.pattern_builder_service.app.validation.sample_validator import SampleValidator

logger = structlog.get_logger()

ANALYSIS_TASK = "analysis"
PREVIEW_TASK = "preview"


class AnalysisTask:
    """Handle for a submitted background task."""

    def __init__(self, kind: str, file_count: int) -> None:
        """Initialize task handle.

        Args:
            kind: Task kind; a new task of the same kind cancels this one
            file_count: Number of files the task processes
        """
        self.kind = kind
        self.file_count = file_count
        self.cancel_event = threading.Event()
        self.future: Future | None = None

    def cancel(self) -> None:
        """Request cancellation; a running task stops at its next check."""
        self.cancel_event.set()
        if self.future is not None:
            self.future.cancel()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def done(self) -> bool:
        return self.future is not None and self.future.done()

    def result(self, timeout: float | None = None) -> Any:
        """Wait for the task; returns None if it was cancelled."""
        if self.future is None:
            return None
        try:
            return self.future.result(timeout=timeout)
        except CancelledError:
            return None


class BackgroundAnalysisService:
    """Runs analyses and previews on a single worker thread.

    Submitting a task cancels the in-flight task of the same kind. Cancelled
    tasks return None and never publish partial results.
    """

    def __init__(
        self,
        tokenizer: FilenameTokenizer,
        validator: SampleValidator | None = None,
        max_files: int = 500,
    ) -> None:
        """Initialize background service.

        Args:
            tokenizer: Tokenizer (with its cache) used for analyses
            validator: Validator providing grouping for previews
            max_files: Sample sets are truncated to this many filenames
        """
        self.tokenizer = tokenizer
        self.validator = validator or SampleValidator()
        self.max_files = max_files
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pattern-builder")
        self._lock = threading.Lock()
        self._current: dict[str, AnalysisTask] = {}

    def submit_analysis(self, filenames: list[str]) -> AnalysisTask:
        """Analyze a sample set in the background."""
        limited = self._limit(filenames)
        task = self._replace_current(ANALYSIS_TASK, len(limited))
        task.future = self._executor.submit(self._run_analysis, limited, task)
        return task

    def submit_preview(self, filenames: list[str], config: PatternConfiguration) -> AnalysisTask:
        """Build previews for a configuration in the background."""
        limited = self._limit(filenames)
        task = self._replace_current(PREVIEW_TASK, len(limited))
        task.future = self._executor.submit(self._run_preview, limited, config.copy(), task)
        return task

    def cancel_all(self) -> None:
        with self._lock:
            for task in self._current.values():
                task.cancel()
            self._current.clear()

    def shutdown(self, wait: bool = True) -> None:
        """Cancel outstanding tasks and stop the worker thread."""
        self.cancel_all()
        self._executor.shutdown(wait=wait, cancel_futures=True)
        logger.info("Background analysis service stopped")

    def _limit(self, filenames: list[str]) -> list[str]:
        if len(filenames) > self.max_files:
            logger.info("Truncating sample set", total=len(filenames), limit=self.max_files)
        return list(filenames[: self.max_files])

    def _replace_current(self, kind: str, file_count: int) -> AnalysisTask:
        task = AnalysisTask(kind, file_count)
        with self._lock:
            previous = self._current.get(kind)
            if previous is not None and not previous.done():
                previous.cancel()
                logger.debug("Cancelled in-flight task", kind=kind)
            self._current[kind] = task
        return task

    def _run_analysis(self, filenames: list[str], task: AnalysisTask) -> TokenAnalysis | None:
        for filename in filenames:
            if task.cancelled:
                logger.debug("Analysis cancelled", files=len(filenames))
                return None
            self.tokenizer.tokenize(filename)

        if task.cancelled:
            return None
        analysis = self.tokenizer.analyze(filenames)
        if task.cancelled:
            return None

        logger.info("Analysis completed", files=analysis.file_count, suggestions=len(analysis.suggestions))
        return analysis

    def _run_preview(
        self, filenames: list[str], config: PatternConfiguration, task: AnalysisTask
    ) -> tuple[list[FilenamePreview], PreviewSummary] | None:
        if task.cancelled:
            return None
        previews, summary = build_previews(filenames, config, self.validator)
        if task.cancelled:
            logger.debug("Preview cancelled", files=len(filenames))
            return None

        logger.info(
            "Preview completed",
            files=summary.total_files,
            matched=summary.matched_files,
            healthy=summary.is_healthy(),
        )
        return previews, summary


class DebouncedValidator:
    """Coalesces bursts of validation requests into one run after a quiet period."""

    def __init__(
        self,
        validator: SampleValidator,
        callback: Callable[[ValidationResult], None],
        delay_ms: int = 300,
    ) -> None:
        """Initialize debounced validator.

        Args:
            validator: Validator to run
            callback: Receives each validation result
            delay_ms: Quiescence window in milliseconds
        """
        self.validator = validator
        self.callback = callback
        self.delay = delay_ms / 1000.0
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: tuple[PatternConfiguration, list[str]] | None = None

    def request_validation(self, config: PatternConfiguration, samples: list[str] | None = None) -> None:
        """Schedule validation, replacing any request still waiting."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (config.copy(), list(samples or []))
            self._timer = threading.Timer(self.delay, self._run_pending)
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def flush(self) -> ValidationResult | None:
        """Run a waiting request immediately; returns its result, or None if nothing was waiting."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        return self._run_pending()

    def cancel(self) -> None:
        """Drop any waiting request."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None

    def _run_pending(self) -> ValidationResult | None:
        with self._lock:
            pending, self._pending = self._pending, None
        if pending is None:
            return None

        config, samples = pending
        try:
            result = self.validator.validate(config, samples)
        except Exception as e:
            logger.error("Validation failed", error=str(e))
            result = ValidationResult.failure(
                ValidationError.of(ValidationErrorType.INVALID_RULE_CONFIGURATION, f"Validation failed: {e}")
            )

        logger.debug(
            "Validation finished",
            valid=result.is_valid,
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        self.callback(result)
        return result
