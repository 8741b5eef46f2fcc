"""
Issues External Service Integrations
=====================================

External services for issue detection:
- LLM client adapter guarded by a circuit breaker
- YAML detection rules with watchdog hot-reload
- APScheduler job for the background detection sweep
"""

import threading
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import yaml
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from feedback_triage.config import settings
from feedback_triage.core import LLMException
from feedback_triage.infrastructure.llm import ChatCompletionResult, ILLMClient as InfraLLMClient
from feedback_triage.issues.application import ILLMClient, IRuleSetProvider
from feedback_triage.issues.domain import DetectionRuleSet
from feedback_triage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CircuitState:
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Stops calling the LLM provider while it keeps failing.

    ``failure_threshold`` consecutive failures open the circuit; after
    ``recovery_timeout`` seconds one probe call is let through (half open).
    A successful probe closes the circuit, a failed one reopens it.
    ``clock`` is injectable for tests.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None

    @property
    def state(self) -> str:
        if self._state == CircuitState.OPEN and self._last_failure_time is not None:
            if self._clock() - self._last_failure_time >= self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def allow_request(self) -> bool:
        return self.state in (CircuitState.CLOSED, CircuitState.HALF_OPEN)

    def record_success(self) -> None:
        self._failure_count = 0
        self._state = CircuitState.CLOSED

    def record_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = self._clock()

        # A failed probe in half-open reopens immediately
        if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.failure_threshold:
            self._state = CircuitState.OPEN
            logger.warning(
                "Circuit breaker opened",
                extra={
                    "failure_count": self._failure_count,
                    "recovery_timeout": self.recovery_timeout
                }
            )


class LLMClientAdapter(ILLMClient):
    """
    Application-facing LLM client.

    Wraps the provider client in a circuit breaker and logs token usage
    per operation (issue_detection, resolution).
    """

    def __init__(
        self,
        client: InfraLLMClient,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        self._client = client
        self._breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.llm_failure_threshold,
            recovery_timeout=settings.llm_recovery_seconds
        )

    @property
    def circuit_state(self) -> str:
        return self._breaker.state

    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 600,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """
        Generate chat completion.

        Raises:
            LLMException: If the circuit is open or the provider call fails
        """
        if not self._breaker.allow_request():
            raise LLMException("Circuit breaker open", details={"operation": operation})

        try:
            result = await self._client.chat_completion(messages, temperature, max_tokens, operation)
        except LLMException:
            self._breaker.record_failure()
            raise

        self._breaker.record_success()
        logger.info(
            "LLM call complete",
            extra={
                "operation": operation,
                "model": result.model,
                "prompt_tokens": result.prompt_tokens,
                "completion_tokens": result.completion_tokens,
                "latency_ms": result.latency_ms
            }
        )
        return result

    async def close(self) -> None:
        await self._client.close()


class RulesFileHandler(FileSystemEventHandler):
    """Reloads the rules when the watched YAML file is written or replaced."""

    def __init__(self, rules_manager: "DetectionRulesManager", rules_path: Path):
        self.rules_manager = rules_manager
        self.rules_path = rules_path
        super().__init__()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.rules_path.resolve():
            logger.info(f"Detection rules file changed: {event.src_path}")
            self.rules_manager.reload()

    on_created = on_modified


class DetectionRulesManager(IRuleSetProvider):
    """
    Thread-safe detection rules holder with hot-reload support.

    Uses watchdog to monitor the YAML file and swap in the new rule set
    without restarting the service. A file that fails to parse leaves the
    previous rules in place.
    """

    def __init__(self, rule_set: Optional[DetectionRuleSet] = None):
        self._rule_set: Optional[DetectionRuleSet] = rule_set
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> DetectionRuleSet:
        """Initial rules load."""
        self._path = Path(path)
        self._rule_set = self._load_from_file(self._path)
        logger.info(
            "Detection rules loaded",
            extra={"rules_path": str(self._path), "rule_count": len(self._rule_set.rules)}
        )
        return self._rule_set

    def _load_from_file(self, path: Path) -> DetectionRuleSet:
        """Load and parse the YAML rules file."""
        if not path.exists():
            logger.warning(f"Detection rules file not found: {path}, using defaults")
            return DetectionRuleSet()

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return DetectionRuleSet(**data)

    def reload(self) -> bool:
        """Reload rules from file."""
        if self._path is None:
            return False

        try:
            new_rules = self._load_from_file(self._path)
        except Exception as e:
            logger.error(f"Failed to reload detection rules: {e}")
            return False

        with self._lock:
            self._rule_set = new_rules
        logger.info("Detection rules reloaded successfully")
        return True

    def start_watching(self) -> None:
        """
        Start watching the rules file for changes.

        Skipped when the file does not exist or the platform offers no
        file system notifications.
        """
        if self._path is None:
            raise RuntimeError("Rules not loaded. Call load() first.")

        if not self._path.exists():
            logger.info(f"Detection rules file doesn't exist, skipping file watch: {self._path}")
            return

        try:
            self._observer = Observer()
            handler = RulesFileHandler(self, self._path)
            self._observer.schedule(handler, str(self._path.resolve().parent), recursive=False)
            self._observer.start()
            logger.info(f"Started watching detection rules: {self._path}")
        except OSError as e:
            logger.warning(f"File watching not available, using static rules: {e}")
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching the rules file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def rule_set(self) -> DetectionRuleSet:
        """Get current rules."""
        with self._lock:
            if self._rule_set is None:
                self._rule_set = DetectionRuleSet()
            return self._rule_set


class DetectionScheduler:
    """
    Runs the detection sweep on an APScheduler interval job.

    One sweep at a time (``max_instances=1``); missed runs are coalesced.
    An interval of 0 leaves the scheduler stopped.
    """

    JOB_ID = "detection_sweep"

    def __init__(self, interval_seconds: int = 300):
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def start(self, job_func: Callable[[], Awaitable[Any]]) -> None:
        """Start the scheduler with the given job function."""
        if self._running:
            logger.warning("Detection scheduler already running")
            return

        if self.interval_seconds <= 0:
            logger.info("Detection sweep disabled")
            return

        self._scheduler = AsyncIOScheduler()

        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id=self.JOB_ID,
            name="Issue Detection Sweep",
            misfire_grace_time=60,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True

        logger.info(
            "Detection scheduler started",
            extra={"interval_seconds": self.interval_seconds}
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("Detection scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running
