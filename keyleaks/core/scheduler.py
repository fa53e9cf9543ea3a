"""Scan scheduling and per-resource result tracking."""

import asyncio
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from keyleaks.core.models import BatchSummary, ScanResult
from keyleaks.core.scanner import SecretScanner

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0
DEFAULT_MAX_RESOURCE_SIZE = 1_000_000
DEFAULT_MAX_BATCH_RESOURCES = 1000

ResultListener = Callable[[ScanResult], None]


class ScanScheduler:
    """
    Decides when the scanner runs and keeps the latest result per resource.

    - ``on_change`` is debounced: every call restarts a per-resource timer
      and only the last edit in a burst gets scanned.
    - ``on_save``, ``on_open`` and ``scan_now`` scan immediately.
    - ``scan_workspace`` scans a bounded set of resources one after another.

    Results are last-write-wins; no history is kept. Debounced scanning
    needs a running event loop. Everything else is plain synchronous code.
    """

    def __init__(
        self,
        scanner: Optional[SecretScanner] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        max_resource_size: int = DEFAULT_MAX_RESOURCE_SIZE,
        max_batch_resources: int = DEFAULT_MAX_BATCH_RESOURCES,
        realtime_enabled: bool = True,
        scan_on_save: bool = True,
    ):
        """
        Initialize the scheduler.

        Args:
            scanner: Scanner to run (defaults to the bundled catalog)
            debounce_seconds: Quiet period before an edited resource is scanned
            max_resource_size: Texts longer than this are skipped
            max_batch_resources: Upper bound on resources per batch scan
            realtime_enabled: Whether edit events trigger scans at all
            scan_on_save: Whether save events trigger scans
        """
        self.scanner = scanner or SecretScanner()
        self.debounce_seconds = debounce_seconds
        self.max_resource_size = max_resource_size
        self.max_batch_resources = max_batch_resources
        self.realtime_enabled = realtime_enabled
        self.scan_on_save = scan_on_save

        self._results: Dict[str, ScanResult] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._pending_text: Dict[str, str] = {}
        self._listeners: List[ResultListener] = []

    # ------------------------------------------------------------------
    # Listeners and results
    # ------------------------------------------------------------------
    def add_listener(self, listener: ResultListener) -> None:
        """Call ``listener`` with every committed scan result."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ResultListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def get_result(self, resource_id: str) -> Optional[ScanResult]:
        return self._results.get(resource_id)

    @property
    def results(self) -> Dict[str, ScanResult]:
        return dict(self._results)

    def total_matches(self) -> int:
        """Matches across every resource scanned so far."""
        return sum(r.total_matches for r in self._results.values())

    @property
    def pending(self) -> List[str]:
        """Resources with a debounce timer still running."""
        return list(self._timers)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def on_change(self, resource_id: str, text: str) -> None:
        """Record an edit; the scan runs once edits stop for the quiet period."""
        if not self.realtime_enabled:
            return

        loop = asyncio.get_running_loop()
        self._cancel_timer(resource_id)
        self._pending_text[resource_id] = text
        self._timers[resource_id] = loop.call_later(
            self.debounce_seconds, self._fire, resource_id
        )

    def on_save(self, resource_id: str, text: str) -> Optional[ScanResult]:
        if not self.scan_on_save:
            return None
        return self.scan_now(resource_id, text)

    def on_open(self, resource_id: str, text: str) -> Optional[ScanResult]:
        return self.scan_now(resource_id, text)

    def scan_now(self, resource_id: str, text: str) -> Optional[ScanResult]:
        """
        Scan a resource immediately.

        Returns:
            The new result, or None when the text exceeds the size ceiling
        """
        if len(text) > self.max_resource_size:
            logger.debug(
                "Skipping %s: %d characters exceeds limit of %d",
                resource_id,
                len(text),
                self.max_resource_size,
            )
            return None

        result = ScanResult(resource_id=resource_id, matches=self.scanner.scan(text))
        self._results[resource_id] = result

        if result.matches:
            logger.info("%d secret(s) detected in %s", result.total_matches, resource_id)
        for listener in list(self._listeners):
            listener(result)
        return result

    def scan_workspace(self, resources: Iterable[Tuple[str, str]]) -> BatchSummary:
        """
        Scan resources sequentially.

        Args:
            resources: ``(resource_id, text)`` pairs; only the first
                ``max_batch_resources`` are considered

        Returns:
            Summary with counts and the results that contained matches
        """
        summary = BatchSummary()

        for index, (resource_id, text) in enumerate(resources):
            if index >= self.max_batch_resources:
                logger.info("Batch limit of %d resources reached", self.max_batch_resources)
                break

            result = self.scan_now(resource_id, text)
            if result is None:
                summary.skipped += 1
                continue

            summary.scanned += 1
            summary.total_matches += result.total_matches
            if result.matches:
                summary.results_with_matches.append(result)

        logger.info(
            "Workspace scan complete: %d scanned, %d skipped, %d match(es)",
            summary.scanned,
            summary.skipped,
            summary.total_matches,
        )
        return summary

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def forget(self, resource_id: str) -> None:
        """Drop a resource that no longer exists, including any pending scan."""
        self._cancel_timer(resource_id)
        self._pending_text.pop(resource_id, None)
        self._results.pop(resource_id, None)

    def close(self) -> None:
        """Cancel pending timers and forget all results."""
        for resource_id in list(self._timers):
            self._cancel_timer(resource_id)
        self._pending_text.clear()
        self._results.clear()
        self._listeners.clear()

    def _cancel_timer(self, resource_id: str) -> None:
        handle = self._timers.pop(resource_id, None)
        if handle is not None:
            handle.cancel()

    def _fire(self, resource_id: str) -> None:
        self._timers.pop(resource_id, None)
        text = self._pending_text.pop(resource_id, None)
        if text is not None:
            self.scan_now(resource_id, text)
