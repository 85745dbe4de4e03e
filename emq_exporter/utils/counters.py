"""Process-wide scrape counters shared by concurrent collection cycles."""

import threading


class ScrapeCounters:
    """
    Monotonic counters that survive across collection cycles.

    Created once at startup and never reset. Scrapes may overlap, so every
    increment and read happens under a lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._total_scrapes = 0
        self._json_parse_failures = 0

    def inc_total_scrapes(self) -> None:
        with self._lock:
            self._total_scrapes += 1

    def inc_json_parse_failures(self) -> None:
        with self._lock:
            self._json_parse_failures += 1

    @property
    def total_scrapes(self) -> int:
        with self._lock:
            return self._total_scrapes

    @property
    def json_parse_failures(self) -> int:
        with self._lock:
            return self._json_parse_failures
