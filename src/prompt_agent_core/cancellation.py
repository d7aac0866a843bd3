"""
Cooperative cancellation

A thread-safe signal shared by every component that issues model calls.
Components check it before each call and raise OptimizationCancelled once it is set.
"""

import threading


class OptimizationCancelled(Exception):
    """Raised when a round is aborted through its CancellationToken"""
    pass


class CancellationToken:
    """Cancellation signal for one optimization session"""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OptimizationCancelled("Optimization was cancelled")
