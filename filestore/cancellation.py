"""Cooperative cancellation signal shared between a caller and one operation."""


class CancellationToken:
    """
    Flag checked by insertion and retrieval at their suspension points.

    Cancellation is not preemptive: requests already in flight complete.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def reset(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled
