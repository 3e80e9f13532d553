"""
Debounced intent: delays a callback and lets a later event cancel it.

Used to tell a single click from a double click: the row-click intent is
scheduled on click and cancelled by the double click that follows within
the window.
"""

from typing import Callable, Optional

from PyQt6.QtCore import QObject, QTimer


class DebouncedIntent(QObject):
    """One pending callback behind a single-shot QTimer."""

    def __init__(self, window_ms: int = 200, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(window_ms)
        self._timer.timeout.connect(self._fire)
        self._pending: Optional[Callable[[], None]] = None

    @property
    def window_ms(self) -> int:
        return self._timer.interval()

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, fn: Callable, *args) -> None:
        """Run fn(*args) after the window; re-scheduling replaces the pending call."""
        self._pending = lambda: fn(*args)
        self._timer.start()

    def cancel(self) -> bool:
        """Drop the pending call. Returns True if one was pending."""
        was_pending = self._pending is not None
        self._timer.stop()
        self._pending = None
        return was_pending

    def dispose(self) -> None:
        """Teardown: a pending intent must not fire after the grid is gone."""
        self.cancel()

    def _fire(self):
        pending, self._pending = self._pending, None
        if pending is not None:
            pending()
