import itertools
import time
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

ToastKind = Literal["success", "error", "info", "warning"]

DEFAULT_DURATION = 5.0


@dataclass
class Toast:
    id: int
    kind: ToastKind
    message: str
    created_at: float
    duration: float

    def expired(self, now: float) -> bool:
        return now - self.created_at >= self.duration


class ToastCenter:
    """
    Process-wide notification queue shared by every console screen.

    Toasts expire after `duration` seconds; `clock` is injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._ids = itertools.count(1)
        self._toasts: List[Toast] = []

    def show(self, kind: ToastKind, message: str, duration: float = DEFAULT_DURATION) -> Toast:
        toast = Toast(next(self._ids), kind, message, self._clock(), duration)
        self._toasts.append(toast)
        return toast

    def success(self, message: str, duration: float = DEFAULT_DURATION) -> Toast:
        return self.show("success", message, duration)

    def error(self, message: str, duration: float = DEFAULT_DURATION) -> Toast:
        return self.show("error", message, duration)

    def info(self, message: str, duration: float = DEFAULT_DURATION) -> Toast:
        return self.show("info", message, duration)

    def warning(self, message: str, duration: float = DEFAULT_DURATION) -> Toast:
        return self.show("warning", message, duration)

    def dismiss(self, toast_id: int) -> None:
        self._toasts = [t for t in self._toasts if t.id != toast_id]

    def active(self) -> List[Toast]:
        """Visible toasts, oldest first. Expired ones are dropped."""
        now = self._clock()
        self._toasts = [t for t in self._toasts if not t.expired(now)]
        return list(self._toasts)

    def messages(self, kind: Optional[ToastKind] = None) -> List[str]:
        return [t.message for t in self.active() if kind is None or t.kind == kind]
