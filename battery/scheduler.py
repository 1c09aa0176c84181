from typing import Callable, List, Optional


class TimerHandle:
    def __init__(self, due_ms: int, callback: Callable[[], None], seq: int) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.seq = seq
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.fired

    def cancel(self) -> None:
        self.cancelled = True


class FrameScheduler:
    """
    Cancellable timers for the trial loop.

    Nothing here reads a real clock: the host (pygame main loop or a test)
    pushes time forward with update(now_ms) / advance(delta_ms), and due
    callbacks fire in due order, ties in scheduling order.

    fire_at_due_time=True moves now_ms to each timer's due time while its
    callback runs, so headless runs are exact to the millisecond. A frame
    driven host passes False and callbacks see the frame time instead.
    """

    def __init__(self, start_ms: int = 0, fire_at_due_time: bool = True) -> None:
        self.now_ms = start_ms
        self.fire_at_due_time = fire_at_due_time
        self._timers: List[TimerHandle] = []
        self._seq = 0

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        self._seq += 1
        handle = TimerHandle(self.now_ms + max(0, int(delay_ms)), callback, self._seq)
        self._timers.append(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    def cancel_all(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers = []

    def pending(self) -> int:
        return sum(1 for h in self._timers if h.active)

    def next_due_ms(self) -> Optional[int]:
        active = [h.due_ms for h in self._timers if h.active]
        return min(active) if active else None

    def update(self, now_ms: int) -> int:
        target = max(now_ms, self.now_ms)
        fired = 0
        while True:
            handle = self._pop_due(target)
            if handle is None:
                break
            self.now_ms = handle.due_ms if self.fire_at_due_time else target
            handle.fired = True
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired

    def advance(self, delta_ms: int) -> int:
        return self.update(self.now_ms + delta_ms)

    def _pop_due(self, target_ms: int) -> Optional[TimerHandle]:
        self._timers = [h for h in self._timers if h.active]
        due = [h for h in self._timers if h.due_ms <= target_ms]
        if not due:
            return None
        handle = min(due, key=lambda h: (h.due_ms, h.seq))
        self._timers.remove(handle)
        return handle
