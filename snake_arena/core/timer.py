"""
Polled countdown timers for the Snake Arena simulation core.

Every periodic event in the game (obstacle movement, spawning, player
movement, elimination countdowns) is driven by a Timer that is advanced
with the frame's elapsed time. Nothing sleeps.

Two flavours:
  - repeating: when the interval elapses the timer fires and starts over,
    carrying the leftover time into the next period.
  - one-shot: fires exactly once and then stays finished until it is
    reissued (usually with a fresh, randomized interval).
"""

from __future__ import annotations


class Timer:
    """
    A repeating or one-shot countdown.

    Attributes:
        duration: Interval in seconds.
        repeating: Whether the timer restarts automatically.
        elapsed: Seconds accumulated in the current period.
        finished: True once a one-shot timer has run out.
    """

    __slots__ = ("duration", "repeating", "elapsed", "finished", "_just_finished")

    def __init__(self, duration: float, repeating: bool = False):
        if duration <= 0:
            raise ValueError(f"Timer duration must be > 0, got {duration}")
        self.duration = float(duration)
        self.repeating = repeating
        self.elapsed = 0.0
        self.finished = False
        self._just_finished = False

    def tick(self, delta: float) -> bool:
        """
        Advance the timer by delta seconds.

        A repeating timer that spans several periods in one call still
        reports a single firing.

        Args:
            delta: Elapsed frame time in seconds (>= 0).

        Returns:
            True if the timer finished during this call.
        """
        if delta < 0:
            raise ValueError(f"Timer delta must be >= 0, got {delta}")

        if self.finished and not self.repeating:
            self._just_finished = False
            return False

        self.elapsed += delta
        if self.elapsed >= self.duration:
            if self.repeating:
                self.elapsed %= self.duration
            else:
                self.elapsed = self.duration
                self.finished = True
            self._just_finished = True
        else:
            self._just_finished = False
        return self._just_finished

    def just_finished(self) -> bool:
        """Whether the last tick() call fired the timer."""
        return self._just_finished

    def reset(self, duration: float | None = None) -> None:
        """Restart the countdown, optionally with a new interval."""
        if duration is not None:
            if duration <= 0:
                raise ValueError(f"Timer duration must be > 0, got {duration}")
            self.duration = float(duration)
        self.elapsed = 0.0
        self.finished = False
        self._just_finished = False

    @property
    def remaining(self) -> float:
        """Seconds left in the current period."""
        return max(0.0, self.duration - self.elapsed)

    def __repr__(self) -> str:
        kind = "repeating" if self.repeating else "once"
        return f"Timer({self.elapsed:.3f}/{self.duration:.3f}s, {kind})"
