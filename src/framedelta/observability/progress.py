"""Progress sinks for frame-level run progress."""

from __future__ import annotations

from typing import Callable

from tqdm import tqdm


ProgressSink = Callable[[int, int, float], None]


def percent_done(done: int, total: int) -> float:
    """Percentage of frames done; an empty run counts as complete."""

    if total <= 0:
        return 100.0
    return 100.0 * min(done, total) / total


class TqdmProgress:
    """Console progress bar fed with ``(frames_done, total, avg_ms_per_frame)``."""

    def __init__(self, desc: str = "frames", disable: bool = False) -> None:
        self._desc = desc
        self._disable = disable
        self._bar: tqdm | None = None

    def __call__(self, done: int, total: int, avg_ms: float) -> None:
        if self._bar is None:
            self._bar = tqdm(total=total, desc=self._desc, unit="frame", disable=self._disable)
        self._bar.update(done - self._bar.n)
        self._bar.set_postfix_str(f"{avg_ms:.0f}ms per frame")

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def __enter__(self) -> "TqdmProgress":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
