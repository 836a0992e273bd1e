"""Tweens and timelines played on the runtime scheduler."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from sequencer.runtime.completion import Completion
from sequencer.runtime.easing import EaseFn, resolve_ease
from sequencer.runtime.scheduler import Scheduler
from sequencer.runtime.surfaces import PropValue, Surface

logger = logging.getLogger(__name__)

_EPSILON = 1e-9

type TweenHook = Callable[["Tween"], None]
type TimelineHook = Callable[[], None]


class Tween:
    """Interpolates numeric props of one surface; string props snap at start."""

    def __init__(
        self,
        target: Surface | None,
        to: Mapping[str, PropValue],
        *,
        duration: float,
        from_: Mapping[str, PropValue] | None = None,
        ease: str | EaseFn | None = "power2.out",
        delay: float = 0.0,
        repeat: int = 0,
        yoyo: bool = False,
        on_update: TweenHook | None = None,
    ) -> None:
        if duration < 0.0:
            raise ValueError("duration must be >= 0")
        if delay < 0.0:
            raise ValueError("delay must be >= 0")
        if repeat < 0:
            raise ValueError("repeat must be >= 0")
        self.target = target
        self._to = dict(to)
        self._from = dict(from_) if from_ is not None else None
        self._ease = resolve_ease(ease)
        self.duration = duration
        self.delay = delay
        self.repeat = repeat
        self.yoyo = yoyo
        self._on_update = on_update
        self._start: dict[str, PropValue] | None = None
        self.values: dict[str, PropValue] = {}

    @property
    def total_duration(self) -> float:
        return self.delay + self.duration * (self.repeat + 1)

    def prime(self) -> None:
        """Apply explicit from-values immediately (entry tweens start hidden)."""
        if self._from is None:
            return
        self._start = dict(self._from)
        self._apply(self._start)

    def render(self, local_time: float) -> None:
        """Render the tween at local time (seconds since its position, delay included)."""
        t = local_time - self.delay
        if t < 0.0:
            return
        if self._start is None:
            self._start = dict(self._from) if self._from is not None else self._capture_start()
        progress = self._progress(t)
        eased = self._ease(progress)
        current: dict[str, PropValue] = {}
        for name, end in self._to.items():
            start = self._start.get(name, end)
            if isinstance(end, (int, float)) and isinstance(start, (int, float)):
                current[name] = float(start) + (float(end) - float(start)) * eased
            else:
                current[name] = end
        self._apply(current)
        if self._on_update is not None:
            self._on_update(self)

    def _progress(self, t: float) -> float:
        if self.duration <= 0.0:
            return 0.0 if (self.yoyo and self.repeat % 2 == 1) else 1.0
        total = self.duration * (self.repeat + 1)
        if t >= total - _EPSILON:
            cycle = self.repeat
            within = 1.0
        else:
            cycle = int(t // self.duration)
            within = (t - cycle * self.duration) / self.duration
        if self.yoyo and cycle % 2 == 1:
            return 1.0 - within
        return within

    def _capture_start(self) -> dict[str, PropValue]:
        if self.target is None:
            return dict(self.values)
        return {name: self.target.prop(name) for name in self._to}

    def _apply(self, values: Mapping[str, PropValue]) -> None:
        self.values.update(values)
        if self.target is None:
            return
        for name, value in values.items():
            self.target.set_prop(name, value)


@dataclass(slots=True)
class _Entry:
    start: float
    tween: Tween | None = None
    callback: TimelineHook | None = None
    finished: bool = False


class Timeline:
    """Sequence of tweens and callbacks positioned relative to the timeline end.

    `offset` shifts an entry from the current end of the timeline: a negative
    offset overlaps it with the previous entry.
    """

    def __init__(self, *, on_complete: TimelineHook | None = None, label: str = "timeline") -> None:
        self.label = label
        self._entries: list[_Entry] = []
        self._end = 0.0
        self._on_complete = on_complete
        self._on_kill: list[TimelineHook] = []
        self._scheduler: Scheduler | None = None
        self._tick_task: int | None = None
        self._started_at = 0.0
        self._completion: Completion[None] = Completion()

    @property
    def duration(self) -> float:
        return self._end

    @property
    def completion(self) -> Completion[None]:
        return self._completion

    @property
    def playing(self) -> bool:
        return self._tick_task is not None

    def add(self, tween: Tween, *, offset: float = 0.0) -> Timeline:
        start = max(0.0, self._end + offset)
        self._entries.append(_Entry(start=start, tween=tween))
        self._end = max(self._end, start + tween.total_duration)
        return self

    def add_at(self, tween: Tween, position: float) -> Timeline:
        """Insert tween at an absolute position without moving later appends."""
        start = max(0.0, position)
        self._entries.append(_Entry(start=start, tween=tween))
        self._end = max(self._end, start + tween.total_duration)
        return self

    def to(
        self,
        target: Surface,
        props: Mapping[str, PropValue],
        *,
        duration: float,
        ease: str | EaseFn | None = "power2.out",
        offset: float = 0.0,
        repeat: int = 0,
        yoyo: bool = False,
    ) -> Timeline:
        return self.add(
            Tween(target, props, duration=duration, ease=ease, repeat=repeat, yoyo=yoyo),
            offset=offset,
        )

    def from_to(
        self,
        target: Surface,
        from_: Mapping[str, PropValue],
        to: Mapping[str, PropValue],
        *,
        duration: float,
        ease: str | EaseFn | None = "power2.out",
        offset: float = 0.0,
    ) -> Timeline:
        return self.add(Tween(target, to, from_=from_, duration=duration, ease=ease), offset=offset)

    def set(self, target: Surface, props: Mapping[str, PropValue], *, offset: float = 0.0) -> Timeline:
        return self.add(Tween(target, props, duration=0.0, ease="linear"), offset=offset)

    def call(self, callback: TimelineHook, *, offset: float = 0.0) -> Timeline:
        start = max(0.0, self._end + offset)
        self._entries.append(_Entry(start=start, callback=callback))
        self._end = max(self._end, start)
        return self

    def on_kill(self, hook: TimelineHook) -> None:
        self._on_kill.append(hook)

    def render(self, time: float) -> None:
        """Render every started entry at timeline time, in position order."""
        for entry in sorted(self._entries, key=lambda item: item.start):
            if entry.finished or time + _EPSILON < entry.start:
                continue
            if entry.callback is not None:
                entry.finished = True
                entry.callback()
                continue
            assert entry.tween is not None
            local = time - entry.start
            entry.tween.render(local)
            if local >= entry.tween.total_duration - _EPSILON:
                entry.finished = True

    def play(self, scheduler: Scheduler, *, frame_interval: float) -> Completion[None]:
        """Start frame ticking on scheduler; the completion resolves after on_complete."""
        if self._scheduler is not None:
            raise RuntimeError(f"{self.label} already started")
        self._scheduler = scheduler
        self._started_at = scheduler.now_seconds
        for entry in self._entries:
            if entry.tween is not None:
                entry.tween.prime()
        self._tick_task = scheduler.call_every(frame_interval, self._tick)
        return self._completion

    def kill(self) -> bool:
        """Stop a playing timeline without firing on_complete. Returns whether it was playing."""
        if self._tick_task is None:
            return False
        self._stop_ticking()
        self._completion.cancel()
        hooks = tuple(self._on_kill)
        self._on_kill.clear()
        for hook in hooks:
            hook()
        logger.debug("timeline_killed label=%s", self.label)
        return True

    def _tick(self) -> None:
        assert self._scheduler is not None
        elapsed = self._scheduler.now_seconds - self._started_at
        if elapsed + _EPSILON < self._end:
            self.render(elapsed)
            return
        self._stop_ticking()
        self.render(self._end)
        self._on_kill.clear()
        if self._on_complete is not None:
            self._on_complete()
        self._completion.resolve()

    def _stop_ticking(self) -> None:
        if self._tick_task is not None and self._scheduler is not None:
            self._scheduler.cancel(self._tick_task)
        self._tick_task = None
