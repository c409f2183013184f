"""lsystem_playback.py

The surface the renderer and GUI talk to: one LSystemApp per sketch.

The app keeps the expanded sentence, its interpretation and the playback
cursor together. Every regenerate swaps in a new RenderSnapshot and resets
the cursor in the same step, so a reader never pairs a cursor with a trace
computed from a different sentence.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from lsystem_grammar import (
    ENGINE_EVENTS,
    ConfigError,
    EngineStats,
    Listener,
    LSystemEngine,
)
from lsystem_turtle import (
    DEFAULT_DRAW_SYMBOLS,
    DrawSegment,
    Interpretation,
    TurtleParams,
    TurtleState,
    interpret,
)

logger = logging.getLogger("lsystem")

PlaybackMode = Literal["static", "step"]

DEFAULT_PLAYBACK_SPEED = 360.0
MIN_PLAYBACK_SPEED = 10.0
MAX_PLAYBACK_SPEED = 4000.0
MIN_TICK_SECONDS = 1 / 240


@dataclass(frozen=True)
class RenderSnapshot:
    version: int
    settings_version: int
    sentence: str
    params: TurtleParams
    interpretation: Interpretation


@dataclass(frozen=True)
class PlaybackState:
    mode: PlaybackMode
    playing: bool
    cursor: int
    total_steps: int
    speed: float
    version: int


@dataclass(frozen=True)
class DisplayOptions:
    show_turtle_indicator: bool = False


class LSystemApp:
    def __init__(
        self,
        engine: LSystemEngine | None,
        *,
        preset_key: str | None = None,
        draw_symbols: Iterable[str] = DEFAULT_DRAW_SYMBOLS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if engine is None:
            raise ConfigError("LSystemEngine is not initialized")
        self.engine: LSystemEngine = engine
        self.draw_symbols = frozenset(draw_symbols)
        self._clock = clock

        params = TurtleParams.from_settings(engine.settings, self.draw_symbols)
        self._snapshot = RenderSnapshot(
            version=0,
            settings_version=-1,
            sentence="",
            params=params,
            interpretation=interpret("", params),
        )
        self._mode: PlaybackMode = "static"
        self._playing = False
        self._step_index = 0.0
        self._speed = DEFAULT_PLAYBACK_SPEED
        self._last_tick: float | None = None
        self._display = DisplayOptions()
        self._playback_listeners: list[Listener] = []

        engine.apply_preset(
            preset_key or engine.default_preset_key, skip_regenerate=True, silent=True
        )
        self.regenerate(silent=True)

    # -- notifications --

    def subscribe(self, event: str, callback: Listener) -> Callable[[], None]:
        if event in ENGINE_EVENTS:
            return self.engine.subscribe(event, callback)
        if event != "playback-change":
            raise ConfigError(f"unknown event {event!r}")
        self._playback_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._playback_listeners:
                self._playback_listeners.remove(callback)

        return unsubscribe

    def _notify_playback(self) -> None:
        if not self._playback_listeners:
            return
        payload = {"playback": self.get_playback_state()}
        for callback in list(self._playback_listeners):
            callback(payload)

    # -- regeneration --

    @property
    def snapshot(self) -> RenderSnapshot:
        return self._snapshot

    @property
    def is_stale(self) -> bool:
        """True when settings changed since the last regenerate."""
        return self._snapshot.settings_version != self.engine.settings_version

    def regenerate(self, *, silent: bool = False) -> RenderSnapshot:
        sentence = self.engine.regenerate(silent=silent)
        params = TurtleParams.from_settings(self.engine.settings, self.draw_symbols)
        interpretation = interpret(sentence, params)
        self.engine.update_branch_count(interpretation.branch_count)

        self._snapshot = RenderSnapshot(
            version=self._snapshot.version + 1,
            settings_version=self.engine.settings_version,
            sentence=sentence,
            params=params,
            interpretation=interpretation,
        )
        self._reset_playback(keep_step_mode=self._mode == "step")
        if not silent:
            self._notify_playback()
        return self._snapshot

    def sync(self) -> bool:
        """Regenerate once if settings changed; call this from the render loop."""
        if not self.is_stale:
            return False
        self.regenerate()
        return True

    # -- settings entry points --

    def apply_preset(self, key: str, *, silent: bool = False) -> None:
        self.engine.apply_preset(key, skip_regenerate=True, silent=silent)
        self.regenerate(silent=silent)

    def set_settings(self, patch: Mapping[str, Any] | None) -> None:
        self.engine.set_settings(patch)

    def set_rule(self, symbol: str, raw_expansion: Any) -> None:
        self.engine.set_rule(symbol, raw_expansion)

    def set_rules(self, rules: Mapping[str, Any] | None) -> None:
        self.engine.set_rules(rules)

    def apply_settings_snapshot(
        self, snapshot: Mapping[str, Any] | None, *, silent: bool = False
    ) -> None:
        """Apply a stored snapshot (optionally carrying display_options)."""
        if not isinstance(snapshot, Mapping):
            return
        settings = {k: v for k, v in snapshot.items() if k != "display_options"}
        display = snapshot.get("display_options")

        self.engine.apply_settings_snapshot(settings, skip_regenerate=True, silent=True)
        if isinstance(display, Mapping):
            self.set_display_options(display)
        self.regenerate(silent=silent)

    # -- introspection --

    def get_sentence(self) -> str:
        return self._snapshot.sentence

    def get_stats(self) -> EngineStats:
        return self.engine.get_stats()

    def get_settings_snapshot(self) -> dict[str, Any]:
        return self.engine.get_settings_snapshot()

    def get_full_snapshot(self) -> dict[str, Any]:
        snapshot = self.engine.get_settings_snapshot()
        snapshot["display_options"] = self.get_display_options()
        return snapshot

    def set_display_options(self, patch: Mapping[str, Any] | None) -> None:
        if not isinstance(patch, Mapping):
            return
        if "show_turtle_indicator" in patch:
            self._display = DisplayOptions(
                show_turtle_indicator=bool(patch["show_turtle_indicator"])
            )

    def get_display_options(self) -> dict[str, Any]:
        return {"show_turtle_indicator": self._display.show_turtle_indicator}

    # -- playback --

    @property
    def total_steps(self) -> int:
        return len(self._snapshot.interpretation)

    def _clamp_step(self, value: float) -> float:
        total = self.total_steps
        if total <= 0:
            return 0.0
        return min(max(value, 0.0), float(total))

    def _reset_playback(self, *, keep_step_mode: bool) -> None:
        self._playing = False
        self._last_tick = None
        if keep_step_mode:
            self._mode = "step"
            self._step_index = 0.0
        else:
            self._mode = "static"
            self._step_index = float(self.total_steps)

    def get_playback_state(self) -> PlaybackState:
        return PlaybackState(
            mode=self._mode,
            playing=self._playing,
            cursor=int(math.floor(self._clamp_step(self._step_index))),
            total_steps=self.total_steps,
            speed=self._speed,
            version=self._snapshot.version,
        )

    def set_playback_mode(self, mode: str, *, reset: bool = True) -> None:
        target: PlaybackMode = "step" if mode == "step" else "static"
        if target == self._mode and not reset:
            return

        if target == "step":
            self._mode = "step"
            if reset or self._step_index >= self.total_steps:
                self._step_index = 0.0
        else:
            self._mode = "static"
            self._step_index = float(self.total_steps)
        self._playing = False
        self._last_tick = None
        logger.debug("playback mode %s", self._mode)
        self._notify_playback()

    def toggle_step_mode(self) -> None:
        if self._mode == "step":
            self.set_playback_mode("static")
        else:
            self.set_playback_mode("step", reset=True)

    def start_playback(self, *, restart: bool = False) -> None:
        if self.total_steps == 0:
            return
        if self._mode != "step":
            self.set_playback_mode("step", reset=True)
        if restart:
            self._step_index = 0.0
        self._playing = True
        self._last_tick = None
        self._notify_playback()

    def pause_playback(self) -> None:
        self._playing = False
        self._last_tick = None

    def toggle_playback(self) -> None:
        if self._mode != "step":
            self.start_playback(restart=True)
        elif self._playing:
            self.pause_playback()
            self._notify_playback()
        else:
            self.start_playback()

    def step_playback(self, delta: int) -> None:
        if self.total_steps == 0:
            return
        if self._mode != "step":
            self.set_playback_mode("step", reset=False)
        self.pause_playback()
        self._step_index = self._clamp_step(self._step_index + delta)
        self._notify_playback()

    def reset_step_playback(self) -> None:
        if self.total_steps == 0:
            return
        if self._mode != "step":
            self.set_playback_mode("step", reset=True)
            return
        self.pause_playback()
        self._step_index = 0.0
        self._notify_playback()

    def set_playback_speed(self, value: Any) -> None:
        try:
            speed = float(value)
        except (TypeError, ValueError):
            return
        if not math.isfinite(speed):
            return
        self._speed = min(max(speed, MIN_PLAYBACK_SPEED), MAX_PLAYBACK_SPEED)

    def advance_playback(self, now: float | None = None) -> int:
        """Move the cursor by speed x elapsed seconds; one call per frame."""
        if not self._playing:
            return self.executed_count()

        total = self.total_steps
        if total == 0:
            self._step_index = 0.0
            self.pause_playback()
            return 0

        if now is None:
            now = self._clock()
        last = self._last_tick if self._last_tick is not None else now
        elapsed = max(0.0, now - last)
        self._last_tick = now

        self._step_index = self._clamp_step(
            self._step_index + self._speed * max(elapsed, MIN_TICK_SECONDS)
        )
        if self._step_index >= total:
            self._step_index = float(total)
            self.pause_playback()
            self._notify_playback()
        return self.executed_count()

    # -- what the renderer draws --

    def executed_count(self) -> int:
        if self._mode == "step":
            return int(math.floor(self._clamp_step(self._step_index)))
        return self.total_steps

    def visible_segments(self) -> tuple[DrawSegment, ...]:
        return self._snapshot.interpretation.segments_up_to(self.executed_count())

    def highlight_command_index(self) -> int | None:
        if self._mode != "step":
            return None
        return self._snapshot.interpretation.highlight_command_index(self.executed_count())

    def turtle_state(self) -> TurtleState:
        return self._snapshot.interpretation.state_at(self.executed_count())
