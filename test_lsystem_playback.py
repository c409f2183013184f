#!/usr/bin/env python3
import random
from dataclasses import FrozenInstanceError

import pytest

from lsystem_grammar import ConfigError, LSystemEngine
from lsystem_playback import (
    DEFAULT_PLAYBACK_SPEED,
    MAX_PLAYBACK_SPEED,
    MIN_PLAYBACK_SPEED,
    LSystemApp,
)

SENTENCE = "F[+F]F[-F]F"


def make_app(**kwargs) -> LSystemApp:
    engine = LSystemEngine(rng=random.Random(7))
    app = LSystemApp(engine, **kwargs)
    app.set_settings({"axiom": "F", "iterations": 1, "turn_angle": 90})
    app.set_rules({"F": SENTENCE})
    app.sync()
    return app


class TestConstruction:
    def test_missing_engine(self) -> None:
        with pytest.raises(ConfigError):
            LSystemApp(None)

    def test_default_preset_applied(self) -> None:
        app = LSystemApp(LSystemEngine(rng=random.Random(1)))
        assert app.get_settings_snapshot()["preset_key"] == "fractalTree"
        assert app.get_sentence() != ""
        assert not app.is_stale

    def test_named_preset(self) -> None:
        app = LSystemApp(LSystemEngine(), preset_key="snowCrystal")
        assert app.get_settings_snapshot()["preset_key"] == "snowCrystal"

    def test_unknown_event(self) -> None:
        app = make_app()
        with pytest.raises(ConfigError):
            app.subscribe("nope", lambda payload: None)


class TestRegeneration:
    def test_static_after_regenerate(self) -> None:
        app = make_app()
        state = app.get_playback_state()

        assert app.get_sentence() == SENTENCE
        assert state.mode == "static"
        assert not state.playing
        assert state.total_steps == 11
        assert state.cursor == 11
        assert len(app.visible_segments()) == 5
        assert app.highlight_command_index() is None

    def test_stats_include_branch_count(self) -> None:
        stats = make_app().get_stats()
        assert stats.branch_count == 5
        assert stats.symbol_count == 11
        assert stats.expand_time_ms is not None

    def test_stale_until_synced(self) -> None:
        app = make_app()
        assert not app.is_stale
        assert app.sync() is False

        app.set_settings({"iterations": 2})
        assert app.is_stale
        assert app.get_sentence() == SENTENCE

        assert app.sync() is True
        assert not app.is_stale
        assert len(app.get_sentence()) > len(SENTENCE)

    def test_snapshot_replaced_on_regenerate(self) -> None:
        app = make_app()
        first = app.snapshot
        app.regenerate()
        second = app.snapshot

        assert second.version == first.version + 1
        assert first.sentence == SENTENCE
        with pytest.raises(FrozenInstanceError):
            first.sentence = "X"  # type: ignore[misc]

    def test_regenerate_resets_cursor(self) -> None:
        app = make_app()
        app.step_playback(4)
        assert app.executed_count() == 4

        app.regenerate()
        state = app.get_playback_state()
        assert state.mode == "step"
        assert state.cursor == 0

    def test_events(self) -> None:
        app = make_app()
        seen = []
        unsub_regen = app.subscribe("regenerated", lambda p: seen.append(("regen", p)))
        app.subscribe("playback-change", lambda p: seen.append(("play", p)))

        app.regenerate()
        assert [name for name, _ in seen] == ["regen", "play"]
        assert seen[0][1]["sentence"] == SENTENCE
        assert seen[1][1]["playback"].cursor == 11

        unsub_regen()
        seen.clear()
        app.regenerate(silent=True)
        assert seen == []


class TestStepMode:
    def test_toggle_step_mode(self) -> None:
        app = make_app()
        app.toggle_step_mode()
        assert app.get_playback_state().mode == "step"
        assert app.executed_count() == 0
        assert app.visible_segments() == ()
        assert app.turtle_state() == app.snapshot.interpretation.initial

        app.toggle_step_mode()
        assert app.get_playback_state().mode == "static"
        assert app.executed_count() == 11

    def test_step_playback_clamps(self) -> None:
        app = make_app()
        # Leaving static mode from the end rewinds before stepping.
        app.step_playback(1)
        assert app.get_playback_state().mode == "step"
        assert app.executed_count() == 1

        app.reset_step_playback()
        assert app.executed_count() == 0

        app.step_playback(-5)
        assert app.executed_count() == 0
        app.step_playback(4)
        assert app.executed_count() == 4
        assert app.highlight_command_index() == 3
        assert len(app.visible_segments()) == 2
        app.step_playback(100)
        assert app.executed_count() == 11

    def test_turtle_state_follows_cursor(self) -> None:
        app = make_app()
        app.reset_step_playback()
        app.step_playback(3)
        state = app.turtle_state()
        assert state.depth == 1
        assert state.heading_deg == pytest.approx(0)
        assert state == app.snapshot.interpretation.trace[2].after

    def test_reset_step_playback_enters_step_mode(self) -> None:
        app = make_app()
        app.reset_step_playback()
        state = app.get_playback_state()
        assert state.mode == "step"
        assert state.cursor == 0
        assert not state.playing


class TestPlaybackClock:
    def test_advance_uses_speed(self) -> None:
        app = make_app()
        app.start_playback()
        assert app.get_playback_state().playing

        # First tick has no elapsed time, so the minimum tick applies.
        assert app.advance_playback(10.0) == 1
        assert app.advance_playback(10.01) == 5
        assert app.get_playback_state().playing

        assert app.advance_playback(100.0) == 11
        state = app.get_playback_state()
        assert not state.playing
        assert state.cursor == 11

    def test_advance_with_injected_clock(self) -> None:
        now = [0.0]
        app = make_app(clock=lambda: now[0])
        app.set_playback_speed(100)
        app.start_playback(restart=True)
        app.advance_playback()
        now[0] = 0.05
        assert app.advance_playback() == 5

    def test_advance_when_paused(self) -> None:
        app = make_app()
        app.step_playback(2)
        assert app.advance_playback(5.0) == 2

    def test_toggle_playback(self) -> None:
        app = make_app()
        app.toggle_playback()
        state = app.get_playback_state()
        assert state.mode == "step"
        assert state.playing
        assert state.cursor == 0

        app.toggle_playback()
        assert not app.get_playback_state().playing
        app.toggle_playback()
        assert app.get_playback_state().playing

    def test_speed_clamps(self) -> None:
        app = make_app()
        assert app.get_playback_state().speed == DEFAULT_PLAYBACK_SPEED
        app.set_playback_speed(1)
        assert app.get_playback_state().speed == MIN_PLAYBACK_SPEED
        app.set_playback_speed("9999")
        assert app.get_playback_state().speed == MAX_PLAYBACK_SPEED
        app.set_playback_speed("fast")
        app.set_playback_speed(float("nan"))
        assert app.get_playback_state().speed == MAX_PLAYBACK_SPEED

    def test_playback_listener(self) -> None:
        app = make_app()
        cursors = []
        unsubscribe = app.subscribe(
            "playback-change", lambda p: cursors.append(p["playback"].cursor)
        )
        app.step_playback(-11)
        app.step_playback(2)
        assert cursors[-2:] == [0, 2]

        unsubscribe()
        app.step_playback(1)
        assert cursors[-1] == 2


class TestSnapshots:
    def test_full_snapshot_round_trip(self) -> None:
        app = make_app()
        app.set_display_options({"show_turtle_indicator": True})
        snapshot = app.get_full_snapshot()
        assert snapshot["display_options"] == {"show_turtle_indicator": True}

        other = make_app()
        other.apply_settings_snapshot(snapshot)
        assert other.get_display_options() == {"show_turtle_indicator": True}
        assert other.get_sentence() == SENTENCE
        assert other.get_settings_snapshot() == app.get_settings_snapshot()
        assert not other.is_stale

    def test_display_options_ignore_junk(self) -> None:
        app = make_app()
        app.set_display_options(None)
        app.set_display_options({"unknown": 1})
        assert app.get_display_options() == {"show_turtle_indicator": False}

    def test_apply_preset(self) -> None:
        app = make_app()
        app.apply_preset("dragonCurve")
        assert app.get_settings_snapshot()["preset_key"] == "dragonCurve"
        assert not app.is_stale
        assert app.get_playback_state().cursor == app.total_steps
