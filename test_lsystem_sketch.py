#!/usr/bin/env python3
import io
import json
import os
import tempfile
from contextlib import redirect_stderr, redirect_stdout
from typing import Any

import pytest

from lsystem_grammar import ConfigError, GrammarSettings
from lsystem_playback import LSystemApp
from lsystem_sketch import (
    RenderConfig,
    SvgOptions,
    branch_stroke,
    build_app,
    compute_bounds,
    generate_random_config,
    load_json,
    main,
    parse_config,
    write_svg,
)
from lsystem_turtle import DrawSegment

PLAIN_SETTINGS: dict[str, Any] = {
    "axiom": "F",
    "rules": {"F": "F+F"},
    "iterations": 1,
    "turn_angle": 90,
    "step_length": 10,
    "colorize": False,
    "branch_color": [40, 40, 40],
}


def _plain_app() -> LSystemApp:
    return build_app(parse_config({"settings": PLAIN_SETTINGS}))


class TestConfigParsing:
    def test_basic_config(self) -> None:
        config = parse_config(
            {
                "name": "Tree",
                "preset": "denseTree",
                "settings": {"iterations": 3, "origin": {"x": 0.5}},
                "svg": {"width": 400, "height": 300, "fit": True},
            }
        )
        assert isinstance(config, RenderConfig)
        assert config.name == "Tree"
        assert config.preset == "denseTree"
        assert config.settings["iterations"] == 3
        assert config.svg.width == 400
        assert config.svg.fit
        assert config.svg.margin == SvgOptions().margin

    def test_empty_config(self) -> None:
        config = parse_config({})
        assert config.preset is None
        assert config.settings == {}
        assert config.svg == SvgOptions()

    def test_unknown_preset(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"preset": "nope"})

    def test_unknown_settings_key(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"settings": {"angle": 20}})

    def test_invalid_types(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"settings": {"iterations": "1"}})
        with pytest.raises(ConfigError):
            parse_config({"settings": {"colorize": 1}})
        with pytest.raises(ConfigError):
            parse_config({"settings": {"branch_color": [1, 2]}})
        with pytest.raises(ConfigError):
            parse_config([])  # type: ignore[arg-type]

    def test_multichar_rule_key(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"settings": {"rules": {"FF": "F"}}})

    def test_weighted_rules_accepted(self) -> None:
        config = parse_config(
            {"settings": {"rules": {"F": [{"value": "F", "weight": 1}, "FF"]}}}
        )
        assert isinstance(config.settings["rules"]["F"], list)

    def test_precision_out_of_range(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"svg": {"precision": 15}})


class TestBuildApp:
    def test_snapshot_settings(self) -> None:
        app = _plain_app()
        assert app.get_sentence() == "F+F"
        assert app.engine.settings.preset_key == "custom"
        # Fields missing from the file come from the base template.
        assert app.engine.settings.base_branch_width == 10

    def test_preset_with_patch(self) -> None:
        app = build_app(parse_config({"preset": "snowCrystal", "settings": {"iterations": 2}}))
        assert app.engine.settings.iterations == 2
        assert not app.is_stale

    def test_rule_overrides(self) -> None:
        app = build_app(
            parse_config({"settings": PLAIN_SETTINGS}), rule_overrides=[("F", "F-F")]
        )
        assert app.get_sentence() == "F-F"

    def test_seed_is_repeatable(self) -> None:
        cfg = parse_config({"preset": "randomBush", "settings": {"iterations": 4}})
        first = build_app(cfg, seed=11).get_sentence()
        assert build_app(cfg, seed=11).get_sentence() == first


class TestBranchStroke:
    def test_colorized_by_depth(self) -> None:
        settings = GrammarSettings()
        assert branch_stroke(settings, 0, 10) == ("rgb(124,166,124)", 10)

        deeper, _ = branch_stroke(settings, 12, 10)
        assert deeper != "rgb(124,166,124)"

    def test_plain_color(self) -> None:
        settings = GrammarSettings(colorize=False, branch_color=[40, 40, 40])
        assert branch_stroke(settings, 3, 4)[0] == "rgb(40,40,40)"

        color, width = branch_stroke(settings, 3, 4, highlight=True)
        assert color == "rgb(72,72,72)"
        assert width == pytest.approx(4.6)

    def test_minimum_width(self) -> None:
        assert branch_stroke(GrammarSettings(), 0, 0.1)[1] == 0.4


class TestComputeBounds:
    def _segment(self, start: tuple[float, float], end: tuple[float, float]) -> DrawSegment:
        return DrawSegment(
            command_index=0, depth=0, width=1.0, length=1.0, start=start, end=end
        )

    def test_basic_bounds(self) -> None:
        segments = [self._segment((0.0, 5.0), (10.0, -2.0)), self._segment((3.0, 8.0), (7.0, 1.0))]
        min_x, min_y, max_x, max_y = compute_bounds(segments)
        assert min_x == pytest.approx(0.0)
        assert min_y == pytest.approx(-2.0)
        assert max_x == pytest.approx(10.0)
        assert max_y == pytest.approx(8.0)

    def test_rotated_bounds(self) -> None:
        min_x, min_y, max_x, max_y = compute_bounds([self._segment((0.0, 0.0), (0.0, -10.0))], 90)
        assert min_x == pytest.approx(0.0)
        assert max_x == pytest.approx(10.0)
        assert min_y == pytest.approx(0.0, abs=1e-9)
        assert max_y == pytest.approx(0.0, abs=1e-9)

    def test_empty_segments_raises(self) -> None:
        with pytest.raises(ConfigError):
            compute_bounds([])


class TestWriteSvg:
    def _render(
        self, app: LSystemApp, options: SvgOptions | None = None, title: str | None = None
    ) -> str:
        """Helper: write SVG to a temp file and return its content."""
        with tempfile.TemporaryDirectory() as tmpdir:
            out_path = os.path.join(tmpdir, "nested", "out.svg")
            write_svg(app, out_path=out_path, options=options or SvgOptions(), title=title)
            with open(out_path) as f:
                return f.read()

    def test_all_segments(self) -> None:
        content = self._render(_plain_app())
        assert "<svg" in content
        assert content.count("<line") == 2
        assert 'stroke="rgb(40,40,40)"' in content
        assert 'fill="rgb(240,248,255)"' in content
        assert 'transform="translate(400,552) rotate(0)"' in content

    def test_cursor_highlights_latest_segment(self) -> None:
        app = _plain_app()
        app.set_playback_mode("step")
        app.step_playback(1)
        content = self._render(app)
        assert content.count("<line") == 1
        assert 'stroke="rgb(72,72,72)" stroke-width="11.5"' in content

    def test_fit_view_box(self) -> None:
        content = self._render(_plain_app(), SvgOptions(fit=True, margin=5))
        assert 'viewBox="-5 -15 20 20"' in content

    def test_fit_without_geometry(self) -> None:
        app = build_app(parse_config({"settings": {"axiom": "+", "rules": {}}}))
        with pytest.raises(ConfigError):
            self._render(app, SvgOptions(fit=True))

    def test_turtle_indicator(self) -> None:
        app = _plain_app()
        assert "<polygon" not in self._render(app)
        assert "<polygon" in self._render(app, SvgOptions(show_turtle=True))

        app.set_display_options({"show_turtle_indicator": True})
        assert "<polygon" in self._render(app)

    def test_title(self) -> None:
        content = self._render(_plain_app(), title="My <L-System>")
        assert "<title>" in content
        assert "My &lt;L-System&gt;" in content


class TestRandomGenerator:
    def test_deterministic(self) -> None:
        cfg = generate_random_config(seed=42)
        assert cfg == generate_random_config(seed=42)
        assert isinstance(cfg["settings"]["iterations"], int)
        assert "F" in cfg["settings"]["rules"]

    def test_weighted(self) -> None:
        cfg = generate_random_config(seed=3, weighted=True)
        alternatives = cfg["settings"]["rules"]["F"]
        assert len(alternatives) == 2
        assert all("weight" in alt for alt in alternatives)
        build_app(parse_config(cfg), seed=1)


class TestLoadJson:
    def test_malformed_json(self) -> None:
        with tempfile.NamedTemporaryFile(suffix=".json", mode="w", delete=False) as tmp:
            tmp.write("{ not valid json }")
            tmp_path = tmp.name
        try:
            with pytest.raises(ConfigError):
                load_json(tmp_path)
        finally:
            os.unlink(tmp_path)


_EXAMPLE_DIR = os.path.join(os.path.dirname(__file__), "example")


class TestCLI:
    def test_presets_command(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            assert main(["presets"]) == 0
        listing = out.getvalue()
        assert "* fractalTree" in listing
        assert "dragonCurve" in listing

    def test_validate_command(self) -> None:
        koch = os.path.join(_EXAMPLE_DIR, "koch.json")
        out = io.StringIO()
        with redirect_stdout(out):
            assert main(["validate", koch]) == 0
        assert "name: Koch snowflake" in out.getvalue()

    def test_render_preset(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            out = os.path.join(tmpdir, "out.svg")
            assert main(["render", out, "--preset", "dragonCurve", "--fit"]) == 0
            with open(out) as f:
                content = f.read()
            assert "<line" in content
            assert "<title>Dragon curve</title>" in content

    def test_render_cursor(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            out = os.path.join(tmpdir, "out.svg")
            assert main(["render", out, "-p", "fractalTree", "--cursor", "1", "--turtle"]) == 0
            with open(out) as f:
                content = f.read()
            assert content.count("<line") == 1
            assert "<polygon" in content

    def test_snapshot_then_render(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            snap = os.path.join(tmpdir, "snap.json")
            out = os.path.join(tmpdir, "out.svg")
            assert main(["snapshot", snap, "--preset", "randomBush", "--seed", "5"]) == 0

            data = load_json(snap)
            assert data["name"] == "Random water weed"
            assert data["settings"]["preset_key"] == "randomBush"
            assert "display_options" in data["settings"]

            assert main(["render", out, "--config", snap, "--seed", "5"]) == 0
            assert os.path.exists(out)

    def test_random_then_validate(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "random.json")
            assert main(["random", path, "--seed", "9", "--weighted"]) == 0
            with redirect_stdout(io.StringIO()):
                assert main(["validate", path]) == 0

    def test_file_not_found_returns_error_code(self) -> None:
        with redirect_stderr(io.StringIO()):
            assert main(["render", "out.svg", "--config", "nonexistent_config.json"]) == 2

    def test_invalid_config_returns_error_code(self) -> None:
        with tempfile.NamedTemporaryFile(suffix=".json", mode="w", delete=False) as tmp:
            json.dump({"settings": {"iterations": "bad"}}, tmp)
            tmp_path = tmp.name
        try:
            with redirect_stderr(io.StringIO()):
                assert main(["validate", tmp_path]) == 2
        finally:
            os.unlink(tmp_path)

    def test_bad_rule_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            out = os.path.join(tmpdir, "out.svg")
            err = io.StringIO()
            with redirect_stderr(err):
                assert main(["render", out, "--rule", "FF+F"]) == 2
            assert "SYMBOL=RULE" in err.getvalue()


class TestExampleConfigs:
    """Regression tests: every example config must render without error."""

    @pytest.mark.parametrize(
        "filename", ["koch.json", "fractal_tree.json", "weighted_bush.json", "sierpinski.json"]
    )
    def test_example_renders(self, filename: str) -> None:
        cfg = parse_config(load_json(os.path.join(_EXAMPLE_DIR, filename)))
        app = build_app(cfg, seed=1)
        assert app.snapshot.interpretation.branch_count > 0

        with tempfile.TemporaryDirectory() as tmpdir:
            out = os.path.join(tmpdir, "out.svg")
            write_svg(app, out_path=out, options=cfg.svg, title=cfg.name)
            with open(out) as f:
                content = f.read()
        assert "<svg" in content
        assert "<line" in content
        assert "viewBox=" in content
