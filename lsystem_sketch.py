#!/usr/bin/env python3
"""lsystem_sketch.py

Command-line front end for the L-system sketch. Renders a preset or a saved
settings file to SVG, optionally stopped part-way through playback.

Key features:
- Ten built-in presets, or JSON settings files (snapshots or patches).
- Weighted (stochastic) rules with an optional seed for repeatable output.
- Renders only the commands up to --cursor, highlighting the latest branch.
- Per-depth branch colors and decaying stroke widths.
- Random settings generator for experimentation.

Run:
  python lsystem_sketch.py render out.svg --preset dragonCurve
  python lsystem_sketch.py render out.svg --config tree.json --cursor 120 --turtle
  python lsystem_sketch.py snapshot tree.json --preset randomBush
  python lsystem_sketch.py random out.json --seed 123 --weighted
  python lsystem_sketch.py --help
"""

from __future__ import annotations

import argparse
import colorsys
import json
import logging
import math
import os
import random
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, cast

from lsystem_grammar import (
    NUMERIC_LIMITS,
    ConfigError,
    GrammarSettings,
    LSystemEngine,
    parse_rule_input,
)
from lsystem_playback import LSystemApp
from lsystem_presets import ASPECT_RATIO, DEFAULT_PRESET_KEY, PRESETS
from lsystem_turtle import DEFAULT_DRAW_SYMBOLS, DrawSegment, Point, TurtleState

logger = logging.getLogger("lsystem")


# -------------------------
# Validation
# -------------------------


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigError(msg)


def _as_float(x: Any, path: str) -> float:
    _require(
        isinstance(x, (int, float)) and not isinstance(x, bool), f"{path} must be a number"
    )
    return float(x)


def _as_int(x: Any, path: str) -> int:
    _require(
        isinstance(x, int) and not isinstance(x, bool), f"{path} must be an integer"
    )
    return int(x)


def _as_str(x: Any, path: str) -> str:
    _require(isinstance(x, str), f"{path} must be a string")
    return cast(str, x)


def _as_bool(x: Any, path: str) -> bool:
    _require(isinstance(x, bool), f"{path} must be a boolean")
    return cast(bool, x)


def _as_dict(x: Any, path: str) -> dict[str, Any]:
    _require(isinstance(x, dict), f"{path} must be an object")
    return cast(dict[str, Any], x)


def _as_color(x: Any, path: str) -> list[float]:
    _require(
        isinstance(x, list) and len(x) == 3,
        f"{path} must be a list of three numbers",
    )
    return [_as_float(c, f"{path}[{i}]") for i, c in enumerate(x)]


# -------------------------
# Config model
# -------------------------


@dataclass(frozen=True)
class SvgOptions:
    width: float = 800.0
    height: float = 800.0 / ASPECT_RATIO
    precision: int = 3
    margin: float = 10.0
    fit: bool = False
    show_turtle: bool = False


@dataclass(frozen=True)
class RenderConfig:
    name: str | None
    preset: str | None
    settings: dict[str, Any]
    svg: SvgOptions


def _check_rules(obj: Any, path: str) -> dict[str, Any]:
    rules = _as_dict(obj, path)
    for k, v in rules.items():
        _require(
            isinstance(k, str) and len(k) == 1,
            f"{path} keys must be single-character strings",
        )
        _require(
            isinstance(v, (str, list, dict)),
            f"{path}['{k}'] must be a string, an alternative or a list of alternatives",
        )
    return rules


def _check_settings(obj: Any, path: str) -> dict[str, Any]:
    """Type-check a settings section; range checks are left to the engine."""
    settings = _as_dict(obj, path)
    for key, value in settings.items():
        where = f"{path}.{key}"
        if key in ("axiom", "preset_key"):
            _as_str(value, where)
        elif key in NUMERIC_LIMITS:
            _as_float(value, where)
        elif key == "colorize":
            _as_bool(value, where)
        elif key == "rules":
            _check_rules(value, where)
        elif key in ("branch_color", "background_color"):
            _as_color(value, where)
        elif key == "origin":
            origin = _as_dict(value, where)
            for axis in ("x", "y"):
                if axis in origin:
                    _as_float(origin[axis], f"{where}.{axis}")
        elif key == "display_options":
            display = _as_dict(value, where)
            if "show_turtle_indicator" in display:
                _as_bool(display["show_turtle_indicator"], f"{where}.show_turtle_indicator")
        else:
            raise ConfigError(f"unknown settings key '{where}'")
    return settings


def parse_config(obj: dict[str, Any]) -> RenderConfig:
    obj = _as_dict(obj, "root")

    name = obj.get("name")
    if name is not None:
        name = _as_str(name, "name")

    preset = obj.get("preset")
    if preset is not None:
        preset = _as_str(preset, "preset")
        _require(preset in PRESETS, f"unknown preset '{preset}'")

    settings = _check_settings(obj.get("settings", {}), "settings")

    svg = _as_dict(obj.get("svg", {}), "svg")
    defaults = SvgOptions()
    width = _as_float(svg.get("width", defaults.width), "svg.width")
    height = _as_float(svg.get("height", defaults.height), "svg.height")
    _require(width > 0, "svg.width must be > 0")
    _require(height > 0, "svg.height must be > 0")
    precision = _as_int(svg.get("precision", defaults.precision), "svg.precision")
    _require(0 <= precision <= 10, "svg.precision must be between 0 and 10")

    return RenderConfig(
        name=name,
        preset=preset,
        settings=settings,
        svg=SvgOptions(
            width=width,
            height=height,
            precision=precision,
            margin=_as_float(svg.get("margin", defaults.margin), "svg.margin"),
            fit=_as_bool(svg.get("fit", defaults.fit), "svg.fit"),
            show_turtle=_as_bool(
                svg.get("show_turtle", defaults.show_turtle), "svg.show_turtle"
            ),
        ),
    )


def load_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        try:
            return cast(dict[str, Any], json.load(f))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def _ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)


def dump_json(obj: dict[str, Any], path: str) -> None:
    _ensure_parent_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
        f.write("\n")


def build_app(
    cfg: RenderConfig,
    *,
    seed: int | None = None,
    rule_overrides: Iterable[tuple[str, str]] = (),
    draw_symbols: Iterable[str] = DEFAULT_DRAW_SYMBOLS,
) -> LSystemApp:
    """Create an app for ``cfg``: preset first, then the settings on top.

    Without a preset the settings section is treated as a full snapshot, so
    missing fields come from the base template.
    """
    rng = random.Random(seed) if seed is not None else None
    engine = LSystemEngine(rng=rng)
    app = LSystemApp(engine, preset_key=cfg.preset, draw_symbols=draw_symbols)

    if cfg.preset is None:
        if cfg.settings:
            app.apply_settings_snapshot(cfg.settings, silent=True)
    elif cfg.settings:
        app.set_display_options(cfg.settings.get("display_options"))
        app.set_settings(
            {k: v for k, v in cfg.settings.items() if k not in ("display_options", "preset_key")}
        )

    for symbol, text in rule_overrides:
        app.set_rule(symbol, parse_rule_input(text))

    app.sync()
    return app


# -------------------------
# Branch styling
# -------------------------


def branch_stroke(
    settings: GrammarSettings, depth: int, width: float, *, highlight: bool = False
) -> tuple[str, float]:
    """Stroke color and width for a segment at the given nesting depth."""
    if not math.isfinite(width):
        width = settings.base_branch_width or 1
    width = max(0.4, width)

    if settings.colorize:
        hue = (settings.base_hue + depth * settings.hue_step) % 360
        saturation = min(100.0, 25 + depth * (90 - 25) / 12)
        brightness = 82 if highlight else 65
        rgb = colorsys.hsv_to_rgb(hue / 360, saturation / 100, brightness / 100)
        r, g, b = (int(round(c * 255)) for c in rgb)
    else:
        boost = 32 if highlight else 0
        r, g, b = (min(255, int(round(c + boost))) for c in settings.branch_color)

    return f"rgb({r},{g},{b})", max(0.4, width * 1.15 if highlight else width)


# -------------------------
# SVG writing
# -------------------------


def _fmt(x: float, precision: int) -> str:
    # Normalise -0.0 so it never produces "-0" in SVG output.
    if not x:
        x = 0.0
    # Strip trailing zeros for nicer SVG.
    s = f"{x:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s in ("-0", ""):
        s = "0"
    return s


def _rotate(p: Point, angle_deg: float) -> Point:
    rad = math.radians(angle_deg)
    c, s = math.cos(rad), math.sin(rad)
    return (p[0] * c - p[1] * s, p[0] * s + p[1] * c)


def compute_bounds(
    segments: Iterable[DrawSegment], rotation_deg: float = 0.0
) -> tuple[float, float, float, float]:
    """Bounds of all segment endpoints after rotating about the turtle origin."""
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    found = False
    for seg in segments:
        found = True
        for x, y in (_rotate(seg.start, rotation_deg), _rotate(seg.end, rotation_deg)):
            min_x = min(min_x, x)
            max_x = max(max_x, x)
            min_y = min(min_y, y)
            max_y = max(max_y, y)
    _require(found, "No drawable geometry produced.")
    return (min_x, min_y, max_x, max_y)


def _turtle_indicator(state: TurtleState, precision: int, indent: str) -> list[str]:
    size = max(6.0, state.width * 2.2)
    pts = [
        (size, 0.0),
        (-size * 0.6, size * 0.55),
        (-size * 0.3, 0.0),
        (-size * 0.6, -size * 0.55),
    ]
    points = " ".join(f"{_fmt(x, precision)},{_fmt(y, precision)}" for x, y in pts)
    return [
        f'{indent}<g transform="translate({_fmt(state.x, precision)},'
        f'{_fmt(state.y, precision)}) rotate({_fmt(state.heading_deg, precision)})">',
        f'{indent}  <polygon points="{points}" stroke="rgb(15,23,42)" '
        f'stroke-opacity="0.863" stroke-width="1.5" fill="rgb(56,189,248)" '
        f'fill-opacity="0.667" />',
        f'{indent}  <circle cx="0" cy="0" r="{_fmt(size * 0.45, precision)}" '
        f'fill="none" stroke="rgb(56,189,248)" stroke-opacity="0.549" />',
        f"{indent}</g>",
    ]


def write_svg(
    app: LSystemApp,
    *,
    out_path: str,
    options: SvgOptions,
    title: str | None = None,
) -> None:
    """Draw the segments executed so far, the way the sketch's canvas does."""
    settings = app.engine.settings
    precision = options.precision
    rotation = settings.initial_rotation
    segments = app.visible_segments()
    highlight = app.highlight_command_index()

    if options.fit:
        # Frame the whole drawing so the view does not jump while scrubbing.
        minx, miny, maxx, maxy = compute_bounds(
            app.snapshot.interpretation.segments, rotation
        )
        margin = options.margin
        minx -= margin
        miny -= margin
        w = maxx + margin - minx
        h = maxy + margin - miny
        _require(
            w > 0 and h > 0,
            "Degenerate bounds after margin (width or height is zero). "
            "Set svg.margin > 0 to render collinear or single-point geometry.",
        )
        transform = f"rotate({_fmt(rotation, precision)})"
    else:
        minx, miny, w, h = 0.0, 0.0, options.width, options.height
        ox = options.width * settings.origin["x"]
        oy = options.height * settings.origin["y"]
        transform = (
            f"translate({_fmt(ox, precision)},{_fmt(oy, precision)}) "
            f"rotate({_fmt(rotation, precision)})"
        )

    view_box = (
        f"{_fmt(minx, precision)} {_fmt(miny, precision)} {_fmt(w, precision)} "
        f"{_fmt(h, precision)}"
    )

    lines: list[str] = []
    lines.append('<?xml version="1.0" encoding="UTF-8"?>')
    lines.append(
        "<svg xmlns=\"http://www.w3.org/2000/svg\" version=\"1.1\" "
        f"viewBox=\"{view_box}\" width=\"{_fmt(options.width, precision)}\" "
        f"height=\"{_fmt(options.height, precision)}\">"
    )

    if title:
        safe_title = (
            title.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        )
        lines.append(f"  <title>{safe_title}</title>")

    bg = ",".join(str(int(round(c))) for c in settings.background_color)
    lines.append(
        f'  <rect x="{_fmt(minx, precision)}" y="{_fmt(miny, precision)}" '
        f'width="{_fmt(w, precision)}" height="{_fmt(h, precision)}" '
        f'fill="rgb({bg})" />'
    )

    lines.append(f'  <g transform="{transform}" fill="none" stroke-linecap="round">')
    for seg in segments:
        color, stroke_width = branch_stroke(
            settings, seg.depth, seg.width, highlight=seg.command_index == highlight
        )
        (x1, y1), (x2, y2) = seg.start, seg.end
        lines.append(
            f'    <line x1="{_fmt(x1, precision)}" y1="{_fmt(y1, precision)}" '
            f'x2="{_fmt(x2, precision)}" y2="{_fmt(y2, precision)}" '
            f'stroke="{color}" stroke-width="{_fmt(stroke_width, precision)}" />'
        )
    if options.show_turtle or app.get_display_options()["show_turtle_indicator"]:
        lines.extend(_turtle_indicator(app.turtle_state(), precision, "    "))
    lines.append("  </g>")
    lines.append("</svg>")

    _ensure_parent_dir(out_path)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
        f.write("\n")


# -------------------------
# Random config generator
# -------------------------


def _random_balanced_word(
    rng: random.Random, length: int, *, p_branch: float = 0.20
) -> str:
    """Generate a random replacement word with balanced brackets.

    Produces symbols from: F, +, -, [, ]
    """
    word: list[str] = []
    depth = 0

    for _ in range(length):
        r = rng.random()
        if r < p_branch and depth < 3:
            word.append("[")
            depth += 1
            continue
        # At depth 0 the ']' share falls through to forward/turn symbols.
        if r < p_branch * 2 and depth > 0:
            word.append("]")
            depth -= 1
            continue

        t = rng.random()
        if t < 0.55:
            word.append("F")
        elif t < 0.775:
            word.append("+")
        else:
            word.append("-")

    word.extend("]" * depth)

    if "F" not in word:
        word.append("F")

    return "".join(word)


def generate_random_config(seed: int | None = None, *, weighted: bool = False) -> dict[str, Any]:
    rng = random.Random(seed)

    angle = rng.choice([15, 20, 22.5, 25, 30, 36, 45, 60, 90])
    iterations = rng.randint(2, 4)
    step = rng.choice([5, 8, 10, 12, 15])

    use_x = rng.random() < 0.5
    if use_x:
        axiom = "X"
        x_parts = []
        for _ in range(rng.randint(3, 6)):
            roll = rng.random()
            if roll < 0.45:
                x_parts.append("F")
            elif roll < 0.65:
                x_parts.append("X")
            elif roll < 0.80:
                x_parts.append("+")
            elif roll < 0.95:
                x_parts.append("-")
            else:
                x_parts.append("[X]")
        if "F" not in x_parts:
            x_parts.append("F")
        rules: dict[str, Any] = {
            "F": _random_balanced_word(rng, rng.randint(6, 12)),
            "X": "".join(x_parts),
        }
    else:
        axiom = "F"
        rules = {"F": _random_balanced_word(rng, rng.randint(8, 16))}

    if weighted:
        rules["F"] = [
            {"value": rules["F"], "weight": 1.0},
            {
                "value": _random_balanced_word(rng, rng.randint(6, 12)),
                "weight": rng.choice([0.25, 0.5, 1.0]),
            },
        ]

    cfg = {
        "name": "Random L-System",
        "settings": {
            "axiom": axiom,
            "rules": rules,
            "iterations": iterations,
            "turn_angle": angle,
            "step_length": step,
            "step_decay": rng.choice([0.7, 0.8, 0.9, 1.0]),
            "width_decay": rng.choice([0.6, 0.7, 0.8]),
            "base_branch_width": rng.choice([2, 4, 6, 8]),
            "colorize": rng.random() < 0.5,
            "base_hue": rng.randint(0, 360),
            "hue_step": rng.randint(0, 20),
            "origin": {"x": 0.5, "y": 0.9},
        },
        "svg": {"margin": 10, "precision": 3, "fit": True},
    }

    # Internal sanity check: generated config must always parse cleanly.
    parse_config(cfg)
    return cfg


# -------------------------
# CLI / Help
# -------------------------

HELP_EPILOG = r"""
SETTINGS FILES (render --config, validate)

A settings file is a JSON object:

  name: string (optional)
      Written into the SVG <title>.

  preset: string (optional)
      A built-in preset (see the "presets" command). When given, "settings"
      is applied on top of it as a patch. Without it, "settings" is a full
      snapshot and missing fields come from the base template.

  settings: object (optional)
      axiom              string ("" becomes "F")
      rules              symbol -> rule, where a rule is a string, an object
                         {"value": "F[+F]F", "weight": 0.5}, or a list of
                         those (one is picked per occurrence, by weight)
      iterations         1..20
      turn_angle         0..360 degrees
      step_length        1..160
      step_decay         0.3..1.2, applied to step length on "["
      width_decay        0.2..1.1, applied to stroke width on "["
      base_branch_width  1..40
      colorize           true: hue by depth, false: branch_color
      base_hue, hue_step 0..360, 0..120
      branch_color       [r, g, b]
      background_color   [r, g, b]
      initial_rotation   -360..360 degrees
      origin             {"x": .., "y": ..} as fractions of the canvas
      display_options    {"show_turtle_indicator": bool}

      Out-of-range numbers are clamped, not rejected.

  svg: object (optional)
      width, height  canvas size (default 800 x 600)
      precision      coordinate digits, 0..10 (default 3)
      fit            frame the drawing by its bounds instead of the origin
      margin         extra space around the bounds when fitting (default 10)
      show_turtle    draw the turtle at the cursor

SYMBOLS

  F A B G   move forward and draw (see --draw-symbols)
  +  -      turn by turn_angle
  [  ]      save / restore position, heading, width and length
  other     no-op

RULE OVERRIDES

  --rule 'F=FF | 0.5 ; F[+F]F | 1'   weighted alternatives separated by ";"
  --rule 'X=F-[[X]+X]'               fixed replacement
"""


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lsystem_sketch.py",
        description="L-system sketch renderer with step-by-step playback.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )
    p.add_argument(
        "-v", "--verbose", action="store_true", help="Log expansion and playback details."
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    def add_source_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("-c", "--config", help="Path to a JSON settings file.")
        sp.add_argument(
            "-p",
            "--preset",
            choices=sorted(PRESETS),
            help=f"Built-in preset (default: {DEFAULT_PRESET_KEY}).",
        )
        sp.add_argument(
            "--seed", type=int, default=None, help="Seed for weighted rule choices."
        )
        sp.add_argument(
            "--rule",
            action="append",
            default=[],
            metavar="SYMBOL=RULE",
            help="Override one rule; may be repeated.",
        )

    pr = sub.add_parser(
        "render",
        help="Render a preset or settings file to SVG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pr.add_argument("output", help="Path to write the SVG output.")
    add_source_args(pr)
    pr.add_argument(
        "--cursor",
        type=int,
        default=None,
        help="Stop after this many commands (step playback position).",
    )
    pr.add_argument("--fit", action="store_true", help="Frame the drawing by its bounds.")
    pr.add_argument("--turtle", action="store_true", help="Draw the turtle indicator.")
    pr.add_argument(
        "--draw-symbols",
        default="".join(sorted(DEFAULT_DRAW_SYMBOLS)),
        help="Symbols that move forward and draw (default: ABFG).",
    )

    pv = sub.add_parser(
        "validate",
        help="Validate a settings file and print a brief summary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pv.add_argument("config", help="Path to the JSON settings file.")

    ps = sub.add_parser(
        "snapshot",
        help="Write the full settings of a preset or settings file to JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ps.add_argument("output", help="Where to write the snapshot.")
    add_source_args(ps)

    sub.add_parser("presets", help="List the built-in presets.")

    pg = sub.add_parser(
        "random",
        help="Generate a random settings file for experimentation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pg.add_argument("output", help="Where to write the generated JSON file.")
    pg.add_argument(
        "--seed", type=int, default=None, help="Seed for repeatable randomness."
    )
    pg.add_argument(
        "--weighted", action="store_true", help="Give F two weighted alternatives."
    )

    return p


# -------------------------
# Commands
# -------------------------


def _parse_rule_overrides(items: list[str]) -> list[tuple[str, str]]:
    overrides = []
    for item in items:
        symbol, sep, text = item.partition("=")
        _require(bool(sep) and bool(symbol.strip()), f"--rule expects SYMBOL=RULE, got {item!r}")
        overrides.append((symbol, text))
    return overrides


def _load_source(args: argparse.Namespace) -> RenderConfig:
    if args.config:
        cfg = parse_config(load_json(args.config))
    else:
        cfg = parse_config({})
    if args.preset:
        cfg = RenderConfig(
            name=cfg.name, preset=args.preset, settings=cfg.settings, svg=cfg.svg
        )
    return cfg


def cmd_render(args: argparse.Namespace) -> None:
    cfg = _load_source(args)
    app = build_app(
        cfg,
        seed=args.seed,
        rule_overrides=_parse_rule_overrides(args.rule),
        draw_symbols=args.draw_symbols,
    )

    if args.cursor is not None:
        app.set_playback_mode("step", reset=True)
        app.step_playback(args.cursor)

    options = cfg.svg
    if args.fit or args.turtle:
        options = SvgOptions(
            width=options.width,
            height=options.height,
            precision=options.precision,
            margin=options.margin,
            fit=options.fit or args.fit,
            show_turtle=options.show_turtle or args.turtle,
        )

    title = cfg.name or app.engine.get_preset_label(app.engine.settings.preset_key)
    write_svg(app, out_path=args.output, options=options, title=title)
    logger.debug(
        "wrote %d of %d segments to %s",
        len(app.visible_segments()),
        app.snapshot.interpretation.branch_count,
        args.output,
    )


def cmd_validate(config_path: str) -> None:
    cfg = parse_config(load_json(config_path))
    app = build_app(cfg)
    s = app.engine.settings
    stats = app.get_stats()
    interpretation = app.snapshot.interpretation

    print(f"name: {cfg.name or app.engine.get_preset_label(s.preset_key)}")
    print(f"preset: {s.preset_key}")
    print(f"axiom length: {len(s.axiom)}")
    print(f"iterations: {s.iterations}")
    print(f"rules: {len(s.rules)}")
    print(
        "turtle: "
        f"angle={s.turn_angle} step={s.step_length} "
        f"decay={s.step_decay}/{s.width_decay} width={s.base_branch_width}"
    )
    print(f"symbols: {stats.symbol_count}")
    print(f"branches: {stats.branch_count}")
    if stats.expand_time_ms is not None:
        print(f"expand time: ~{stats.expand_time_ms} ms")
    if interpretation.bounds is None:
        raise ConfigError("Config produces no drawable geometry")
    b = interpretation.bounds
    print(f"bounds: ({b.min_x:.1f}, {b.min_y:.1f}) .. ({b.max_x:.1f}, {b.max_y:.1f})")


def cmd_snapshot(args: argparse.Namespace) -> None:
    cfg = _load_source(args)
    app = build_app(cfg, seed=args.seed, rule_overrides=_parse_rule_overrides(args.rule))
    settings = app.get_full_snapshot()
    out = {
        "name": cfg.name or app.engine.get_preset_label(settings["preset_key"]),
        "settings": settings,
    }
    dump_json(out, args.output)


def cmd_presets() -> None:
    for key, preset in PRESETS.items():
        marker = "*" if key == DEFAULT_PRESET_KEY else " "
        print(f"{marker} {key:<16} {preset['label']}")


def cmd_random(output_path: str, seed: int | None, weighted: bool) -> None:
    cfg = generate_random_config(seed, weighted=weighted)
    dump_json(cfg, output_path)


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        if args.cmd == "render":
            cmd_render(args)
        elif args.cmd == "validate":
            cmd_validate(args.config)
        elif args.cmd == "snapshot":
            cmd_snapshot(args)
        elif args.cmd == "presets":
            cmd_presets()
        elif args.cmd == "random":
            cmd_random(args.output, args.seed, args.weighted)
        else:
            raise AssertionError("unreachable")
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
