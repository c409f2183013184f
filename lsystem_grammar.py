"""lsystem_grammar.py

Grammar side of the L-system sketch.

Key pieces:
- Production rules as a tagged variant: FixedRule or WeightedRule.
- Rule normalization that accepts strings, {"value", "weight"} objects or
  lists of either, and never raises on malformed input.
- Generation-by-generation expansion with per-occurrence weighted choices.
- GrammarSettings plus the LSystemEngine that owns them, applies presets,
  clamps patches and notifies subscribers after each mutation.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import math
import random
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

import lsystem_presets

logger: logging.Logger = logging.getLogger("lsystem")

DEFAULT_AXIOM = "F"
CUSTOM_PRESET_KEY = "custom"
CUSTOM_PRESET_LABEL = "Custom"

# Fields shared by BASE_TEMPLATE, presets and settings snapshots, in order.
SETTINGS_FIELDS = (
    "axiom",
    "rules",
    "iterations",
    "turn_angle",
    "step_length",
    "step_decay",
    "width_decay",
    "base_branch_width",
    "colorize",
    "base_hue",
    "hue_step",
    "branch_color",
    "background_color",
    "initial_rotation",
    "origin",
)

# field -> (min, max, integral)
NUMERIC_LIMITS: dict[str, tuple[float, float, bool]] = {
    "iterations": (1, 20, True),
    "turn_angle": (0, 360, False),
    "step_length": (1, 160, False),
    "step_decay": (0.3, 1.2, False),
    "width_decay": (0.2, 1.1, False),
    "base_branch_width": (1, 40, False),
    "base_hue": (0, 360, True),
    "hue_step": (0, 120, True),
    "initial_rotation": (-360, 360, False),
}

ORIGIN_LIMITS = (-1.0, 2.0)


# -------------------------
# Errors / Validation
# -------------------------


class ConfigError(ValueError):
    pass


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigError(msg)


# -------------------------
# Coercion
# -------------------------


def _to_number(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def clamp_number(value: Any, lo: float, hi: float, fallback: float) -> float:
    number = _to_number(value)
    if number is None:
        return fallback
    return min(max(number, lo), hi)


def clamp_to_int(value: Any, lo: int, hi: int, fallback: int) -> int:
    number = _to_number(value)
    if number is None:
        return fallback
    # Round half up, after clamping so infinities stay in range.
    return int(math.floor(min(max(number, lo), hi) + 0.5))


def normalize_color(value: Any, fallback: Iterable[float]) -> list[float]:
    reference = list(fallback) if fallback is not None else [0, 0, 0]
    reference += [0] * (3 - len(reference))
    if not isinstance(value, (list, tuple)):
        return reference[:3]
    channels = list(value[:3]) + [None] * (3 - len(value[:3]))
    return [clamp_number(c, 0, 255, reference[i]) for i, c in enumerate(channels)]


def normalize_origin(origin: Any, fallback: Mapping[str, float] | None) -> dict[str, float]:
    base = dict(fallback) if fallback else {"x": 0.5, "y": 0.5}
    if not isinstance(origin, Mapping):
        return base
    lo, hi = ORIGIN_LIMITS
    return {
        "x": clamp_number(origin.get("x"), lo, hi, base["x"]),
        "y": clamp_number(origin.get("y"), lo, hi, base["y"]),
    }


# -------------------------
# Rule model
# -------------------------


@dataclass(frozen=True)
class Alternative:
    value: str
    weight: float = 1.0


@dataclass(frozen=True)
class FixedRule:
    value: str


@dataclass(frozen=True)
class WeightedRule:
    alternatives: tuple[Alternative, ...]


Rule = Union[FixedRule, WeightedRule]


def _coerce_weight(raw: Any) -> float:
    weight = _to_number(raw)
    if weight is None or not math.isfinite(weight):
        return 1.0
    return max(0.0, weight)


def _normalize_rule_option(option: Any) -> str | Alternative | None:
    if isinstance(option, str):
        text = option.strip()
        return text or None
    if isinstance(option, Alternative):
        value, weight = option.value, option.weight
    elif isinstance(option, Mapping):
        value, weight = option.get("value"), option.get("weight")
    else:
        return None
    if not isinstance(value, str) or not value.strip():
        return None
    return Alternative(value.strip(), _coerce_weight(weight))


def normalize_rule_definition(raw: Any) -> Rule:
    """Coerce a raw rule value into a FixedRule or WeightedRule.

    Accepts a string, a {"value", "weight"} mapping, an Alternative, an
    already-normalized rule, or a list of any of these. Blank entries are
    dropped; a missing or non-finite weight becomes 1. Nothing usable left
    gives FixedRule(""), which expansion treats as "no rule".
    """
    if isinstance(raw, FixedRule):
        raw = raw.value
    elif isinstance(raw, WeightedRule):
        raw = list(raw.alternatives)

    if isinstance(raw, (list, tuple)):
        options = [o for o in map(_normalize_rule_option, raw) if o is not None]
        if not options:
            return FixedRule("")
        if len(options) == 1 and isinstance(options[0], str):
            return FixedRule(options[0])
        return WeightedRule(
            tuple(o if isinstance(o, Alternative) else Alternative(o) for o in options)
        )

    option = _normalize_rule_option(raw)
    if option is None:
        return FixedRule("")
    if isinstance(option, str):
        return FixedRule(option)
    return WeightedRule((option,))


def rule_to_data(rule: Rule) -> str | list[dict[str, Any]]:
    """JSON-friendly form of a rule, accepted back by normalize_rule_definition."""
    if isinstance(rule, WeightedRule):
        return [{"value": a.value, "weight": a.weight} for a in rule.alternatives]
    return rule.value


def clone_rules(rules: Mapping[str, Any] | None) -> dict[str, Rule]:
    if not rules:
        return {}
    return {str(symbol): normalize_rule_definition(raw) for symbol, raw in rules.items()}


def rules_to_data(rules: Mapping[str, Rule]) -> dict[str, Any]:
    return {symbol: rule_to_data(rule) for symbol, rule in rules.items()}


def pick_weighted(alternatives: tuple[Alternative, ...], rng: random.Random) -> str:
    if not alternatives:
        return ""
    total = sum(max(0.0, a.weight) for a in alternatives)
    if total <= 0:
        return alternatives[0].value

    r = rng.random() * total
    acc = 0.0
    for alt in alternatives:
        acc += max(0.0, alt.weight)
        if r < acc:
            return alt.value
    return alternatives[-1].value


# -------------------------
# Expansion
# -------------------------


def expand(
    axiom: str,
    rules: Mapping[str, Any],
    iterations: int,
    rng: random.Random | None = None,
) -> str:
    """Rewrite ``axiom`` ``iterations`` times.

    Weighted rules are re-rolled for every occurrence of their symbol.
    Without an injected ``rng`` the choices come from an unseeded
    random.Random, so weighted output differs between calls.
    """
    current = axiom or DEFAULT_AXIOM
    if iterations <= 0:
        return current

    table = {
        symbol: r if isinstance(r, (FixedRule, WeightedRule)) else normalize_rule_definition(r)
        for symbol, r in rules.items()
    }
    if not table:
        return current
    if rng is None:
        rng = random.Random()

    for _ in range(iterations):
        parts: list[str] = []
        for symbol in current:
            rule = table.get(symbol)
            if isinstance(rule, WeightedRule):
                parts.append(pick_weighted(rule.alternatives, rng) or symbol)
            elif rule is not None and rule.value:
                parts.append(rule.value)
            else:
                parts.append(symbol)
        current = "".join(parts)
    return current


# -------------------------
# Rule text form
# -------------------------


def parse_rule_input(value: Any) -> Rule:
    """Parse the one-line rule syntax used by text fields.

    ``"F[+F]F"`` is a fixed rule; ``"FF | 0.5 ; F-F | 1"`` lists weighted
    alternatives separated by ``;`` with an optional ``| weight``.
    """
    raw = str(value if value is not None else "").strip()
    if not raw:
        return FixedRule("")
    if ";" not in raw and "|" not in raw:
        return FixedRule(raw)

    options: list[Alternative] = []
    for part in raw.split(";"):
        pieces = [chunk.strip() for chunk in part.split("|")]
        pattern = pieces[0]
        if not pattern:
            continue
        weight_raw = pieces[1] if len(pieces) > 1 else ""
        options.append(Alternative(pattern, _coerce_weight(weight_raw) if weight_raw else 1.0))

    if not options:
        return FixedRule(raw)
    if len(options) == 1 and options[0].weight == 1:
        return FixedRule(options[0].value)
    return WeightedRule(tuple(options))


def serialize_rule(rule: Any) -> str:
    rule = normalize_rule_definition(rule)
    if isinstance(rule, WeightedRule):
        return " ; ".join(f"{a.value} | {a.weight:g}" for a in rule.alternatives)
    return rule.value


def rule_control_key(symbol: str) -> str:
    return f"rule_{symbol}"


# -------------------------
# Settings
# -------------------------


@dataclass
class GrammarSettings:
    axiom: str = DEFAULT_AXIOM
    rules: dict[str, Rule] = field(default_factory=dict)
    iterations: int = 4
    turn_angle: float = 25
    step_length: float = 8
    step_decay: float = 0.75
    width_decay: float = 0.7
    base_branch_width: float = 10
    colorize: bool = True
    base_hue: int = 120
    hue_step: int = 5
    branch_color: list[float] = field(default_factory=lambda: [96, 70, 40])
    background_color: list[float] = field(default_factory=lambda: [240, 248, 255])
    initial_rotation: float = 0
    origin: dict[str, float] = field(default_factory=lambda: {"x": 0.5, "y": 0.92})
    preset_key: str = CUSTOM_PRESET_KEY

    def to_snapshot(self) -> dict[str, Any]:
        snapshot: dict[str, Any] = {}
        for key in SETTINGS_FIELDS:
            if key == "rules":
                snapshot[key] = rules_to_data(self.rules)
            else:
                snapshot[key] = copy.deepcopy(getattr(self, key))
        snapshot["preset_key"] = self.preset_key
        return snapshot


@dataclass
class EngineStats:
    branch_count: int = 0
    symbol_count: int = 0
    expand_time_ms: int | None = None


Listener = Callable[[dict[str, Any]], None]

ENGINE_EVENTS = ("regenerated", "preset-change")


class LSystemEngine:
    """Owns the grammar settings and the current expanded sentence.

    ``config`` supplies PRESETS, BASE_TEMPLATE and DEFAULT_PRESET_KEY (the
    lsystem_presets module by default). ``rng`` drives weighted rule
    selection; leave it unset for unseeded behaviour.
    """

    def __init__(self, config: Any = lsystem_presets, *, rng: random.Random | None = None):
        _require(config is not None, "L-system preset configuration is not loaded")

        self.presets: dict[str, dict[str, Any]] = dict(getattr(config, "PRESETS", {}) or {})
        self.default_preset_key: str = getattr(
            config, "DEFAULT_PRESET_KEY", lsystem_presets.DEFAULT_PRESET_KEY
        )
        self.aspect_ratio: float = getattr(config, "ASPECT_RATIO", lsystem_presets.ASPECT_RATIO)
        self._base: dict[str, Any] = copy.deepcopy(
            dict(getattr(config, "BASE_TEMPLATE", {}) or {})
        )
        for key, value in GrammarSettings().to_snapshot().items():
            self._base.setdefault(key, value)

        self._rng = rng if rng is not None else random.Random()
        self.settings = GrammarSettings()
        self._assign_template(self._base)
        self.settings_version = 0

        self._stats = EngineStats()
        self._sentence = ""
        self._listeners: dict[str, list[Listener]] = {name: [] for name in ENGINE_EVENTS}

    # -- notifications --

    def subscribe(self, event: str, callback: Listener) -> Callable[[], None]:
        _require(event in self._listeners, f"unknown engine event {event!r}")
        self._listeners[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        return unsubscribe

    def _emit(self, event: str, payload: dict[str, Any]) -> None:
        for callback in list(self._listeners[event]):
            callback(payload)

    # -- expansion --

    def regenerate(self, *, silent: bool = False) -> str:
        s = self.settings
        start = time.perf_counter()
        self._sentence = expand(s.axiom, s.rules, s.iterations, self._rng)
        elapsed_ms = (time.perf_counter() - start) * 1000

        self._stats = EngineStats(
            branch_count=0,
            symbol_count=len(self._sentence),
            expand_time_ms=int(round(elapsed_ms)),
        )
        logger.debug(
            "expanded %r x%d into %d symbols in %.1f ms",
            s.axiom,
            s.iterations,
            len(self._sentence),
            elapsed_ms,
        )

        if not silent:
            self._emit(
                "regenerated",
                {
                    "sentence": self._sentence,
                    "stats": self.get_stats(),
                    "settings": self.get_settings_snapshot(),
                },
            )
        return self._sentence

    def get_sentence(self) -> str:
        return self._sentence

    def get_stats(self) -> EngineStats:
        return dataclasses.replace(self._stats)

    def update_branch_count(self, count: int) -> None:
        self._stats.branch_count = count

    # -- settings mutation --

    def _touch(self) -> None:
        self.settings_version += 1

    def _assign_template(self, source: Mapping[str, Any], *, skip_missing: bool = False) -> None:
        s = self.settings
        for key in SETTINGS_FIELDS:
            if key in source:
                value = source[key]
            elif skip_missing:
                continue
            else:
                value = self._base[key]

            if key == "rules":
                s.rules = clone_rules(value)
            elif key in ("branch_color", "background_color"):
                setattr(s, key, normalize_color(value, self._base[key]))
            elif key == "origin":
                s.origin = normalize_origin(value, self._base["origin"])
            else:
                setattr(s, key, copy.deepcopy(value))

    def apply_preset(self, key: str, *, skip_regenerate: bool = False, silent: bool = False) -> None:
        """Reset to the base template, then overlay the fields the preset lists."""
        preset = self.presets.get(key)
        self.settings.preset_key = key if preset else CUSTOM_PRESET_KEY

        self._assign_template(self._base)
        if preset and preset.get("settings"):
            self._assign_template(preset["settings"], skip_missing=True)
        self._touch()
        logger.debug("applied preset %s", self.settings.preset_key)

        if not skip_regenerate:
            self.regenerate(silent=silent)

        if not silent:
            self._emit(
                "preset-change",
                {"key": self.settings.preset_key, "settings": self.get_settings_snapshot()},
            )

    def set_settings(self, patch: Mapping[str, Any] | None) -> None:
        """Patch individual fields; numbers are clamped, bad values ignored."""
        if not patch:
            return
        s = self.settings

        if "axiom" in patch:
            s.axiom = str(patch["axiom"] or DEFAULT_AXIOM)
        for key, (lo, hi, integral) in NUMERIC_LIMITS.items():
            if key in patch:
                clamp = clamp_to_int if integral else clamp_number
                setattr(s, key, clamp(patch[key], lo, hi, getattr(s, key)))
        if "colorize" in patch:
            s.colorize = bool(patch["colorize"])
        if "origin" in patch:
            s.origin = normalize_origin(patch["origin"], s.origin)
        if "rules" in patch:
            s.rules = clone_rules(patch["rules"])
        if "background_color" in patch:
            s.background_color = normalize_color(patch["background_color"], s.background_color)
        if "branch_color" in patch:
            s.branch_color = normalize_color(patch["branch_color"], s.branch_color)

        s.preset_key = CUSTOM_PRESET_KEY
        self._touch()

    def set_rule(self, symbol: str, raw_expansion: Any) -> None:
        if not symbol:
            return
        key = str(symbol).strip()[:1]
        if not key:
            return
        self.settings.rules[key] = normalize_rule_definition(raw_expansion)
        self.settings.preset_key = CUSTOM_PRESET_KEY
        self._touch()

    def set_rules(self, rules: Mapping[str, Any] | None) -> None:
        if rules is None:
            return
        self.settings.rules = clone_rules(rules)
        self.settings.preset_key = CUSTOM_PRESET_KEY
        self._touch()

    def apply_settings_snapshot(
        self,
        snapshot: Mapping[str, Any] | None,
        *,
        skip_regenerate: bool = False,
        silent: bool = False,
    ) -> None:
        """Replace all settings with a snapshot from get_settings_snapshot().

        Missing fields fall back to the base template. The snapshot's
        preset_key survives only when it names a known preset.
        """
        if not isinstance(snapshot, Mapping):
            return
        self._assign_template(self._base)
        self.set_settings({k: v for k, v in snapshot.items() if k in SETTINGS_FIELDS})
        key = snapshot.get("preset_key")
        self.settings.preset_key = key if key in self.presets else CUSTOM_PRESET_KEY
        self._touch()

        if not skip_regenerate:
            self.regenerate(silent=silent)

    # -- introspection --

    def get_settings_snapshot(self) -> dict[str, Any]:
        return self.settings.to_snapshot()

    def get_preset_label(self, key: str) -> str:
        preset = self.presets.get(key)
        if preset and preset.get("label"):
            return str(preset["label"])
        return CUSTOM_PRESET_LABEL
