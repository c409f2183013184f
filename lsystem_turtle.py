"""lsystem_turtle.py

Turtle interpreter for expanded L-system sentences.

interpret() walks the sentence once and materializes a command trace (one
entry per symbol, with the turtle state before and after it) plus the list
of drawn segments. The result answers "where is the turtle after N
commands" and "which segments are visible after N commands" without
walking the sentence again, which is what step-by-step playback needs.

Coordinates are local to the turtle origin: 0 degrees points right, angles
grow clockwise on screen, and the turtle starts at (0, 0) heading -90 (up).

Symbols:
  draw symbols (F, A, B, G by default)  move forward and draw
  +                                     heading += turn angle
  -                                     heading -= turn angle
  [                                     push state, then shrink width/length
  ]                                     pop state (reset when the stack is empty)
  anything else                         no-op, still one trace entry
"""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Literal

Point = tuple[float, float]

CommandKind = Literal["draw", "turn_left", "turn_right", "push", "pop", "noop"]

DEFAULT_DRAW_SYMBOLS = frozenset("FABG")
INITIAL_HEADING = -90.0


@dataclass(frozen=True)
class TurtleParams:
    turn_angle: float = 25.0
    step_length: float = 8.0
    step_decay: float = 0.75
    width_decay: float = 0.7
    base_branch_width: float = 10.0
    draw_symbols: frozenset[str] = DEFAULT_DRAW_SYMBOLS

    @classmethod
    def from_settings(
        cls, settings: Any, draw_symbols: Iterable[str] = DEFAULT_DRAW_SYMBOLS
    ) -> TurtleParams:
        return cls(
            turn_angle=float(settings.turn_angle),
            step_length=float(settings.step_length),
            step_decay=float(settings.step_decay),
            width_decay=float(settings.width_decay),
            base_branch_width=float(settings.base_branch_width),
            draw_symbols=frozenset(draw_symbols),
        )


@dataclass(frozen=True)
class TurtleState:
    x: float
    y: float
    heading_deg: float
    width: float
    length: float
    depth: int

    @property
    def position(self) -> Point:
        return (self.x, self.y)


@dataclass(frozen=True)
class TraceEntry:
    index: int
    symbol: str
    kind: CommandKind
    before: TurtleState
    after: TurtleState


@dataclass(frozen=True)
class DrawSegment:
    command_index: int
    depth: int
    width: float
    length: float
    start: Point
    end: Point


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float


@dataclass(frozen=True)
class Interpretation:
    trace: tuple[TraceEntry, ...]
    segments: tuple[DrawSegment, ...]
    initial: TurtleState
    bounds: Bounds | None
    _segment_indices: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_segment_indices", tuple(s.command_index for s in self.segments)
        )

    def __len__(self) -> int:
        return len(self.trace)

    @property
    def branch_count(self) -> int:
        return len(self.segments)

    @property
    def final(self) -> TurtleState:
        return self.state_at(len(self.trace))

    def state_at(self, cursor: int) -> TurtleState:
        """Turtle state after ``cursor`` commands have executed."""
        if not self.trace:
            return self.initial
        if cursor <= 0:
            return self.trace[0].before
        return self.trace[min(cursor, len(self.trace)) - 1].after

    def segments_up_to(self, cursor: int) -> tuple[DrawSegment, ...]:
        """Segments drawn by commands with index < cursor, in order."""
        return self.segments[: bisect_left(self._segment_indices, cursor)]

    def highlight_command_index(self, cursor: int) -> int | None:
        """Index of the most recent draw command executed within ``cursor`` steps."""
        if cursor <= 0 or not self.trace:
            return None
        last = min(cursor, len(self.trace)) - 1
        n = bisect_right(self._segment_indices, last)
        return self._segment_indices[n - 1] if n else None


def interpret(sentence: str, params: TurtleParams | None = None) -> Interpretation:
    if params is None:
        params = TurtleParams()

    initial = TurtleState(
        x=0.0,
        y=0.0,
        heading_deg=INITIAL_HEADING,
        width=float(params.base_branch_width),
        length=float(params.step_length),
        depth=0,
    )
    x, y, h = initial.x, initial.y, initial.heading_deg
    width, length = initial.width, initial.length
    draw_symbols = params.draw_symbols

    # Explicit stack; nesting depth is bounded only by the sentence.
    stack: list[tuple[float, float, float, float, float]] = []
    trace: list[TraceEntry] = []
    segments: list[DrawSegment] = []

    min_x = min_y = math.inf
    max_x = max_y = -math.inf

    for index, sym in enumerate(sentence):
        before = TurtleState(x, y, h, width, length, len(stack))
        kind: CommandKind

        if sym in draw_symbols:
            kind = "draw"
            rad = math.radians(h)
            nx = x + length * math.cos(rad)
            ny = y + length * math.sin(rad)
            segments.append(
                DrawSegment(
                    command_index=index,
                    depth=len(stack),
                    width=width,
                    length=length,
                    start=(x, y),
                    end=(nx, ny),
                )
            )
            min_x = min(min_x, x, nx)
            max_x = max(max_x, x, nx)
            min_y = min(min_y, y, ny)
            max_y = max(max_y, y, ny)
            x, y = nx, ny
        elif sym == "+":
            kind = "turn_left"
            h += params.turn_angle
        elif sym == "-":
            kind = "turn_right"
            h -= params.turn_angle
        elif sym == "[":
            kind = "push"
            stack.append((x, y, h, width, length))
            width *= params.width_decay
            length *= params.step_decay
        elif sym == "]":
            kind = "pop"
            if stack:
                x, y, h, width, length = stack.pop()
            else:
                x, y, h = initial.x, initial.y, initial.heading_deg
                width, length = initial.width, initial.length
        else:
            kind = "noop"

        trace.append(
            TraceEntry(
                index=index,
                symbol=sym,
                kind=kind,
                before=before,
                after=TurtleState(x, y, h, width, length, len(stack)),
            )
        )

    bounds = Bounds(min_x, min_y, max_x, max_y) if segments else None
    return Interpretation(
        trace=tuple(trace),
        segments=tuple(segments),
        initial=initial,
        bounds=bounds,
    )
