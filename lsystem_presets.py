"""lsystem_presets.py

Named L-system settings used by the sketch. Each preset overlays only the
fields it lists on top of BASE_TEMPLATE.
"""

from __future__ import annotations

from typing import Any

DEFAULT_PRESET_KEY = "fractalTree"

ASPECT_RATIO = 4 / 3

BASE_TEMPLATE: dict[str, Any] = {
    "axiom": "F",
    "rules": {"F": "F"},
    "iterations": 4,
    "turn_angle": 25,
    "step_length": 8,
    "step_decay": 0.75,
    "width_decay": 0.7,
    "base_branch_width": 10,
    "colorize": True,
    "base_hue": 120,
    "hue_step": 5,
    "branch_color": [96, 70, 40],
    "background_color": [240, 248, 255],
    "initial_rotation": 0,
    "origin": {"x": 0.5, "y": 0.92},
}

PRESETS: dict[str, dict[str, Any]] = {
    "spreadingTree": {
        "label": "Spreading tree",
        "description": (
            "A straight trunk with branches fanning out to both sides. "
            "FF+[+F-F-F]-[-F+F+F] keeps left and right in balance."
        ),
        "settings": {
            "axiom": "F",
            "rules": {"F": "FF+[+F-F-F]-[-F+F+F]"},
            "iterations": 5,
            "turn_angle": 24,
            "step_length": 9,
            "step_decay": 0.78,
            "width_decay": 0.72,
            "base_branch_width": 9,
            "colorize": True,
            "base_hue": 118,
            "hue_step": 6,
            "branch_color": [96, 70, 40],
            "background_color": [238, 247, 255],
            "initial_rotation": 0,
            "origin": {"x": 0.5, "y": 0.94},
        },
    },
    "detailedPlant": {
        "label": "Detailed plant",
        "description": (
            "Layers of fine leaves. The X and F rules combine to grow many "
            "small branches."
        ),
        "settings": {
            "axiom": "X",
            "rules": {"X": "F+[[X]-X]-F[-FX]+X", "F": "FF"},
            "iterations": 6,
            "turn_angle": 28,
            "step_length": 7,
            "step_decay": 0.88,
            "width_decay": 0.72,
            "base_branch_width": 7,
            "colorize": True,
            "base_hue": 110,
            "hue_step": 8,
            "branch_color": [92, 70, 40],
            "background_color": [232, 246, 243],
            "initial_rotation": 0,
            "origin": {"x": 0.48, "y": 0.96},
        },
    },
    "alternatingTree": {
        "label": "Alternating tree",
        "description": (
            "Branches grow right then left at different heights of the trunk "
            "with F[+F]F[-F]F."
        ),
        "settings": {
            "axiom": "F",
            "rules": {"F": "F[+F]F[-F]F"},
            "iterations": 5,
            "turn_angle": 22,
            "step_length": 4,
            "step_decay": 0.8,
            "width_decay": 0.68,
            "base_branch_width": 8,
            "colorize": False,
            "branch_color": [72, 60, 52],
            "background_color": [241, 248, 255],
            "initial_rotation": 0,
            "origin": {"x": 0.5, "y": 0.94},
        },
    },
    "denseTree": {
        "label": "Dense tree",
        "description": (
            "Branches in three directions. The trailing [F] of F[+F]F[-F][F] "
            "grows straight up and thickens the crown."
        ),
        "settings": {
            "axiom": "F",
            "rules": {"F": "F[+F]F[-F][F]"},
            "iterations": 6,
            "turn_angle": 23,
            "step_length": 11,
            "step_decay": 0.76,
            "width_decay": 0.70,
            "base_branch_width": 9,
            "colorize": True,
            "base_hue": 105,
            "hue_step": 8,
            "branch_color": [85, 68, 45],
            "background_color": [243, 249, 246],
            "initial_rotation": 0,
            "origin": {"x": 0.5, "y": 0.94},
        },
    },
    "symmetricTree": {
        "label": "Symmetric tree",
        "description": (
            "Matching branches leave the same point on both sides with "
            "F[+F][-F]F."
        ),
        "settings": {
            "axiom": "F",
            "rules": {"F": "F[+F][-F]F"},
            "iterations": 6,
            "turn_angle": 25,
            "step_length": 10,
            "step_decay": 0.78,
            "width_decay": 0.70,
            "base_branch_width": 3,
            "colorize": True,
            "base_hue": 90,
            "hue_step": 7,
            "branch_color": [80, 65, 45],
            "background_color": [245, 250, 248],
            "initial_rotation": 0,
            "origin": {"x": 0.5, "y": 0.94},
        },
    },
    "randomBush": {
        "label": "Random water weed",
        "description": (
            "Two rules chosen with equal probability, so every regeneration "
            "draws a different bundle of weed."
        ),
        "settings": {
            "axiom": "F",
            "rules": {
                "F": [
                    {"value": "FF-[-F+F+F]+[+F-F-F]", "weight": 0.5},
                    {"value": "FF+[+F-F]-[-F+F]", "weight": 0.5},
                ]
            },
            "iterations": 5,
            "turn_angle": 24,
            "step_length": 8,
            "step_decay": 0.83,
            "width_decay": 0.74,
            "base_branch_width": 7,
            "colorize": True,
            "base_hue": 112,
            "hue_step": 10,
            "branch_color": [90, 70, 42],
            "background_color": [226, 244, 235],
            "initial_rotation": 0,
            "origin": {"x": 0.5, "y": 0.96},
        },
    },
    "fractalTree": {
        "label": "Fractal tree",
        "description": (
            "A fully symmetric binary tree. F[+F][-F] splits every branch in "
            "two at the same angle."
        ),
        "settings": {
            "axiom": "F",
            "rules": {"F": "F[+F][-F]"},
            "iterations": 7,
            "turn_angle": 25.7,
            "step_length": 100,
            "step_decay": 0.8,
            "width_decay": 0.75,
            "base_branch_width": 6,
            "colorize": False,
            "branch_color": [40, 40, 40],
            "background_color": [250, 250, 250],
            "initial_rotation": 0,
            "origin": {"x": 0.5, "y": 0.95},
        },
    },
    "snowCrystal": {
        "label": "Snow crystal",
        "description": (
            "Koch snowflake. F+F--F+F bends every edge into a peak, adding "
            "more teeth each generation."
        ),
        "settings": {
            "axiom": "F--F--F",
            "rules": {"F": "F+F--F+F"},
            "iterations": 4,
            "turn_angle": 60,
            "step_length": 9,
            "step_decay": 1,
            "width_decay": 1,
            "base_branch_width": 2,
            "colorize": False,
            "branch_color": [24, 66, 128],
            "background_color": [245, 249, 255],
            "initial_rotation": -90,
            "origin": {"x": 0.75, "y": 0.3},
        },
    },
    "trianglePattern": {
        "label": "Triangle pattern",
        "description": (
            "Sierpinski arrowhead. A -> B-A-B and B -> A+B+A fold back and "
            "forth; both A and B move forward."
        ),
        "settings": {
            "axiom": "A",
            "rules": {"A": "B-A-B", "B": "A+B+A"},
            "iterations": 7,
            "turn_angle": 60,
            "step_length": 9,
            "step_decay": 1,
            "width_decay": 1,
            "base_branch_width": 1.6,
            "colorize": False,
            "branch_color": [36, 68, 110],
            "background_color": [248, 250, 252],
            "initial_rotation": -30,
            "origin": {"x": 0.9, "y": 0.9},
        },
    },
    "dragonCurve": {
        "label": "Dragon curve",
        "description": (
            "The shape of a strip of paper folded in half many times. X and Y "
            "alternate right and left turns."
        ),
        "settings": {
            "axiom": "FX",
            "rules": {"X": "X+YF+", "Y": "-FX-Y"},
            "iterations": 13,
            "turn_angle": 90,
            "step_length": 8,
            "step_decay": 1,
            "width_decay": 0.95,
            "base_branch_width": 2.5,
            "colorize": True,
            "base_hue": 200,
            "hue_step": 12,
            "branch_color": [40, 40, 40],
            "background_color": [245, 247, 250],
            "initial_rotation": 90,
            "origin": {"x": 0.8, "y": 0.65},
        },
    },
}
