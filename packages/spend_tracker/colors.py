"""Category color validation and pastel color assignment.

Colors are stored as ``#rrggbb``. Categories that reach their first
categorization without a color receive a random pastel: hue sampled uniformly
from [0, 360) at 70% saturation and 80% lightness. The random source is
injectable so callers (and tests) can make the choice deterministic.
"""

from __future__ import annotations

import colorsys
import random
import re
from collections.abc import Callable

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

PASTEL_SATURATION = 0.70
PASTEL_LIGHTNESS = 0.80

ColorStrategy = Callable[[], str]


def is_valid_color(color: str | None) -> bool:
    return bool(color) and _HEX_COLOR_RE.match(color or "") is not None


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    """Render an HSL triple (hue in degrees, s/l in 0..1) as ``#rrggbb``."""

    r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness, saturation)
    return "#{:02x}{:02x}{:02x}".format(*(round(c * 255) for c in (r, g, b)))


class PastelColorStrategy:
    """Callable producing a random pastel ``#rrggbb`` color per call."""

    def __init__(self, rng: random.Random | None = None, *, seed: int | None = None) -> None:
        if rng is not None and seed is not None:
            raise ValueError("pass either rng or seed, not both")
        self._rng = rng if rng is not None else random.Random(seed)

    def __call__(self) -> str:
        hue = self._rng.uniform(0.0, 360.0)
        if hue >= 360.0:  # uniform() may return the upper bound
            hue = 0.0
        return hsl_to_hex(hue, PASTEL_SATURATION, PASTEL_LIGHTNESS)


__all__ = [
    "ColorStrategy",
    "PastelColorStrategy",
    "hsl_to_hex",
    "is_valid_color",
    "PASTEL_SATURATION",
    "PASTEL_LIGHTNESS",
]
