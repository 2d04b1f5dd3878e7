"""Colour helpers built on matplotlib's colormaps and colour-name table."""
from __future__ import annotations

import matplotlib
import numpy as np
from matplotlib.colors import is_color_like, to_hex, to_rgb
from skimage.color import lab2rgb, rgb2lab

from .validation import check_range


def _hex(rgba) -> str:
    return to_hex(rgba, keep_alpha=False).upper()


def viridis(k: int) -> list[str]:
    """``k`` evenly spaced viridis colours as ``#RRGGBB``, dark to light."""
    if k <= 0:
        return []
    cmap = matplotlib.colormaps["viridis"]
    return [_hex(c) for c in cmap(np.linspace(0.0, 1.0, k))]


def alpha_hex(alpha) -> str:
    """Two hex digits encoding ``alpha`` (0-100); empty for ``None`` or 100."""
    if alpha is None:
        return ""
    check_range("alpha", alpha, 0, 100)
    if alpha == 100:
        return ""
    return f"{round(alpha * 255 / 100):02X}"


def is_color_name(x) -> bool:
    """True for strings matplotlib understands as a colour (names or hex codes).

    Numbers and numeric strings are never colours here, although matplotlib reads
    ``"0.5"`` as a grey level.
    """
    if not isinstance(x, str):
        return False
    try:
        float(x)
    except ValueError:
        return is_color_like(x)
    return False


def gradient(lo_color: str, hi_color: str, positions) -> list[str | None]:
    """Colours between ``lo_color`` (0) and ``hi_color`` (1), interpolated in CIELAB.

    Mixing in Lab keeps perceived lightness changing evenly along the gradient;
    mixes that fall outside sRGB are clipped. ``positions`` outside ``[0, 1]`` are
    clipped; ``None``/NaN positions map to ``None``.
    """
    ends = rgb2lab(np.array([to_rgb(lo_color), to_rgb(hi_color)]))
    pos = np.asarray([np.nan if p is None else p for p in positions], dtype=float)
    known = ~np.isnan(pos)
    t = np.clip(pos[known], 0.0, 1.0)[:, None]
    rgb = lab2rgb(ends[0] + t * (ends[1] - ends[0])) if known.any() else np.empty((0, 3))
    mixed = iter(np.clip(rgb, 0.0, 1.0))
    return [_hex(next(mixed)) if k else None for k in known]
