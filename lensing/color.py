"""RGBA colours as small numpy arrays.

A colour is a float array [r, g, b, a] with channels in [0, 1]. Textures
produce them, the render engine packs them into 8-bit pixels.
"""

import numpy as np

TRANSPARENT = np.zeros(4, dtype=float)


def rgba(r: float, g: float, b: float, a: float = 1.0) -> np.ndarray:
    return np.array([r, g, b, a], dtype=float)


def mix(t: float, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Linear interpolation: t=0 gives a, t=1 gives b."""
    return (1.0 - t) * np.asarray(a, dtype=float) + t * np.asarray(b, dtype=float)


def to_rgba8(color: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(np.asarray(color, dtype=float) * 255.0), 0, 255).astype(
        np.uint8
    )


def to_u32(color: np.ndarray) -> int:
    """Pack as 0xAARRGGBB."""
    r, g, b, a = (int(c) for c in to_rgba8(color))
    return (a << 24) | (r << 16) | (g << 8) | b


def from_u32(value: int) -> np.ndarray:
    a = (value >> 24) & 255
    r = (value >> 16) & 255
    g = (value >> 8) & 255
    b = value & 255
    return np.array([r, g, b, a], dtype=float) / 255.0
