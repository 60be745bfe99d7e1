"""Procedural accretion-disk texture for the ring.

Emissivity follows the usual thin-disk power law r^{-q} inside
[r_in, r_out], normalised so the inner edge is 1, and is mapped to a warm
colour ramp. The texture's u axis is the radial fraction of the ring and v
the azimuth, matching ``Ring.texture_coords``.
"""

import numpy as np

from lensing.texture import EdgeMode, Filtering, Texture


def disk_emissivity(
    r: float, r_in: float = 6.0, r_out: float = 40.0, q: float = 3.0
) -> float:
    if (r < r_in) or (r > r_out):
        return 0.0
    return (r / r_in) ** (-q)


def warm_ramp(intensity: float) -> np.ndarray:
    v = float(np.clip(intensity, 0.0, 1.0))
    return np.array([v, v**0.6 * 0.85, v**0.2 * 0.35, 1.0])


def disk_texture(
    r_in: float,
    r_out: float,
    q: float = 3.0,
    *,
    width: int = 64,
    height: int = 8,
    gain: float = 1.0
) -> Texture:
    """Ring texture whose brightness falls off as r^{-q} from r_in to r_out."""
    if not 0.0 < r_in < r_out:
        raise ValueError(f"need 0 < r_in < r_out, got ({r_in}, {r_out})")

    # sample radii at texel centres
    u = (np.arange(width) + 0.5) / width
    radii = r_in + u * (r_out - r_in)
    row = np.array(
        [warm_ramp(gain * disk_emissivity(r, r_in, r_out, q)) for r in radii]
    )
    image = np.broadcast_to(row, (height, width, 4)).copy()
    return Texture(image, Filtering.BILINEAR, EdgeMode.CLAMP)
