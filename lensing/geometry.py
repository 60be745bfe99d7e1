"""Rays and the two scene primitives: a textured sphere and a flat ring.

Points and vectors are float numpy arrays of length 3. Sphere and sky share
one (u, v) convention, see ``spherical_uv``.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from lensing.texture import Texture


def _vec(v) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def normalize(v: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(v)
    if n == 0.0:
        raise ValueError("cannot normalize a zero-length vector")
    return v / n


@dataclass(frozen=True)
class Ray:
    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self):
        # direction is always stored unit-length
        object.__setattr__(self, "origin", _vec(self.origin))
        object.__setattr__(self, "direction", normalize(_vec(self.direction)))

    def at(self, t: float) -> np.ndarray:
        return self.origin + t * self.direction


def cartesian_to_spherical(vec) -> Tuple[float, float, float]:
    """(r, theta, phi) with theta the polar angle from +z, phi the azimuth from +x."""
    x, y, z = _vec(vec)
    r = float(np.sqrt(x * x + y * y + z * z))
    if r == 0.0:
        return 0.0, 0.0, 0.0
    theta = float(np.arccos(np.clip(z / r, -1.0, 1.0)))
    phi = float(np.arctan2(y, x))
    return r, theta, phi


def spherical_uv(vec) -> Tuple[float, float]:
    """(u, v) = (theta / pi, phi / 2pi + 0.5), both in [0, 1]."""
    _, theta, phi = cartesian_to_spherical(vec)
    return theta / np.pi, 0.5 * phi / np.pi + 0.5


class Sphere:
    def __init__(self, position, radius: float, texture: Texture):
        if radius <= 0.0:
            raise ValueError(f"sphere radius must be positive, got {radius}")
        self.position = _vec(position)
        self.radius = float(radius)
        self.texture = texture

    def intersect(self, ray: Ray) -> Optional[float]:
        """Distance along the ray to the nearest non-negative hit, or None."""
        l = self.position - ray.origin
        adj = float(np.dot(l, ray.direction))
        d2 = float(np.dot(l, l)) - adj * adj
        r2 = self.radius * self.radius
        if d2 > r2:
            return None

        thc = np.sqrt(r2 - d2)
        t0 = adj - thc
        t1 = adj + thc
        if t0 < 0.0 and t1 < 0.0:
            return None
        if t0 < 0.0:
            return float(t1)
        return float(t0)

    def contains(self, point) -> bool:
        d = _vec(point) - self.position
        return float(np.dot(d, d)) < self.radius * self.radius

    def surface_normal(self, hit) -> np.ndarray:
        return normalize(_vec(hit) - self.position)

    def texture_coords(self, hit) -> Tuple[float, float]:
        return spherical_uv(_vec(hit) - self.position)

    def color_at(self, hit) -> np.ndarray:
        return self.texture.uv(self.texture_coords(hit))

    def __repr__(self):
        return f"Sphere(position={self.position.tolist()}, radius={self.radius})"


class Ring:
    """Flat annulus in the plane z = position.z, seen from above or below."""

    def __init__(
        self,
        position,
        inner_radius: float,
        outer_radius: float,
        texture_top: Texture,
        texture_bottom: Optional[Texture] = None,
    ):
        if not 0.0 <= inner_radius < outer_radius:
            raise ValueError(
                f"ring needs 0 <= inner < outer, got ({inner_radius}, {outer_radius})"
            )
        self.position = _vec(position)
        self.inner_radius = float(inner_radius)
        self.outer_radius = float(outer_radius)
        self.texture_top = texture_top
        if texture_bottom is None:
            texture_bottom = texture_top
        self.texture_bottom = texture_bottom

    def _in_band(self, point: np.ndarray) -> bool:
        dx, dy = point[0] - self.position[0], point[1] - self.position[1]
        r = np.hypot(dx, dy)
        return self.inner_radius <= r <= self.outer_radius

    def intersect(self, ray: Ray) -> Optional[float]:
        dz = ray.direction[2]
        if abs(dz) < 1e-12:
            return None
        t = (self.position[2] - ray.origin[2]) / dz
        if t < 0.0 or not self._in_band(ray.at(t)):
            return None
        return float(t)

    def crossing(self, p0, p1) -> Optional[np.ndarray]:
        """Point where the segment p0 -> p1 passes through the annulus, if any."""
        p0, p1 = _vec(p0), _vec(p1)
        z0 = p0[2] - self.position[2]
        z1 = p1[2] - self.position[2]
        if z0 * z1 > 0.0 or z0 == z1:
            return None
        point = p0 + (z0 / (z0 - z1)) * (p1 - p0)
        if not self._in_band(point):
            return None
        return point

    def texture_coords(self, hit) -> Tuple[float, float]:
        d = _vec(hit) - self.position
        r = np.hypot(d[0], d[1])
        u = (r - self.inner_radius) / (self.outer_radius - self.inner_radius)
        v = 0.5 * np.arctan2(d[1], d[0]) / np.pi + 0.5
        return float(u), float(v)

    def texture_for(self, direction) -> Texture:
        return self.texture_top if _vec(direction)[2] < 0.0 else self.texture_bottom

    def color_at(self, hit, direction) -> np.ndarray:
        return self.texture_for(direction).uv(self.texture_coords(hit))

    def __repr__(self):
        return (
            f"Ring(position={self.position.tolist()}, "
            f"radius=({self.inner_radius}, {self.outer_radius}))"
        )
