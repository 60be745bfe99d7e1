"""Weak-field Schwarzschild light bending and the curved-spacetime scene.

Each camera ray becomes a particle that we push through the pseudo-force

    a = -3/2 * h^2 * r / |r|^5

where r points from the central mass (the sphere centre) to the particle
and h^2 = |r0 x v0|^2 is fixed from the initial state. This is the usual
first-order trick for bending light around a point mass with a Newtonian
integrator: it is not an exact geodesic, and the step size is fixed.

A particle that ends inside the sphere, or crosses the ring, takes that
surface's texture. One that survives ``max_iter`` steps samples the sky in
the direction of its final velocity, which is what distorts the background.
"""

from typing import Optional, Tuple

import numpy as np

from lensing.geometry import Ring, Sphere
from lensing.physics import Particle
from lensing.scene import Scene

DEFLECTION = 1.5

# below this |r|^2 the force is skipped for the step instead of dividing by ~0
_MIN_R2 = 1e-12


def deflection_force(
    r_vec: np.ndarray, h2: float, coefficient: float = DEFLECTION
) -> np.ndarray:
    r2 = float(np.dot(r_vec, r_vec))
    if r2 < _MIN_R2:
        return np.zeros(3, dtype=float)
    return -coefficient * h2 * r_vec / r2**2.5


def angular_momentum2(particle: Particle, centre=(0.0, 0.0, 0.0)) -> float:
    """|r x v|^2 with r measured from centre."""
    h = np.cross(particle.position - np.asarray(centre, dtype=float), particle.velocity)
    return float(np.dot(h, h))


def trace_particle(
    particle: Particle,
    sphere: Sphere,
    dt: float,
    max_iter: int,
    *,
    ring: Optional[Ring] = None,
    coefficient: float = DEFLECTION
) -> dict:
    """Integrate one particle and return a small hit-summary dict.

    The particle is advanced in place. ``type`` is "sphere", "ring" or
    "escape"; ``position`` is the hit point (or the final position on
    escape), ``velocity`` the velocity at that moment.
    """
    h2 = angular_momentum2(particle, sphere.position)

    for step in range(1, max_iter + 1):
        from_centre = particle.position - sphere.position
        particle.add_force(deflection_force(from_centre, h2, coefficient))
        previous = particle.position.copy()
        particle.update(dt)

        if ring is not None:
            crossing = ring.crossing(previous, particle.position)
            if crossing is not None:
                return {
                    "type": "ring",
                    "position": crossing,
                    "velocity": particle.velocity.copy(),
                    "steps": step,
                }

        if sphere.contains(particle.position):
            return {
                "type": "sphere",
                "position": particle.position.copy(),
                "velocity": particle.velocity.copy(),
                "steps": step,
            }

    return {
        "type": "escape",
        "position": particle.position.copy(),
        "velocity": particle.velocity.copy(),
        "steps": max_iter,
    }


class GRScene:
    """A flat ``Scene`` rendered through the weak-field integrator."""

    def __init__(
        self,
        scene: Scene,
        dt: float,
        max_iter: int,
        coefficient: float = DEFLECTION,
    ):
        if dt <= 0.0:
            raise ValueError(f"integration step must be positive, got {dt}")
        if max_iter < 0:
            raise ValueError(f"max_iter must be >= 0, got {max_iter}")
        self._scene = scene.snapshot()
        self._dt = float(dt)
        self._max_iter = int(max_iter)
        self._coefficient = float(coefficient)

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def max_iter(self) -> int:
        return self._max_iter

    @property
    def coefficient(self) -> float:
        return self._coefficient

    def snapshot(self) -> "GRScene":
        return GRScene(self._scene, self._dt, self._max_iter, self._coefficient)

    def dimensions(self) -> Tuple[int, int]:
        return self._scene.dimensions()

    def trace_pixel(self, x: int, y: int) -> dict:
        particle = Particle.from_ray(self._scene.camera.create_primary(x, y))
        return trace_particle(
            particle,
            self._scene.sphere,
            self._dt,
            self._max_iter,
            ring=self._scene.ring,
            coefficient=self._coefficient,
        )

    def color_at(self, x: int, y: int) -> np.ndarray:
        hit = self.trace_pixel(x, y)

        if hit["type"] == "sphere":
            return self._scene.sphere.color_at(hit["position"])
        if hit["type"] == "ring":
            return self._scene.ring.color_at(hit["position"], hit["velocity"])
        return self._scene.background_color(hit["velocity"])

    def __repr__(self):
        return (
            f"GRScene({self._scene!r}, dt={self._dt}, max_iter={self._max_iter}, "
            f"coefficient={self._coefficient})"
        )
