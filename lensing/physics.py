"""Point particle moved by accumulated forces (unit mass)."""

import numpy as np

from lensing.geometry import Ray


class Particle:
    def __init__(self, position, velocity=(0.0, 0.0, 0.0)):
        self.position = np.array(position, dtype=float).reshape(3)
        self.velocity = np.array(velocity, dtype=float).reshape(3)
        self.acceleration = np.zeros(3, dtype=float)

    @classmethod
    def from_ray(cls, ray: Ray) -> "Particle":
        """A photon-like particle leaving the ray origin along its direction."""
        return cls(ray.origin, ray.direction)

    def add_force(self, force: np.ndarray):
        self.acceleration += force

    def update(self, dt: float):
        """Semi-implicit Euler step; the accumulated acceleration is consumed."""
        self.velocity += self.acceleration * dt
        self.position += self.velocity * dt
        self.acceleration = np.zeros(3, dtype=float)

    def __repr__(self):
        return (
            f"Particle(position={self.position.tolist()}, "
            f"velocity={self.velocity.tolist()})"
        )
