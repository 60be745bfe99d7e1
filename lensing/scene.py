"""Flat-spacetime scene: camera, sphere, optional ring and a sky texture.

Rays travel in straight lines; each pixel costs one intersection test per
primitive and a single texture lookup.
"""

import copy
from typing import Optional, Protocol, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from lensing.camera import Camera
from lensing.geometry import Ray, Ring, Sphere, spherical_uv
from lensing.texture import Texture, default_background


class Renderable(Protocol):
    """Anything the render engine can drive pixel by pixel."""

    def color_at(self, x: int, y: int) -> np.ndarray:
        ...

    def dimensions(self) -> Tuple[int, int]:
        ...


class Scene:
    def __init__(
        self,
        camera: Camera,
        sphere: Sphere,
        ring: Optional[Ring] = None,
        background: Optional[Texture] = None,
    ):
        self.camera = camera
        self.sphere = sphere
        self.ring = ring
        # built once here so every render of this scene sees the same sky
        self.background = background if background is not None else default_background()

    def set_camera(
        self,
        position=None,
        rotation: Optional[Rotation] = None,
        fov: Optional[float] = None,
    ):
        if position is not None:
            self.camera.set_position(position)
        if rotation is not None:
            self.camera.set_rotation(rotation)
        if fov is not None:
            self.camera.set_fov(fov)

    def set_size(self, width: int, height: int):
        self.camera.set_size(width, height)

    def snapshot(self) -> "Scene":
        """Copy whose camera can't be changed by later setter calls on self.

        Geometry and textures are never mutated, so they are shared.
        """
        snap = copy.copy(self)
        snap.camera = self.camera.copy()
        return snap

    def dimensions(self) -> Tuple[int, int]:
        return self.camera.width, self.camera.height

    def background_color(self, direction) -> np.ndarray:
        return self.background.uv(spherical_uv(direction))

    def trace(self, ray: Ray) -> dict:
        """Nearest hit along a straight ray, as a small summary dict."""
        best = {"type": "escape", "distance": None, "position": None}

        t = self.sphere.intersect(ray)
        if t is not None:
            best = {"type": "sphere", "distance": t, "position": ray.at(t)}

        if self.ring is not None:
            t = self.ring.intersect(ray)
            if t is not None and (best["distance"] is None or t < best["distance"]):
                best = {"type": "ring", "distance": t, "position": ray.at(t)}

        return best

    def color_at(self, x: int, y: int) -> np.ndarray:
        ray = self.camera.create_primary(x, y)
        hit = self.trace(ray)

        if hit["type"] == "sphere":
            return self.sphere.color_at(hit["position"])
        if hit["type"] == "ring":
            return self.ring.color_at(hit["position"], ray.direction)
        return self.background_color(ray.direction)

    def __repr__(self):
        return f"Scene({self.camera!r}, {self.sphere!r}, ring={self.ring!r})"
