import threading
from collections import Counter

import numpy as np
import pytest

from lensing import color
from lensing.camera import Camera
from lensing.geometry import Sphere
from lensing.scene import Scene
from lensing.texture import uniform

SPHERE_COLOR = color.rgba(1.0, 0.0, 0.0)
SKY_COLOR = color.rgba(0.0, 0.0, 1.0)


def make_scene(width=10, height=10, fov=45.0, distance=4.0, radius=1.0):
    """Camera at the origin looking down -z at a sphere `distance` away."""
    camera = Camera(width, height, fov_deg=fov)
    sphere = Sphere((0.0, 0.0, -distance), radius, uniform(SPHERE_COLOR))
    return Scene(camera, sphere, background=uniform(SKY_COLOR))


@pytest.fixture
def scene():
    return make_scene()


class CoordinateScene:
    """Renderable whose colour encodes the pixel position; counts every call."""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.calls = Counter()
        self._lock = threading.Lock()

    def dimensions(self):
        return self.width, self.height

    def color_at(self, x, y):
        with self._lock:
            self.calls[(x, y)] += 1
        return np.array([x / 255.0, y / 255.0, 0.0, 1.0])
