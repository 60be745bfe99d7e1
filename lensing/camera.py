"""Pinhole camera producing one primary ray per pixel.

The camera looks down its local -z axis with +y up (OpenGL convention).
Its pose is a world position plus a scipy ``Rotation``; the projection is a
standard perspective frustum built from the vertical field of view and the
near/far clip planes.

Pixel (0, 0) is the top-left corner of the image and pixel
(width / 2, height / 2) looks straight along the forward axis.
"""

import copy

import numpy as np
from scipy.spatial.transform import Rotation

from lensing.geometry import Ray, normalize


def perspective(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    f = 1.0 / np.tan(np.deg2rad(fov_deg) / 2.0)
    m = np.zeros((4, 4), dtype=float)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = (2.0 * far * near) / (near - far)
    m[3, 2] = -1.0
    return m


def _checked_fov(fov_deg: float) -> float:
    if not 0.0 < fov_deg < 180.0:
        raise ValueError(f"field of view must be in (0, 180) degrees: {fov_deg}")
    return float(fov_deg)


class Camera:
    def __init__(
        self,
        width: int,
        height: int,
        fov_deg: float = 45.0,
        near: float = 0.01,
        far: float = 200.0,
    ):
        if not 0.0 < near < far:
            raise ValueError(f"need 0 < near < far, got near={near}, far={far}")
        self.near = float(near)
        self.far = float(far)
        self.position = np.zeros(3, dtype=float)
        self.rotation = Rotation.identity()
        self._fov = _checked_fov(fov_deg)
        self.set_size(width, height)

    @property
    def fov(self) -> float:
        """Vertical field of view in degrees."""
        return self._fov

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def forward(self) -> np.ndarray:
        return self.rotation.apply([0.0, 0.0, -1.0])

    def _update_projection(self):
        self._projection = perspective(self._fov, self.aspect, self.near, self.far)
        self._inv_projection = np.linalg.inv(self._projection)

    def set_size(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._update_projection()

    def set_fov(self, fov_deg: float):
        self._fov = _checked_fov(fov_deg)
        self._update_projection()

    def set_position(self, position):
        self.position = np.asarray(position, dtype=float).reshape(3)

    def set_rotation(self, rotation: Rotation):
        self.rotation = rotation

    def look_at(self, target, up=(0.0, 0.0, 1.0)):
        """Rotate the camera so its forward axis points at target."""
        fwd = normalize(np.asarray(target, dtype=float) - self.position)
        right = normalize(np.cross(fwd, np.asarray(up, dtype=float)))
        true_up = np.cross(right, fwd)
        self.rotation = Rotation.from_matrix(np.column_stack([right, true_up, -fwd]))

    def unproject(self, ndc) -> np.ndarray:
        """Normalized device coordinates -> camera-space point."""
        p = self._inv_projection @ np.array([ndc[0], ndc[1], ndc[2], 1.0])
        return p[:3] / p[3]

    def to_world(self, point) -> np.ndarray:
        return self.rotation.apply(point) + self.position

    def create_primary(self, x: int, y: int) -> Ray:
        ndc_x = 2.0 * x / self.width - 1.0
        ndc_y = 1.0 - 2.0 * y / self.height

        origin = self.to_world(self.unproject((ndc_x, ndc_y, -1.0)))
        far_point = self.to_world(self.unproject((ndc_x, ndc_y, 1.0)))
        return Ray(origin, far_point - origin)

    def copy(self) -> "Camera":
        return copy.deepcopy(self)

    def __repr__(self):
        return (
            f"Camera({self.width}x{self.height}, fov={self._fov}, "
            f"position={self.position.tolist()})"
        )
