"""Ready-made demo scenes: a checkered sphere inside a glowing ring.

The camera sits just above the ring plane looking at the sphere, so the
warped render shows the far side of the ring lifted over the sphere.
"""

import numpy as np
from scipy.spatial.transform import Rotation

from lensing import color
from lensing.camera import Camera
from lensing.emission import disk_texture
from lensing.geometry import Ring, Sphere
from lensing.schwarzschild import GRScene
from lensing.scene import Scene
from lensing.texture import EdgeMode, Filtering, Texture, checkerboard


def star_field(
    width: int = 512, height: int = 256, density: float = 0.02, seed: int = 7
) -> Texture:
    rng = np.random.default_rng(seed)
    stars = rng.random((height, width)) < density
    brightness = np.where(stars, rng.random((height, width)), 0.0)
    return Texture(brightness, Filtering.NEAREST, EdgeMode.REPEAT)


def sphere_texture() -> Texture:
    return checkerboard(
        64, 64, color.rgba(1.0, 0.0, 100 / 255), color.rgba(100 / 255, 0.0, 1.0)
    )


def flat_scene(width: int = 640, height: int = 360, distance: float = 12.0) -> Scene:
    camera = Camera(width, height, fov_deg=30.0)
    scene = Scene(
        camera,
        Sphere((0.0, 0.0, 0.0), 1.0, sphere_texture()),
        ring=Ring((0.0, 0.0, 0.0), 2.0, 3.0, disk_texture(2.0, 3.0, q=2.0)),
        background=star_field(),
    )
    # +90 degrees about x turns the camera's -z forward axis into +y
    scene.set_camera(
        position=(0.0, -distance, 1.0),
        rotation=Rotation.from_euler("x", 90.0, degrees=True),
    )
    return scene


def warped_scene(
    width: int = 640, height: int = 360, dt: float = 0.16, max_iter: int = 500
) -> GRScene:
    return GRScene(flat_scene(width, height), dt, max_iter)
