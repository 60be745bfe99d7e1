import numpy as np
import pytest

from lensing.emission import disk_emissivity, disk_texture, warm_ramp
from lensing.presets import flat_scene, star_field, warped_scene
from lensing.renderer import render
from lensing.schwarzschild import GRScene


def test_emissivity_power_law():
    assert disk_emissivity(5.0) == 0.0
    assert disk_emissivity(41.0) == 0.0
    assert disk_emissivity(6.0) == 1.0
    assert np.isclose(disk_emissivity(12.0, q=3.0), 1.0 / 8.0)


def test_warm_ramp_is_opaque_and_clipped():
    assert np.allclose(warm_ramp(0.0), [0.0, 0.0, 0.0, 1.0])
    assert np.allclose(warm_ramp(5.0), warm_ramp(1.0))


def test_disk_texture_fades_outwards():
    tex = disk_texture(2.0, 3.0, q=3.0)
    inner = tex.uv((0.0, 0.5))
    outer = tex.uv((1.0, 0.5))
    assert inner[0] > outer[0] > 0.0
    # same brightness all the way round
    assert np.allclose(tex.uv((0.5, 0.1)), tex.uv((0.5, 0.9)))


def test_disk_texture_radii_validated():
    with pytest.raises(ValueError):
        disk_texture(3.0, 2.0)


def test_star_field_is_reproducible():
    assert np.array_equal(star_field(seed=3).image, star_field(seed=3).image)


def test_presets_point_camera_at_sphere():
    scene = flat_scene(16, 9)
    assert scene.dimensions() == (16, 9)
    to_sphere = scene.sphere.position - scene.camera.position
    to_sphere /= np.linalg.norm(to_sphere)
    assert np.dot(scene.camera.forward, to_sphere) > 0.99
    assert scene.ring is not None


def test_warped_preset_renders():
    scene = warped_scene(8, 6, dt=0.2, max_iter=120)
    assert isinstance(scene, GRScene)
    img = render(scene)
    assert img.shape == (6, 8, 4)
    assert np.all(img[..., 3] == 255)
