import logging

import numpy as np
import pytest

import lensing.renderer
from conftest import SKY_COLOR, SPHERE_COLOR, CoordinateScene, make_scene
from lensing.color import to_rgba8
from lensing.config import RenderConfig
from lensing.renderer import (
    MissCounter,
    PixelChannel,
    _render_tile,
    iter_tiles,
    render,
    tile_pixels,
)
from lensing.schwarzschild import GRScene


def test_tiles_are_clipped_to_image():
    tiles = list(iter_tiles(70, 40, 32))
    assert tiles == [
        (0, 0, 32, 32),
        (32, 0, 32, 32),
        (64, 0, 6, 32),
        (0, 32, 32, 8),
        (32, 32, 32, 8),
        (64, 32, 6, 8),
    ]
    assert sum(w * h for _, _, w, h in tiles) == 70 * 40


def test_tile_pixels_row_major():
    assert list(tile_pixels((3, 3, 2, 2))) == [(3, 3), (4, 3), (3, 4), (4, 4)]
    assert list(tile_pixels((0, 0, 0, 0))) == []


def test_every_pixel_written_exactly_once():
    scene = CoordinateScene(37, 23)
    img = render(scene, config=RenderConfig(tile_size=8, max_workers=4))

    assert img.shape == (23, 37, 4)
    assert img.dtype == np.uint8
    assert len(scene.calls) == 37 * 23
    assert set(scene.calls.values()) == {1}
    ys, xs = np.mgrid[0:23, 0:37]
    assert np.array_equal(img[..., 0], xs)
    assert np.array_equal(img[..., 1], ys)
    assert np.all(img[..., 3] == 255)


def test_render_is_deterministic_across_worker_counts():
    scene = make_scene(24, 16)
    first = render(scene, config=RenderConfig(tile_size=4, max_workers=1))
    second = render(scene, config=RenderConfig(tile_size=4, max_workers=8))
    third = render(scene, config=RenderConfig(tile_size=5, max_workers=8))
    assert np.array_equal(first, second)
    assert np.array_equal(first, third)


def test_disc_on_background_end_to_end():
    scene = make_scene(10, 10)
    img = render(scene)
    again = render(scene)

    assert img.shape == (10, 10, 4)
    assert img.tobytes() == again.tobytes()

    sphere_px = to_rgba8(SPHERE_COLOR)
    sky_px = to_rgba8(SKY_COLOR)
    assert np.array_equal(img[5, 5], sphere_px)
    border = np.concatenate([img[0], img[-1], img[:, 0], img[:, -1]])
    assert all(np.array_equal(px, sky_px) for px in border)
    # nothing but the two colours
    flat = img.reshape(-1, 4)
    is_sphere = np.all(flat == sphere_px, axis=1)
    is_sky = np.all(flat == sky_px, axis=1)
    assert np.all(is_sphere | is_sky)
    assert 1 < is_sphere.sum() < 100


def test_render_curved_scene():
    img = render(GRScene(make_scene(10, 10), 0.1, 100))
    assert img.shape == (10, 10, 4)
    assert np.array_equal(img[5, 5], to_rgba8(SPHERE_COLOR))


def test_render_uses_a_snapshot():
    scene = make_scene(8, 8)
    reference = render(scene)

    def move_camera(fraction, status):
        scene.set_camera(position=(0.0, 0.0, 50.0))

    assert np.array_equal(render(scene, move_camera), reference)


def test_progress_reports():
    calls = []
    render(
        CoordinateScene(9, 7),
        lambda p, s: calls.append((p, s)),
        RenderConfig(tile_size=4, progress_interval=1),
    )
    assert calls[0] == (0.0, "Starting...")
    assert calls[-1] == (1.0, "Done.")
    fractions = [p for p, _ in calls]
    assert fractions == sorted(fractions)
    assert all(0.0 <= p <= 1.0 for p in fractions)
    assert sum(s == "Raytracing..." for _, s in calls) == 9 * 7


def test_progress_interval():
    calls = []
    render(
        CoordinateScene(10, 10),
        lambda p, s: calls.append(s),
        RenderConfig(progress_interval=40),
    )
    # messages 0, 40 and 80, plus start and done
    assert len(calls) == 5


def test_no_misses_for_clipped_tiles(caplog):
    with caplog.at_level(logging.WARNING, logger="lensing.renderer"):
        render(CoordinateScene(33, 17), config=RenderConfig(tile_size=8))
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_overshooting_tiles_are_counted(monkeypatch, caplog):
    monkeypatch.setattr(
        lensing.renderer, "iter_tiles", lambda w, h, size: iter([(0, 0, w + 1, h)])
    )
    statuses = []
    scene = CoordinateScene(4, 3)
    with caplog.at_level(logging.WARNING, logger="lensing.renderer"):
        img = render(
            scene,
            lambda p, s: statuses.append(s),
            RenderConfig(progress_interval=1),
        )

    assert "Missed/overshot 3 pixels" in caplog.text
    assert any("missed/overshot" in s for s in statuses)
    ys, xs = np.mgrid[0:3, 0:4]
    assert np.array_equal(img[..., 0], xs)
    assert np.array_equal(img[..., 1], ys)


class FailingScene(CoordinateScene):
    def color_at(self, x, y):
        if (x, y) == (1, 1):
            raise ZeroDivisionError("bad pixel")
        return super().color_at(x, y)


def test_failing_tile_does_not_abort_render(caplog):
    with caplog.at_level(logging.WARNING, logger="lensing.renderer"):
        img = render(FailingScene(4, 4), config=RenderConfig(tile_size=2))

    assert "Tile (0, 0, 2, 2) failed" in caplog.text
    assert "Missed/overshot 1 pixels" in caplog.text
    assert np.array_equal(img[1, 1], [0, 0, 0, 0])
    assert np.array_equal(img[0, 1], [1, 0, 0, 255])
    assert np.array_equal(img[3, 3], [3, 3, 0, 255])


def test_consumer_failure_stops_workers():
    def stop(fraction, status):
        if status.startswith("Raytracing"):
            raise RuntimeError("stop")

    scene = CoordinateScene(64, 64)
    with pytest.raises(RuntimeError, match="stop"):
        render(scene, stop, RenderConfig(tile_size=8, channel_capacity=1))

    # producers noticed the closed channel and stopped computing pixels
    assert sum(scene.calls.values()) < 64 * 64


def test_tile_on_closed_channel_counts_every_pixel_as_missed():
    scene = CoordinateScene(8, 8)
    channel = PixelChannel(4, poll_interval=0.01)
    channel.close()
    misses = MissCounter()

    _render_tile(scene, (0, 0, 8, 4), channel, misses)

    assert misses.value == 8 * 4
    assert not scene.calls
