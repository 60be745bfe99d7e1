"""Tiled, multi-threaded render engine.

The image is cut into square tiles (clipped at the right and bottom
edges). Every tile becomes one task on a bounded thread pool; a task walks
its pixels in row order, asks the scene for each colour and posts
``(x, y, colour)`` on a bounded channel. The calling thread is the only
consumer and the only writer of the output buffer, so pixel writes need no
locking. Tasks finish in any order, but each pixel is computed by exactly
one task, so the final image does not depend on scheduling.

Pixels that cannot be placed (outside the image, or undeliverable because
the consumer has gone away) are counted as misses and reported as a
warning once the image is assembled.

Works with anything that has ``color_at(x, y)`` and ``dimensions()``,
i.e. both ``Scene`` and ``GRScene``.
"""

import logging
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, Optional, Tuple

import numpy as np

from lensing.color import to_rgba8
from lensing.config import RenderConfig
from lensing.errors import RenderSetupError
from lensing.scene import Renderable

logger = logging.getLogger(__name__)

Tile = Tuple[int, int, int, int]
ProgressCallback = Callable[[float, str], None]

# posted by every tile task once it is done, whatever happened
_TILE_DONE = object()


def iter_tiles(width: int, height: int, tile_size: int) -> Iterator[Tile]:
    """Yield (x, y, w, h) tiles covering the image, row by row."""
    for y0 in range(0, height, tile_size):
        for x0 in range(0, width, tile_size):
            yield x0, y0, min(tile_size, width - x0), min(tile_size, height - y0)


def tile_pixels(tile: Tile) -> Iterator[Tuple[int, int]]:
    x0, y0, w, h = tile
    for dy in range(h):
        for dx in range(w):
            yield x0 + dx, y0 + dy


class MissCounter:
    def __init__(self):
        self._lock = threading.Lock()
        self._count = 0

    def add(self, n: int = 1):
        with self._lock:
            self._count += n

    @property
    def value(self) -> int:
        with self._lock:
            return self._count


class PixelChannel:
    """Bounded multi-producer / single-consumer message queue.

    ``send`` blocks while the queue is full and gives up (returns False) once
    the consumer has closed the channel.
    """

    def __init__(self, capacity: int, poll_interval: float = 0.05):
        self._queue = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._poll_interval = poll_interval

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, message) -> bool:
        while not self._closed.is_set():
            try:
                self._queue.put(message, timeout=self._poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def receive(self):
        return self._queue.get()

    def close(self):
        self._closed.set()


def _render_tile(
    scene: Renderable, tile: Tile, channel: PixelChannel, misses: MissCounter
):
    handled = 0
    try:
        for x, y in tile_pixels(tile):
            if channel.closed or not channel.send((x, y, scene.color_at(x, y))):
                misses.add()
            handled += 1
    except Exception:
        _, _, w, h = tile
        logger.exception("Tile %s failed after %d pixels", tile, handled)
        misses.add(w * h - handled)
    finally:
        channel.send(_TILE_DONE)


def _status(num_misses: int) -> str:
    if num_misses > 0:
        return f"Raytracing ({num_misses} missed/overshot pixels)..."
    return "Raytracing..."


def render(
    scene: Renderable,
    progress: Optional[ProgressCallback] = None,
    config: Optional[RenderConfig] = None,
) -> np.ndarray:
    """Render every pixel of scene and return an (height, width, 4) uint8 image.

    progress, if given, is called as progress(fraction, status) on the
    calling thread: once at 0.0, every ``config.progress_interval`` pixels,
    and once at 1.0 when the image is complete. Keep it fast, the consumer
    stalls while it runs.
    """
    config = config if config is not None else RenderConfig()
    if hasattr(scene, "snapshot"):
        scene = scene.snapshot()

    width, height = scene.dimensions()
    total = width * height
    num_workers = min(os.cpu_count() or 1, config.max_workers)
    tiles = list(iter_tiles(width, height, config.tile_size))

    try:
        image = np.zeros((height, width, 4), dtype=np.uint8)
    except (MemoryError, ValueError) as exc:
        raise RenderSetupError(f"Couldn't create a {width}x{height} image") from exc

    try:
        executor = ThreadPoolExecutor(
            max_workers=num_workers, thread_name_prefix="lensing-tile"
        )
    except (RuntimeError, ValueError) as exc:
        raise RenderSetupError("Cannot set up the render thread pool") from exc

    logger.info(
        "Rendering %dx%d with %d workers over %d tiles",
        width,
        height,
        num_workers,
        len(tiles),
    )

    channel = PixelChannel(config.channel_capacity)
    misses = MissCounter()

    try:
        if progress is not None:
            progress(0.0, "Starting...")

        try:
            for tile in tiles:
                executor.submit(_render_tile, scene, tile, channel, misses)
        except RuntimeError as exc:
            raise RenderSetupError("Cannot start render workers") from exc

        received = 0
        finished = 0
        while finished < len(tiles):
            message = channel.receive()
            if message is _TILE_DONE:
                finished += 1
                continue

            if progress is not None and received % config.progress_interval == 0:
                progress(min(received / total, 1.0), _status(misses.value))
            received += 1

            x, y, col = message
            if 0 <= x < width and 0 <= y < height:
                image[y, x] = to_rgba8(col)
            else:
                misses.add()
    finally:
        channel.close()
        executor.shutdown(wait=True)

    num_misses = misses.value
    if num_misses > 0:
        logger.warning("Missed/overshot %d pixels", num_misses)

    if progress is not None:
        progress(1.0, "Done.")
    return image
