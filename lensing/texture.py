"""Image textures sampled by (u, v) coordinates.

u runs along the image width and v along its height, both in [0, 1] for the
visible image. What happens outside that range depends on the edge mode.
Sampling itself goes through scipy.ndimage.map_coordinates: order 0 for
nearest-texel lookups, order 1 for bilinear filtering.
"""

from enum import Enum

import matplotlib.image as mpimg
import numpy as np
from scipy import ndimage

from lensing import color
from lensing.errors import TextureError


class Filtering(Enum):
    NEAREST = 0
    BILINEAR = 1


class EdgeMode(Enum):
    CLAMP = "nearest"
    REPEAT = "grid-wrap"
    TRANSPARENT = "transparent"


def _as_rgba(image) -> np.ndarray:
    img = np.asarray(image)
    if img.dtype == np.uint8:
        img = img.astype(float) / 255.0
    else:
        img = img.astype(float)

    if img.ndim == 2:
        img = np.stack([img, img, img], axis=-1)
    if img.ndim != 3 or img.shape[2] not in (3, 4):
        raise TextureError(f"unsupported texture shape {np.asarray(image).shape}")
    if img.shape[0] == 0 or img.shape[1] == 0:
        raise TextureError("texture image is empty")
    if img.shape[2] == 3:
        alpha = np.ones(img.shape[:2] + (1,), dtype=float)
        img = np.concatenate([img, alpha], axis=-1)
    return img


class Texture:
    def __init__(
        self,
        image,
        filtering: Filtering = Filtering.NEAREST,
        mode: EdgeMode = EdgeMode.REPEAT,
    ):
        self.image = _as_rgba(image)
        # shared by every render worker, never written after construction
        self.image.setflags(write=False)
        self.filtering = filtering
        self.mode = mode

    @classmethod
    def load(
        cls,
        path,
        filtering: Filtering = Filtering.NEAREST,
        mode: EdgeMode = EdgeMode.REPEAT,
    ) -> "Texture":
        try:
            image = mpimg.imread(path)
        except (OSError, ValueError) as exc:
            raise TextureError(f"cannot read texture {path}: {exc}") from exc
        return cls(image, filtering, mode)

    @property
    def size(self):
        """(width, height) in texels."""
        return self.image.shape[1], self.image.shape[0]

    def uv(self, coords) -> np.ndarray:
        u, v = float(coords[0]), float(coords[1])
        mode = self.mode.value
        if self.mode is EdgeMode.TRANSPARENT:
            if not (0.0 <= u <= 1.0 and 0.0 <= v <= 1.0):
                return color.TRANSPARENT.copy()
            # inside the image the edge texels are clamped, never blended away
            mode = EdgeMode.CLAMP.value
        width, height = self.size
        # texel centres sit at half-integer positions
        points = np.array([[v * height - 0.5], [u * width - 0.5]])
        return np.array(
            [
                ndimage.map_coordinates(
                    self.image[..., c],
                    points,
                    order=self.filtering.value,
                    mode=mode,
                )[0]
                for c in range(4)
            ]
        )

    def __repr__(self):
        width, height = self.size
        return (
            f"Texture({width}x{height}, {self.filtering.name.lower()}, "
            f"{self.mode.name.lower()})"
        )


def uniform(col, width: int = 1, height: int = 1) -> Texture:
    image = np.broadcast_to(np.asarray(col, dtype=float), (height, width, 4))
    return Texture(image.copy(), Filtering.NEAREST, EdgeMode.REPEAT)


def checkerboard(
    width: int,
    height: int,
    color_a,
    color_b,
    filtering: Filtering = Filtering.NEAREST,
    mode: EdgeMode = EdgeMode.REPEAT,
) -> Texture:
    """Alternate color_a / color_b texel by texel, color_a at (0, 0)."""
    yy, xx = np.mgrid[0:height, 0:width]
    even = ((xx + yy) % 2 == 0)[..., None]
    image = np.where(
        even, np.asarray(color_a, dtype=float), np.asarray(color_b, dtype=float)
    )
    return Texture(image, filtering, mode)


def default_background() -> Texture:
    """Yellow/cyan 50x50 checkerboard sky."""
    return checkerboard(
        50, 50, color.rgba(1.0, 1.0, 0.0), color.rgba(0.0, 1.0, 1.0)
    )
