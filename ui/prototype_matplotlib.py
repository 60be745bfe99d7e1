"""Small runnable script: low-res render of the demo scene using matplotlib.

Run:
    python -m ui.prototype_matplotlib

Renders the warped (Schwarzschild) scene at 160x90 and displays it. Pass
mode="flat" to main() for the straight-ray version, or output="out.png" to
also save the image.
"""

import logging
import time

import matplotlib.pyplot as plt

from lensing.presets import flat_scene, warped_scene
from lensing.renderer import render


def print_progress(fraction: float, status: str):
    print(f"render: {100.0 * fraction:5.1f}% {status}", end="\r", flush=True)


def main(
    mode: str = "warped", width: int = 160, height: int = 90, output=None, show=True
):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if mode == "flat":
        scene = flat_scene(width, height)
    elif mode == "warped":
        scene = warped_scene(width, height)
    else:
        raise ValueError(f"unknown mode {mode!r}, expected 'flat' or 'warped'")

    print(f"Starting {mode} render ({width}x{height}).")
    start = time.perf_counter()
    img = render(scene, print_progress)
    print(f"\nDone in {time.perf_counter() - start:.2f} s.")

    if output is not None:
        plt.imsave(output, img)

    if show:
        plt.figure(figsize=(8, 8 * height / width))
        plt.imshow(img)
        plt.axis("off")
        plt.title(f"lensing prototype ({mode}, {width}x{height})")
        plt.show()
    return img


if __name__ == "__main__":
    main()
