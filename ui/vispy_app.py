# ui/vispy_app.py
"""
VisPy interactive viewer for the lensing renderer.
The CPU renderer draws a low-res frame which is uploaded as a texture on a
fullscreen quad. Drag to orbit the camera around the sphere, scroll to zoom
(field of view). Every change renders a fresh scene snapshot.
Run:
    python -m ui.vispy_app
"""

import logging

import numpy as np
from scipy.spatial.transform import Rotation
from vispy import app, gloo

from lensing.presets import flat_scene
from lensing.renderer import render
from lensing.schwarzschild import GRScene

logger = logging.getLogger(__name__)

FRAG_SHADER = """
uniform sampler2D u_frame;
varying vec2 v_texcoord;

void main() {
    gl_FragColor = texture2D(u_frame, v_texcoord);
}
"""

VERT_SHADER = """
attribute vec2 a_position;
attribute vec2 a_texcoord;
varying vec2 v_texcoord;
void main() {
    v_texcoord = a_texcoord;
    gl_Position = vec4(a_position, 0.0, 1.0);
}
"""


def orbit_rotation(rotation: Rotation, dx: float, dy: float, sensitivity=0.005):
    """Yaw about the world z axis, pitch about the camera's own x axis."""
    yaw = Rotation.from_rotvec([0.0, 0.0, -dx * sensitivity])
    pitch = Rotation.from_rotvec([-dy * sensitivity, 0.0, 0.0])
    return yaw * rotation * pitch


def orbit_position(rotation: Rotation, distance: float) -> np.ndarray:
    """Camera position at distance from the origin, looking at it."""
    return rotation.apply([0.0, 0.0, distance])


class LensingCanvas(app.Canvas):
    def __init__(self, frame_size=(128, 72), warped=True, dt=0.16, max_iter=500):
        app.Canvas.__init__(
            self, title="Black Hole Lensing", size=(960, 540), keys="interactive"
        )
        self.warped = warped
        self.dt = dt
        self.max_iter = max_iter
        self.fov = 30.0
        self.distance = 12.0
        self.rotation = Rotation.from_euler("x", 84.0, degrees=True)
        self.scene = flat_scene(*frame_size)

        # Fullscreen quad, texture row 0 at the top
        self.program = gloo.Program(VERT_SHADER, FRAG_SHADER)
        self.program["a_position"] = gloo.VertexBuffer(
            np.array([[-1, -1], [-1, +1], [+1, -1], [+1, +1]], dtype=np.float32)
        )
        self.program["a_texcoord"] = gloo.VertexBuffer(
            np.array([[0, 1], [0, 0], [1, 1], [1, 0]], dtype=np.float32)
        )
        self.indices = gloo.IndexBuffer(np.array([0, 1, 2, 1, 2, 3], dtype=np.uint32))
        self.texture = gloo.Texture2D(
            np.zeros(frame_size[::-1] + (4,), dtype=np.uint8), interpolation="nearest"
        )
        self.program["u_frame"] = self.texture

        gloo.set_state(clear_color="black")
        self.refresh()
        self.show()

    def current_scene(self):
        self.scene.set_camera(
            position=orbit_position(self.rotation, self.distance),
            rotation=self.rotation,
            fov=self.fov,
        )
        if self.warped:
            return GRScene(self.scene, self.dt, self.max_iter)
        return self.scene

    def refresh(self):
        self.texture.set_data(render(self.current_scene()))
        self.update()

    def on_draw(self, event):
        gloo.clear()
        gloo.set_viewport(0, 0, *self.physical_size)
        self.program.draw("triangles", self.indices)

    def on_mouse_wheel(self, event):
        self.fov = float(np.clip(self.fov - event.delta[1], 10.0, 90.0))
        self.refresh()

    def on_mouse_release(self, event):
        if event.button == 1 and event.press_event is not None:
            dx, dy = event.pos - event.press_event.pos
            self.rotation = orbit_rotation(self.rotation, dx, dy)
            self.refresh()

    def on_key_press(self, event):
        if event.text == "w":
            self.warped = not self.warped
            logger.info("Switched to %s spacetime", "warped" if self.warped else "flat")
            self.refresh()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    c = LensingCanvas()
    app.run()
