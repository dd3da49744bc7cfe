import math

import numpy as np

from .vec3 import Vector3

WORLD_UP = Vector3(0.0, 1.0, 0.0)
MAX_PITCH = math.radians(89.0)
MIN_RADIUS = 2.5
MAX_RADIUS = 200.0


class Camera:
    """
    Orbit camera revolving around ``center``.

    Input handlers live on the camera itself; whoever receives device
    events passes the camera in explicitly.
    """

    def __init__(self, radius=15.0, yaw=0.0, pitch=0.3, fov_degrees=90.0, center=None):
        self.yaw = yaw
        self.pitch = pitch
        self.radius = radius
        self.center = center if center is not None else Vector3()
        self.fov_scale = math.tan(math.radians(fov_degrees) * 0.5)

        self.mouse_sensitivity = 0.005
        self.scroll_sensitivity = 1.2
        self.move_speed = 0.3

        self.dragging = False
        self.last_x = 0.0
        self.last_y = 0.0

        self.update()

    @classmethod
    def from_settings(cls, settings):
        return cls(
            radius=settings.radius,
            yaw=settings.yaw,
            pitch=settings.pitch,
            fov_degrees=settings.fov_degrees,
        )

    def update(self):
        # Clamp to avoid gimbal lock at the poles
        self.pitch = float(np.clip(self.pitch, -MAX_PITCH, MAX_PITCH))
        self.radius = float(np.clip(self.radius, MIN_RADIUS, MAX_RADIUS))

        cos_p = math.cos(self.pitch)
        self.position = self.center + Vector3(
            self.radius * cos_p * math.sin(self.yaw),
            self.radius * math.sin(self.pitch),
            self.radius * cos_p * math.cos(self.yaw),
        )

        self.forward = (self.center - self.position).normalize()
        self.right = self.forward.cross(WORLD_UP).normalize()
        self.up = self.right.cross(self.forward).normalize()

    def get_ray(self, u, v, aspect):
        """Map normalized screen coords in [-1, 1] to (origin, unit direction)."""
        direction = (
            self.forward
            + self.right * (u * aspect * self.fov_scale)
            + self.up * (v * self.fov_scale)
        )
        return self.position, direction.normalize()

    # --- Input handling ---

    def on_mouse_button(self, pressed):
        self.dragging = pressed

    def on_mouse_move(self, xpos, ypos):
        if self.dragging:
            dx = xpos - self.last_x
            dy = ypos - self.last_y
            self.yaw -= dx * self.mouse_sensitivity
            self.pitch += dy * self.mouse_sensitivity
            self.update()
        self.last_x = xpos
        self.last_y = ypos

    def on_scroll(self, yoffset):
        self.radius -= yoffset * self.scroll_sensitivity
        self.update()

    def process_keyboard(self, w=False, s=False, a=False, d=False, q=False, e=False):
        if not any((w, s, a, d, q, e)):
            return

        # Pan in the XZ plane
        pan_forward = Vector3(self.forward.x, 0.0, self.forward.z).normalize()
        pan_right = Vector3(self.right.x, 0.0, self.right.z).normalize()

        if w:
            self.center = self.center + pan_forward * self.move_speed
        if s:
            self.center = self.center - pan_forward * self.move_speed
        if d:
            self.center = self.center + pan_right * self.move_speed
        if a:
            self.center = self.center - pan_right * self.move_speed
        if e:
            self.center = self.center + WORLD_UP * self.move_speed
        if q:
            self.center = self.center - WORLD_UP * self.move_speed

        self.update()
