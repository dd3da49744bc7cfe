import math

import pytest

from blackhole.camera import MAX_PITCH, MAX_RADIUS, MIN_RADIUS, Camera
from blackhole.config import RenderSettings


def test_camera_orbits_at_radius_looking_at_center():
    camera = Camera(radius=15.0, yaw=0.4, pitch=0.3)
    assert camera.position.length() == pytest.approx(15.0)
    to_center = (camera.center - camera.position).normalize()
    assert camera.forward.dot(to_center) == pytest.approx(1.0)


def test_basis_is_orthonormal():
    camera = Camera(yaw=1.1, pitch=-0.5)
    for axis in (camera.forward, camera.right, camera.up):
        assert axis.length() == pytest.approx(1.0)
    assert camera.forward.dot(camera.right) == pytest.approx(0.0, abs=1e-12)
    assert camera.forward.dot(camera.up) == pytest.approx(0.0, abs=1e-12)
    assert camera.right.dot(camera.up) == pytest.approx(0.0, abs=1e-12)


def test_center_ray_follows_forward():
    camera = Camera()
    origin, direction = camera.get_ray(0.0, 0.0, 4.0 / 3.0)
    assert origin == camera.position
    assert direction.dot(camera.forward) == pytest.approx(1.0)


def test_screen_axes_map_to_camera_axes():
    camera = Camera()
    _, right = camera.get_ray(1.0, 0.0, 1.0)
    _, top = camera.get_ray(0.0, 1.0, 1.0)
    assert right.length() == pytest.approx(1.0)
    assert right.dot(camera.right) > 0.0
    assert top.dot(camera.up) > 0.0


def test_ninety_degree_fov_edge_is_45_degrees_off_axis():
    camera = Camera(fov_degrees=90.0)
    _, edge = camera.get_ray(0.0, 1.0, 1.0)
    assert math.acos(edge.dot(camera.forward)) == pytest.approx(math.pi / 4)


def test_pitch_and_radius_are_clamped():
    camera = Camera(radius=1000.0, pitch=3.0)
    assert camera.pitch == pytest.approx(MAX_PITCH)
    assert camera.radius == MAX_RADIUS

    camera.on_scroll(1000.0)
    assert camera.radius == MIN_RADIUS


def test_drag_rotates_only_while_pressed():
    camera = Camera(yaw=0.0, pitch=0.0)
    camera.on_mouse_move(100.0, 50.0)
    assert camera.yaw == 0.0

    camera.on_mouse_button(True)
    camera.on_mouse_move(120.0, 60.0)
    assert camera.yaw == pytest.approx(-20.0 * camera.mouse_sensitivity)
    assert camera.pitch == pytest.approx(10.0 * camera.mouse_sensitivity)

    camera.on_mouse_button(False)
    camera.on_mouse_move(500.0, 500.0)
    assert camera.yaw == pytest.approx(-20.0 * camera.mouse_sensitivity)


def test_keyboard_pans_orbit_center():
    camera = Camera()
    camera.process_keyboard(e=True)
    assert camera.center.y == pytest.approx(camera.move_speed)

    before = camera.center
    camera.process_keyboard(w=True)
    moved = camera.center - before
    assert moved.y == 0.0
    assert moved.length() == pytest.approx(camera.move_speed)


def test_from_settings():
    camera = Camera.from_settings(RenderSettings(radius=30.0, yaw=0.2, pitch=0.1, fov_degrees=60.0))
    assert camera.radius == 30.0
    assert camera.fov_scale == pytest.approx(math.tan(math.radians(30.0)))


def test_clamped_values_stay_plain_floats():
    camera = Camera(radius=1.0, pitch=-3.0)
    assert type(camera.radius) is float
    assert type(camera.pitch) is float
    assert camera.pitch == pytest.approx(-MAX_PITCH)
    assert camera.radius == MIN_RADIUS
