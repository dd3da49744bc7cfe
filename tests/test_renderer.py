import numpy as np
import pytest

from blackhole import constants, renderer
from blackhole.camera import Camera
from blackhole.physics import HitRecord, HitTarget, NonFiniteStateError
from blackhole.renderer import (
    ERROR_PIXEL,
    OPAQUE_BLACK,
    color_for,
    new_pixel_buffer,
    pack_color,
    partition_rows,
    render_frame,
    unpack_rgba,
)
from blackhole.vec3 import Vector3

# Tiny frames keep the pure-Python tracer quick
WIDTH = 5
HEIGHT = 5


@pytest.mark.parametrize("height", [0, 1, 7, 10, 101])
@pytest.mark.parametrize("workers", [1, 3, 7, 13])
def test_partition_covers_every_row_once(height, workers):
    bands = partition_rows(height, workers)
    assert len(bands) == workers
    rows = [y for start, end in bands for y in range(start, end)]
    assert rows == list(range(height))


def test_partition_last_band_takes_remainder():
    assert partition_rows(10, 3) == [(0, 3), (3, 6), (6, 10)]


def test_partition_rejects_bad_arguments():
    with pytest.raises(ValueError):
        partition_rows(10, 0)
    with pytest.raises(ValueError):
        partition_rows(-1, 2)


def test_pack_color_byte_order():
    assert pack_color(0x11, 0x22, 0x33) == 0xFF332211
    rgba = unpack_rgba(np.array([pack_color(1, 2, 3, 4)], dtype=np.uint32), 1, 1)
    assert rgba[0, 0].tolist() == [1, 2, 3, 4]


def test_new_buffer_is_opaque_black():
    buffer = new_pixel_buffer(4, 3)
    assert buffer.dtype == np.uint32
    assert buffer.shape == (12,)
    assert (buffer == OPAQUE_BLACK).all()


def test_every_outcome_has_a_color():
    origin = Vector3()
    for target in HitTarget:
        assert color_for(HitRecord(target, 0, origin)) >> 24 == 0xFF
    assert color_for(HitRecord(HitTarget.TIMED_OUT, 0, origin)) == pack_color(*constants.SKY_COLOR)


def test_center_pixel_sees_the_black_hole():
    buffer = new_pixel_buffer(WIDTH, HEIGHT)
    render_frame(buffer, WIDTH, HEIGHT, Camera(), workers=2)
    center = (HEIGHT // 2) * WIDTH + WIDTH // 2
    assert buffer[center] == pack_color(*constants.BLACK_HOLE_COLOR)


def test_frame_is_fully_written():
    buffer = new_pixel_buffer(WIDTH, HEIGHT)
    buffer[:] = 0
    render_frame(buffer, WIDTH, HEIGHT, Camera(), workers=3)
    assert (buffer != 0).all()


def test_output_independent_of_worker_count():
    camera = Camera(radius=15.0, yaw=0.5, pitch=0.25)
    frames = []
    for workers in (1, 3, 7):
        buffer = new_pixel_buffer(WIDTH, HEIGHT)
        render_frame(buffer, WIDTH, HEIGHT, camera, workers=workers)
        frames.append(buffer)
    assert frames[0].tobytes() == frames[1].tobytes() == frames[2].tobytes()


def test_repeated_render_is_identical():
    camera = Camera()
    first = new_pixel_buffer(WIDTH, HEIGHT)
    second = new_pixel_buffer(WIDTH, HEIGHT)
    render_frame(first, WIDTH, HEIGHT, camera, workers=2)
    render_frame(second, WIDTH, HEIGHT, camera, workers=2)
    assert first.tobytes() == second.tobytes()


def test_buffer_size_mismatch_is_rejected():
    with pytest.raises(ValueError):
        render_frame(new_pixel_buffer(3, 3), 4, 4, Camera())


def test_numeric_failure_only_marks_its_own_pixel(monkeypatch):
    calls = {"n": 0}

    def flaky_trace(photon, config=None):
        calls["n"] += 1
        if calls["n"] == 1:
            raise NonFiniteStateError("boom")
        return HitRecord(HitTarget.BACKGROUND_SKY, 0, photon.position)

    monkeypatch.setattr(renderer, "trace_photon", flaky_trace)
    buffer = new_pixel_buffer(3, 2)
    render_frame(buffer, 3, 2, Camera(), workers=1)

    assert buffer[0] == ERROR_PIXEL
    assert (buffer[1:] == pack_color(*constants.SKY_COLOR)).all()


def test_unexpected_pixel_error_stays_local(monkeypatch):
    calls = {"n": 0}

    def broken_trace(photon, config=None):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("pixel died")
        return HitRecord(HitTarget.ACCRETION_DISK, 0, photon.position)

    monkeypatch.setattr(renderer, "trace_photon", broken_trace)
    buffer = new_pixel_buffer(3, 1)
    render_frame(buffer, 3, 1, Camera(), workers=1)

    disk = pack_color(*constants.DISK_COLOR)
    assert buffer.tolist() == [disk, ERROR_PIXEL, disk]


class RecordingCamera:
    def __init__(self):
        self.calls = []

    def get_ray(self, u, v, aspect):
        self.calls.append((u, v, aspect))
        return Vector3(30.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0)


def test_pixel_centres_map_to_flipped_ndc():
    camera = RecordingCamera()
    render_frame(new_pixel_buffer(4, 2), 4, 2, camera, workers=1)

    assert camera.calls[0] == (-0.75, 0.5, 2.0)
    assert camera.calls[3] == (0.75, 0.5, 2.0)
    assert camera.calls[4] == (-0.75, -0.5, 2.0)
    assert len(camera.calls) == 8
