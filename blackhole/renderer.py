"""
CPU frame renderer.

Rows are split into contiguous bands, one per worker thread. Each worker
writes only inside its own band, so the shared pixel buffer needs no
locking during a frame.
"""
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from . import constants
from .physics import HitTarget, NonFiniteStateError, Photon, trace_photon

logger = logging.getLogger(__name__)


def pack_color(r, g, b, a=255):
    # 0xAABBGGRR: little-endian bytes come out as R, G, B, A
    return (a << 24) | (b << 16) | (g << 8) | r


OPAQUE_BLACK = pack_color(0, 0, 0)
ERROR_PIXEL = pack_color(*constants.ERROR_COLOR)

_OUTCOME_COLORS = {
    HitTarget.BLACK_HOLE: pack_color(*constants.BLACK_HOLE_COLOR),
    HitTarget.ACCRETION_DISK: pack_color(*constants.DISK_COLOR),
    HitTarget.BACKGROUND_SKY: pack_color(*constants.SKY_COLOR),
    HitTarget.TIMED_OUT: pack_color(*constants.SKY_COLOR),
}


def color_for(hit):
    return _OUTCOME_COLORS[hit.target]


def new_pixel_buffer(width, height):
    return np.full(width * height, OPAQUE_BLACK, dtype=np.uint32)


def unpack_rgba(buffer, width, height):
    """Split packed pixels into a (height, width, 4) uint8 RGBA image."""
    packed = np.asarray(buffer, dtype=np.uint32).reshape(height, width)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = packed & 0xFF
    rgba[..., 1] = (packed >> 8) & 0xFF
    rgba[..., 2] = (packed >> 16) & 0xFF
    rgba[..., 3] = (packed >> 24) & 0xFF
    return rgba


def default_worker_count():
    return os.cpu_count() or constants.FALLBACK_WORKERS


def partition_rows(height, workers):
    """Split [0, height) into `workers` bands; the last one takes the remainder."""
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    if height < 0:
        raise ValueError(f"height must be non-negative, got {height}")

    rows_per_worker = height // workers
    bands = []
    for i in range(workers):
        start_y = i * rows_per_worker
        end_y = height if i == workers - 1 else start_y + rows_per_worker
        bands.append((start_y, end_y))
    return bands


def render_band(buffer, width, height, start_y, end_y, camera, config=None):
    aspect = width / height
    for y in range(start_y, end_y):
        v = 1.0 - 2.0 * (y + 0.5) / height
        row = y * width
        for x in range(width):
            u = 2.0 * (x + 0.5) / width - 1.0
            try:
                origin, direction = camera.get_ray(u, v, aspect)
                hit = trace_photon(Photon(origin, direction), config)
            except NonFiniteStateError as e:
                logger.debug("Pixel (%d, %d) failed: %s", x, y, e)
                buffer[row + x] = ERROR_PIXEL
                continue
            except Exception:
                # Failures stay local to their pixel
                logger.warning("Pixel (%d, %d) raised", x, y, exc_info=True)
                buffer[row + x] = ERROR_PIXEL
                continue
            buffer[row + x] = color_for(hit)


def render_frame(buffer, width, height, camera, config=None, workers=None):
    """
    Trace every pixel of the frame into `buffer` (row-major, y * width + x).

    Returns once all bands are finished.
    """
    if len(buffer) != width * height:
        raise ValueError(
            f"buffer holds {len(buffer)} pixels, expected {width}x{height}={width * height}"
        )
    if workers is None:
        workers = default_worker_count()

    bands = [band for band in partition_rows(height, workers) if band[0] < band[1]]
    if not bands:
        return

    start = time.perf_counter()
    with ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="band") as pool:
        futures = [
            pool.submit(render_band, buffer, width, height, start_y, end_y, camera, config)
            for start_y, end_y in bands
        ]
    for future in futures:
        future.result()

    logger.debug(
        "Rendered %dx%d frame on %d workers in %.2fs",
        width, height, len(bands), time.perf_counter() - start,
    )
