"""
Schwarzschild photon tracer
===========================

Bends camera rays around a non-rotating black hole by integrating each
photon with fixed-step RK4, classifies where it ends up (captured,
escaped to the sky, or stopped by the accretion disk) and writes one
packed colour per pixel.

Modules:
    - vec3:       Vector3 value type
    - physics:    acceleration law, RK4 step, photon tracer
    - camera:     orbit camera and its input handlers
    - renderer:   row-band partitioning and threaded frame rendering
    - display:    glfw/OpenGL window showing the pixel buffer
    - config:     tracer/render settings and INI scene files
    - cli:        ``python -m blackhole`` entry point
"""
from .camera import Camera
from .config import ConfigError, RenderSettings, TracerConfig, load_scene
from .physics import (
    HitRecord,
    HitTarget,
    NonFiniteStateError,
    Photon,
    acceleration,
    rk4_step,
    trace_photon,
)
from .renderer import new_pixel_buffer, partition_rows, render_frame
from .vec3 import Vector3

__version__ = "0.1.0"
