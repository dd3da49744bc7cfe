"""
Tracer and render configuration.

Defaults reproduce the fixed constants in ``blackhole.constants``. Scene
files are plain INI files with ``[physics]``, ``[camera]`` and ``[render]``
sections, for example::

    [physics]
    mass = 1.0
    step_size = 0.05

    [camera]
    radius = 15.0
    pitch = 0.3

    [render]
    width = 320
    height = 240
"""
import configparser
import logging
import math
import os
from dataclasses import dataclass, fields
from typing import Optional, Tuple

from . import constants

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    pass


def _require_finite(obj, names):
    for name in names:
        value = getattr(obj, name)
        if not math.isfinite(value):
            raise ConfigError(f"{name} must be finite, got {value}")


@dataclass(frozen=True)
class TracerConfig:
    mass: float = constants.M
    escape_radius: float = constants.ESCAPE_RADIUS
    step_size: float = constants.STEP_SIZE
    disk_inner: float = constants.DISK_INNER
    disk_outer: float = constants.DISK_OUTER
    max_steps: int = constants.MAX_STEPS

    def __post_init__(self):
        _require_finite(self, ("mass", "escape_radius", "step_size", "disk_inner", "disk_outer"))
        if self.mass <= 0.0:
            raise ConfigError(f"mass must be positive, got {self.mass}")
        if self.step_size <= 0.0:
            raise ConfigError(f"step_size must be positive, got {self.step_size}")
        if self.escape_radius <= self.schwarzschild_radius:
            raise ConfigError(
                f"escape_radius {self.escape_radius} must lie outside the "
                f"Schwarzschild radius {self.schwarzschild_radius}"
            )
        if self.disk_inner < 0.0 or self.disk_inner > self.disk_outer:
            raise ConfigError(
                f"invalid disk annulus [{self.disk_inner}, {self.disk_outer}]"
            )
        if self.max_steps < 1:
            raise ConfigError(f"max_steps must be at least 1, got {self.max_steps}")

    @property
    def schwarzschild_radius(self) -> float:
        return 2.0 * constants.G * self.mass / (constants.C * constants.C)


@dataclass(frozen=True)
class RenderSettings:
    width: int = constants.WIDTH
    height: int = constants.HEIGHT
    workers: Optional[int] = None  # None: one per hardware thread
    fov_degrees: float = 90.0
    radius: float = 15.0
    yaw: float = 0.0
    pitch: float = 0.3

    def __post_init__(self):
        _require_finite(self, ("fov_degrees", "radius", "yaw", "pitch"))
        if self.width < 1 or self.height < 1:
            raise ConfigError(f"frame size must be positive, got {self.width}x{self.height}")
        if self.workers is not None and self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        if not 0.0 < self.fov_degrees < 180.0:
            raise ConfigError(f"fov_degrees must be in (0, 180), got {self.fov_degrees}")


_PHYSICS_KEYS = {f.name for f in fields(TracerConfig)}
_CAMERA_KEYS = {"fov_degrees", "radius", "yaw", "pitch"}
_RENDER_KEYS = {"width", "height", "workers"}


def _read_section(parser, section, allowed, target):
    if not parser.has_section(section):
        return
    for key, raw in parser.items(section):
        if key not in allowed:
            logger.warning("Ignoring unknown key %r in [%s]", key, section)
            continue
        try:
            if key in ("max_steps", "width", "height", "workers"):
                target[key] = parser.getint(section, key)
            else:
                target[key] = parser.getfloat(section, key)
        except (ValueError, configparser.Error) as e:
            raise ConfigError(f"[{section}] {key} = {raw!r}: {e}") from e


def load_scene(path) -> Tuple[TracerConfig, RenderSettings]:
    """Read a scene file into a tracer config and render settings."""
    if not os.path.isfile(path):
        raise ConfigError(f"Scene file not found: {path}")

    # Raw values: a stray "%" is a bad number, not an interpolation directive
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError) as e:
        raise ConfigError(f"Malformed scene file {path}: {e}") from e

    for section in parser.sections():
        if section not in ("physics", "camera", "render"):
            logger.warning("Ignoring unknown section [%s] in %s", section, path)

    physics = {}
    render = {}
    _read_section(parser, "physics", _PHYSICS_KEYS, physics)
    _read_section(parser, "camera", _CAMERA_KEYS, render)
    _read_section(parser, "render", _RENDER_KEYS, render)

    logger.debug("Loaded scene %s: physics=%s render=%s", path, physics, render)
    return TracerConfig(**physics), RenderSettings(**render)
