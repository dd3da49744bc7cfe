import enum
import logging
import math
from dataclasses import dataclass

from . import constants
from .config import TracerConfig
from .vec3 import Vector3

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = TracerConfig()


class NonFiniteStateError(ArithmeticError):
    """Raised when an integrator step produces a non-finite photon state."""


class Photon:
    def __init__(self, position, velocity):
        self.position = position
        self.velocity = velocity

    def copy(self):
        return Photon(self.position, self.velocity)

    def __repr__(self):
        return f"Photon(position={self.position!r}, velocity={self.velocity!r})"


class HitTarget(enum.Enum):
    BLACK_HOLE = "black_hole"
    BACKGROUND_SKY = "background_sky"
    ACCRETION_DISK = "accretion_disk"
    TIMED_OUT = "timed_out"  # step budget ran out before capture or escape


@dataclass(frozen=True)
class HitRecord:
    target: HitTarget
    steps: int
    position: Vector3


def acceleration(pos, vel, mass=constants.M):
    # a = -(3 M h^2 / r^5) * pos, with h = pos x vel
    r2 = pos.dot(pos)
    r = math.sqrt(r2)
    h_vec = pos.cross(vel)
    h2 = h_vec.dot(h_vec)
    r5 = r2 * r2 * r
    return pos * (-3.0 * mass * h2 / r5)


def angular_momentum(photon):
    return photon.position.cross(photon.velocity)


def rk4_step(photon, dt, mass=constants.M):
    pos = photon.position
    vel = photon.velocity
    half = dt * 0.5

    try:
        k1_vel = acceleration(pos, vel, mass)
        k1_pos = vel

        k2_vel = acceleration(pos + k1_pos * half, vel + k1_vel * half, mass)
        k2_pos = vel + k1_vel * half

        k3_vel = acceleration(pos + k2_pos * half, vel + k2_vel * half, mass)
        k3_pos = vel + k2_vel * half

        k4_vel = acceleration(pos + k3_pos * dt, vel + k3_vel * dt, mass)
        k4_pos = vel + k3_vel * dt
    except ZeroDivisionError as e:
        # A stage landed exactly on the singularity at r = 0
        raise NonFiniteStateError(f"RK4 step from position={pos!r} hit r = 0") from e

    new_vel = vel + (k1_vel + k2_vel * 2.0 + k3_vel * 2.0 + k4_vel) * (dt / 6.0)
    new_pos = pos + (k1_pos + k2_pos * 2.0 + k3_pos * 2.0 + k4_pos) * (dt / 6.0)

    if not (new_pos.is_finite() and new_vel.is_finite()):
        raise NonFiniteStateError(
            f"RK4 step from position={pos!r} velocity={vel!r} is not finite"
        )

    photon.position = new_pos
    photon.velocity = new_vel


def crossed_plane(old_y, new_y):
    if (old_y > 0.0 and new_y < 0.0) or (old_y < 0.0 and new_y > 0.0):
        return True
    # Exactly one endpoint lies on the plane
    return (old_y == 0.0) != (new_y == 0.0)


def trace_photon(photon, config=None):
    """
    Integrate a photon until it is captured, escapes or hits the disk.

    The photon passed in is left untouched; a copy is stepped. The disk
    radius is sampled at the post-step position rather than interpolated
    to the exact crossing, so the disk edge carries up to one step of
    positional error.
    """
    config = config or _DEFAULT_CONFIG
    rs = config.schwarzschild_radius
    p = photon.copy()

    for steps in range(config.max_steps):
        old_y = p.position.y
        r = p.position.length()

        # Capture before escape and before stepping: acceleration is singular at r = 0
        if r <= rs:
            return HitRecord(HitTarget.BLACK_HOLE, steps, p.position)
        if r > config.escape_radius:
            return HitRecord(HitTarget.BACKGROUND_SKY, steps, p.position)

        rk4_step(p, config.step_size, config.mass)

        new_y = p.position.y
        if crossed_plane(old_y, new_y):
            radius_on_disk = math.sqrt(p.position.x * p.position.x + p.position.z * p.position.z)
            if config.disk_inner <= radius_on_disk <= config.disk_outer:
                return HitRecord(HitTarget.ACCRETION_DISK, steps + 1, p.position)

    # The last budgeted step may already have crossed a boundary
    r = p.position.length()
    if r <= rs:
        return HitRecord(HitTarget.BLACK_HOLE, config.max_steps, p.position)
    if r > config.escape_radius:
        return HitRecord(HitTarget.BACKGROUND_SKY, config.max_steps, p.position)

    logger.debug("Photon %r ran out of steps (%d)", photon, config.max_steps)
    return HitRecord(HitTarget.TIMED_OUT, config.max_steps, p.position)
