import argparse
import dataclasses
import logging
import sys

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from . import constants
from .camera import Camera
from .config import ConfigError, RenderSettings, TracerConfig, load_scene
from .renderer import new_pixel_buffer, render_frame, unpack_rgba

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="blackhole",
        description="Trace photons around a Schwarzschild black hole.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--scene", help="INI scene file")
    common.add_argument("--width", type=int)
    common.add_argument("--height", type=int)
    common.add_argument("--workers", type=int, help="worker threads (default: CPU count)")
    common.add_argument("--radius", type=float, help="camera orbit radius")
    common.add_argument("--yaw", type=float, help="camera yaw in radians")
    common.add_argument("--pitch", type=float, help="camera pitch in radians")
    common.add_argument("--fov", type=float, dest="fov_degrees", help="field of view in degrees")

    sub = parser.add_subparsers(dest="command", required=True)
    render = sub.add_parser("render", parents=[common], help="render one frame to a PNG")
    render.add_argument("-o", "--out", default="frame.png")
    sub.add_parser("view", parents=[common], help="open an interactive window")
    return parser


def resolve_settings(args):
    if args.scene:
        config, settings = load_scene(args.scene)
    else:
        config, settings = TracerConfig(), RenderSettings()

    overrides = {
        key: getattr(args, key)
        for key in ("width", "height", "workers", "radius", "yaw", "pitch", "fov_degrees")
        if getattr(args, key) is not None
    }
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    return config, settings


def cmd_render(args, config, settings):
    camera = Camera.from_settings(settings)
    buffer = new_pixel_buffer(settings.width, settings.height)
    render_frame(buffer, settings.width, settings.height, camera, config, settings.workers)
    plt.imsave(args.out, unpack_rgba(buffer, settings.width, settings.height))
    logger.info("Saved %s", args.out)


def compute_size(width, height):
    """Shrink (width, height) to fit the interactive compute resolution, keeping aspect."""
    scale = min(1.0, constants.COMPUTE_WIDTH / width, constants.COMPUTE_HEIGHT / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def cmd_view(args, config, settings):
    import glfw
    from .display import Display, bind_camera

    width, height = compute_size(settings.width, settings.height)
    display = Display(settings.width, settings.height, compute_size=(width, height))
    camera = Camera.from_settings(settings)
    bind_camera(display.window, camera)
    buffer = new_pixel_buffer(width, height)
    logger.info("Tracing at %dx%d for a %dx%d window", width, height, settings.width, settings.height)

    try:
        while not display.should_close():
            camera.process_keyboard(
                w=display.is_key_pressed(glfw.KEY_W),
                s=display.is_key_pressed(glfw.KEY_S),
                a=display.is_key_pressed(glfw.KEY_A),
                d=display.is_key_pressed(glfw.KEY_D),
                q=display.is_key_pressed(glfw.KEY_Q),
                e=display.is_key_pressed(glfw.KEY_E),
            )
            render_frame(buffer, width, height, camera, config, settings.workers)
            display.update(buffer)
            display.poll()
    finally:
        display.close()


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config, settings = resolve_settings(args)
    except ConfigError as e:
        logger.error("%s", e)
        return 2

    if args.command == "render":
        cmd_render(args, config, settings)
    else:
        cmd_view(args, config, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
