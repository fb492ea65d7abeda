# main.py
"""
Entry point for rendering glitch recipes without the editor UI.
"""
import argparse
import logging
import random
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .controllers import LayerStackController
from .managers.export import ExportError, ExportManager, GifOptions, default_export_name
from .recipe import RecipeError, apply_recipe, load_recipe
from .surface import load_surface

LOGGER_NAME = "glitchbox"


def configure_logging(log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure and return the application logger.

    Handler setup is idempotent so repeated calls (e.g., in tests) do not
    stack duplicate handlers. The rotating file handler bounds on-disk log
    growth while stdout mirrors the same records.
    """

    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = (log_dir or Path.cwd()) / config.LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glitchbox",
        description="Apply a layer recipe to an image and export the result.",
    )
    parser.add_argument("image", help="input image")
    parser.add_argument("recipe", help="JSON layer recipe")
    parser.add_argument("-o", "--output", help="output .png or .gif (default: timestamped name)")
    parser.add_argument("--gif", action="store_true", help="export an animated GIF when no output is given")
    parser.add_argument("--framerate", type=int, default=config.GIF_FRAMERATE)
    parser.add_argument("--colors", type=int, default=config.GIF_COLOR_RANGE)
    parser.add_argument("--quality", type=int, default=config.GIF_COMPRESSION_QUALITY)
    parser.add_argument("--seed", type=int, help="seed for the random filters (overrides the recipe)")
    parser.add_argument("--log-dir", type=Path, help="directory for the rotating log file")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging(args.log_dir)

    output = args.output or default_export_name("gif" if args.gif else "png")
    try:
        recipe = load_recipe(args.recipe)
        seed = args.seed if args.seed is not None else recipe.seed
        controller = LayerStackController(rng=random.Random(seed))
        controller.load_image(load_surface(args.image))
        apply_recipe(controller, recipe)

        exporter = ExportManager(controller)
        if output.lower().endswith(".gif"):
            options = GifOptions(
                framerate=args.framerate,
                color_range=args.colors,
                compression_quality=args.quality,
            )
            written = exporter.export_gif(output, options)
        else:
            written = exporter.export_png(output)
    except (RecipeError, ExportError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Wrote %s", written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
