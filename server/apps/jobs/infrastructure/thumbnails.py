"""Thumbnail rendering for stored images."""

import logging
from collections.abc import Iterable

from PIL import Image

from server.apps.files.infrastructure.storage import variant_path

logger = logging.getLogger(__name__)


def generate_thumbnails(local_path: str, widths: Iterable[int]) -> list[str]:
    """Render width-bound variants of an image next to the original.

    Aspect ratio is preserved. Each variant is written to
    ``<local_path>_<width>`` in the format of the original.

    Args:
        local_path: Path of the original image.
        widths: Target widths in pixels.

    Returns:
        Paths of the written variants.

    Raises:
        OSError: If the image cannot be read or a variant cannot be written.
        PIL.Image.DecompressionBombError: If the image is too large to open.
    """
    written = []
    with Image.open(local_path) as image:
        image_format = image.format
        for width in widths:
            height = max(1, round(image.height * width / image.width))
            resized = image.resize((width, height))
            destination = variant_path(local_path, width)
            resized.save(destination, format=image_format)
            written.append(destination)
            logger.debug('Thumbnail written: %s', destination)

    logger.info('Generated %d thumbnails for %s', len(written), local_path)
    return written
