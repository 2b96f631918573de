"""
Texture size lookup for tileset images (uses PIL)

Frame layout needs the pixel size of every tileset image, but nothing in
this package decodes pixels. Sizes come from, in order:

1. The width/height attributes Tiled writes on the <image> element
2. A TextureProvider callable: Path -> (width, height)

The default provider opens the file with PIL. Image.open() is lazy: it
parses the header and stops, so asking for .size never loads pixel data.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from PIL import Image

logger = logging.getLogger(__name__)

TextureProvider = Callable[[Path], Tuple[int, int]]


class PillowTextureProvider:
    """
    Reads image dimensions from disk with PIL, caching per resolved path.

    Tilesets shared between maps (or referenced twice) hit the cache
    instead of re-opening the file.
    """

    def __init__(self):
        self._sizes: Dict[Path, Tuple[int, int]] = {}

    def __call__(self, image_path: Path) -> Tuple[int, int]:
        image_path = Path(image_path).resolve()
        size = self._sizes.get(image_path)
        if size is None:
            with Image.open(image_path) as image:
                size = image.size
            self._sizes[image_path] = size
            logger.debug("Probed %s: %dx%d", image_path, size[0], size[1])
        return size


class FixedTextureProvider:
    """
    Provider backed by a dict of known sizes, keyed by file name.

    Useful when the host engine already knows its textures (or in tests).
    """

    def __init__(self, sizes: Dict[str, Tuple[int, int]],
                 default: Optional[Tuple[int, int]] = None):
        self.sizes = dict(sizes)
        self.default = default

    def __call__(self, image_path: Path) -> Tuple[int, int]:
        name = Path(image_path).name
        if name in self.sizes:
            return self.sizes[name]
        if self.default is not None:
            return self.default
        raise FileNotFoundError(f"No texture size known for {name}")


def texture_size(source: str, base_path: Path,
                 width: Optional[int], height: Optional[int],
                 provider: Optional[TextureProvider]) -> Optional[Tuple[int, int]]:
    """
    Get the pixel size of a tileset image.

    Returns None (after logging a warning) when the size cannot be found,
    so the tileset ends up with no frames instead of aborting the load.
    """
    if width and height:
        return width, height

    if provider is None:
        logger.warning("No size for texture %s and no provider given", source)
        return None

    image_path = base_path / source
    try:
        return provider(image_path)
    except (OSError, ValueError) as e:
        # Missing texture: its tiles resolve to empty cells
        logger.warning("Could not read size of %s: %s", image_path, e)
        return None
