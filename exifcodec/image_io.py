"""Pillow adapter -- finds EXIF blocks in image files and decodes thumbnails.

Container parsing and pixel decoding are not the codec's job; Pillow does
both.  Raw EXIF dumps (.exif/.bin) are read and written as plain bytes.
"""

import io
from pathlib import Path
from typing import Optional

from PIL import Image

from exifcodec.config import CodecConfig
from exifcodec.profile import ExifProfile
from exifcodec.tiff import EXIF_PREAMBLE

# Files holding a bare EXIF/TIFF block rather than an image
RAW_BLOCK_SUFFIXES = {'.exif', '.bin'}


def is_raw_block(path) -> bool:
    return Path(path).suffix.lower() in RAW_BLOCK_SUFFIXES


def read_exif_block(path) -> Optional[bytes]:
    """Return the EXIF block stored in an image file, or None if it has none."""
    path = Path(path)
    if is_raw_block(path):
        return path.read_bytes() or None
    with Image.open(str(path)) as img:
        exif = img.info.get('exif')
    return bytes(exif) if exif else None


def load_profile(path, config: Optional[CodecConfig] = None) -> Optional[ExifProfile]:
    """Wrap an image's EXIF block in an (unparsed) ExifProfile."""
    data = read_exif_block(path)
    if data is None:
        return None
    return ExifProfile(data, config)


def decode_thumbnail(data: bytes) -> Image.Image:
    """Decode thumbnail bytes into a fully loaded Pillow image.

    Raises PIL.UnidentifiedImageError / OSError if the bytes are not an image.
    """
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def save_with_profile(source, destination, profile: Optional[ExifProfile]):
    """Write source to destination carrying profile's EXIF block.

    The pixels are re-saved by Pillow in the source format (JPEG keeps its
    quantization tables).  A profile that serializes to None drops EXIF.
    """
    exif = profile.to_bytes() if profile is not None else None

    if is_raw_block(source):
        Path(destination).write_bytes(exif or b'')
        return

    with Image.open(str(source)) as img:
        fmt = img.format
        params = {}
        if exif:
            # JPEG APP1 needs the preamble; PNG/WebP writers strip it
            if not exif.startswith(EXIF_PREAMBLE):
                exif = EXIF_PREAMBLE + exif
            params['exif'] = exif
        if fmt == 'JPEG':
            params['quality'] = 'keep'
        img.save(str(destination), format=fmt, **params)
