"""exifcodec -- read, mutate and re-serialize EXIF metadata blocks."""

__version__ = "1.0.0"

from exifcodec.rational import Rational
from exifcodec.tags import ExifDataType, ExifParts, ExifTag
from exifcodec.value import ExifValue
from exifcodec.models import ExifReadResult, ImageMetadata
from exifcodec.config import CodecConfig
from exifcodec.reader import ExifReader
from exifcodec.writer import ExifWriter
from exifcodec.profile import ExifProfile

__all__ = [
    "__version__",
    "Rational",
    "ExifDataType",
    "ExifParts",
    "ExifTag",
    "ExifValue",
    "ExifReadResult",
    "ImageMetadata",
    "CodecConfig",
    "ExifReader",
    "ExifWriter",
    "ExifProfile",
]
