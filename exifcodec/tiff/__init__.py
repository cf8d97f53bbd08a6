"""Low-level TIFF binary parser package.

Re-exports the public names of the parser so callers can write
``from exifcodec.tiff import X``.
"""

from exifcodec.tiff.parser import (  # noqa: F401
    EXIF_PREAMBLE,
    ENTRY_SIZE,
    HEADER_SIZE,
    INLINE_SIZE,
    MAX_IFD_ENTRIES,
    TIFF_MAGIC,
    IFDEntry,
    TIFFHeader,
    read_header,
    read_ifd,
    read_tag_long,
    read_tag_value_bytes,
)
