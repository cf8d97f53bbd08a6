"""ExifWriter -- serialize ExifValues into a fresh little-endian TIFF/EXIF block.

Layout of the output::

    header | IFD0 | EXIF IFD | GPS IFD | IFD1 (thumbnail) | overflow data | thumbnail

Only the groups selected by the parts mask are written.  Entries in every
IFD are sorted by tag id.  Values larger than four bytes go to the overflow
area, word aligned, and their entries point there.
"""

import logging
import struct
from typing import Iterable, List, Optional

from exifcodec.tags import (
    STRUCTURAL_TAGS,
    ExifDataType,
    ExifParts,
    ExifTag,
)
from exifcodec.tiff import ENTRY_SIZE, HEADER_SIZE, INLINE_SIZE, TIFF_MAGIC
from exifcodec.value import ExifValue

logger = logging.getLogger(__name__)

_ENDIAN = '<'

# JPEG compression code written into the thumbnail IFD
_COMPRESSION_JPEG = 6


class _Row:
    """One pending IFD entry; data is None until a pointer is resolved."""
    __slots__ = ('tag_id', 'dtype', 'count', 'data')

    def __init__(self, tag_id: int, dtype: int, count: int, data: Optional[bytes]):
        self.tag_id = int(tag_id)
        self.dtype = int(dtype)
        self.count = count
        self.data = data

    @property
    def is_overflow(self) -> bool:
        return self.data is not None and len(self.data) > INLINE_SIZE


def _ifd_size(rows: List[_Row]) -> int:
    return 2 + ENTRY_SIZE * len(rows) + 4


def _long(value: int) -> bytes:
    return struct.pack(_ENDIAN + 'I', value)


class ExifWriter:
    """Writes the selected parts of a value collection back to bytes."""

    def __init__(self, values: Iterable[ExifValue], parts: ExifParts = ExifParts.ALL,
                 thumbnail: Optional[bytes] = None):
        self.values = list(values)
        self.parts = ExifParts(parts)
        self.thumbnail = thumbnail

    def _select(self, part: ExifParts) -> List[_Row]:
        rows = []
        seen = set()
        for value in self.values:
            if value.part != part or value.tag in STRUCTURAL_TAGS or value.tag in seen:
                continue
            seen.add(value.tag)
            rows.append(_Row(value.tag, value.data_type, value.components,
                             value.encode(_ENDIAN)))
        return rows

    def get_data(self) -> Optional[bytes]:
        """Return the encoded block, or None when nothing is selected."""
        ifd0 = self._select(ExifParts.IFD_TAGS) if self.parts & ExifParts.IFD_TAGS else []
        exif = self._select(ExifParts.EXIF_TAGS) if self.parts & ExifParts.EXIF_TAGS else []
        gps = self._select(ExifParts.GPS_TAGS) if self.parts & ExifParts.GPS_TAGS else []
        if not (ifd0 or exif or gps):
            return None

        exif_ptr = gps_ptr = thumb_ptr = None
        if exif:
            exif_ptr = _Row(ExifTag.ExifOffset, ExifDataType.LONG, 1, None)
            ifd0.append(exif_ptr)
        if gps:
            gps_ptr = _Row(ExifTag.GPSIFDOffset, ExifDataType.LONG, 1, None)
            ifd0.append(gps_ptr)

        thumb = []
        thumbnail = self.thumbnail if self.parts & ExifParts.THUMBNAIL else None
        if thumbnail:
            thumb_ptr = _Row(ExifTag.JPEGInterchangeFormat, ExifDataType.LONG, 1, None)
            thumb = [
                _Row(ExifTag.Compression, ExifDataType.SHORT, 1,
                     struct.pack(_ENDIAN + 'H', _COMPRESSION_JPEG)),
                thumb_ptr,
                _Row(ExifTag.JPEGInterchangeFormatLength, ExifDataType.LONG, 1,
                     _long(len(thumbnail))),
            ]

        tables = [rows for rows in (ifd0, exif, gps, thumb) if rows]
        for rows in tables:
            rows.sort(key=lambda row: row.tag_id)

        # IFD positions depend only on entry counts, so resolve them first
        positions = []
        offset = HEADER_SIZE
        for rows in tables:
            positions.append(offset)
            offset += _ifd_size(rows)
        data_start = offset
        overflow_size = sum(len(row.data) + (len(row.data) & 1)
                            for rows in tables for row in rows if row.is_overflow)

        position_of = {id(rows): pos for rows, pos in zip(tables, positions)}
        if exif_ptr is not None:
            exif_ptr.data = _long(position_of[id(exif)])
        if gps_ptr is not None:
            gps_ptr.data = _long(position_of[id(gps)])
        if thumb_ptr is not None:
            thumb_ptr.data = _long(data_start + overflow_size)
        thumb_position = position_of[id(thumb)] if thumb else 0

        out = bytearray(b'II' + struct.pack(_ENDIAN + 'HI', TIFF_MAGIC, HEADER_SIZE))
        overflow = bytearray()
        for rows in tables:
            out += struct.pack(_ENDIAN + 'H', len(rows))
            for row in rows:
                out += struct.pack(_ENDIAN + 'HHI', row.tag_id, row.dtype, row.count)
                if row.is_overflow:
                    out += _long(data_start + len(overflow))
                    overflow += row.data
                    if len(row.data) & 1:
                        overflow += b'\x00'
                else:
                    out += row.data.ljust(INLINE_SIZE, b'\x00')
            out += _long(thumb_position if rows is ifd0 else 0)

        out += overflow
        if thumbnail:
            out += thumbnail

        logger.debug("wrote %d IFD(s), %d bytes", len(tables), len(out))
        return bytes(out)


def write(values: Iterable[ExifValue], parts: ExifParts = ExifParts.ALL,
          thumbnail: Optional[bytes] = None) -> Optional[bytes]:
    """Convenience wrapper around ExifWriter(...).get_data()."""
    return ExifWriter(values, parts, thumbnail).get_data()
