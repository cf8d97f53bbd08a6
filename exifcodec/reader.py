"""ExifReader -- parse a TIFF/EXIF buffer into ExifValues.

EXIF blocks in the wild are frequently truncated or corrupt, so the reader
never raises for bad data.  Problems degrade the result instead: entries
that cannot be decoded are skipped and their tags listed in invalid_tags.
"""

import logging
from typing import List, Optional, Set, Tuple

from exifcodec.config import CodecConfig
from exifcodec.models import ExifReadResult
from exifcodec.tags import (
    ExifParts,
    ExifTag,
    THUMBNAIL_TAGS,
    is_valid_entry,
    lookup,
    tag_name,
)
from exifcodec.tiff import (
    IFDEntry,
    TIFFHeader,
    read_header,
    read_ifd,
    read_tag_long,
    read_tag_value_bytes,
)
from exifcodec.value import ExifValue, decode_value

logger = logging.getLogger(__name__)

# Sub-IFD pointer tag -> group of the tags found behind it
_SUB_IFD_POINTERS = {
    ExifTag.ExifOffset: ExifParts.EXIF_TAGS,
    ExifTag.GPSIFDOffset: ExifParts.GPS_TAGS,
}


class ExifReader:
    """Reads EXIF values, invalid tags and the thumbnail range from a buffer."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig.default()

    def read(self, data: bytes) -> ExifReadResult:
        """Parse data.  Always returns a result, possibly empty."""
        result = ExifReadResult()
        if not data:
            return result
        data = bytes(data)

        header = read_header(data)
        if header is None:
            logger.debug("no TIFF header in %d-byte EXIF block", len(data))
            return result
        result.byte_order = header.byte_order

        visited: Set[int] = set()
        seen_tags: Set[int] = set()

        entries, next_offset = self._read_ifd(data, header, header.first_ifd_offset, visited)
        self._collect(data, header, entries, ExifParts.IFD_TAGS, result, seen_tags, visited)

        # IFD1 onwards only describe the embedded thumbnail
        offset = next_offset
        while offset:
            entries, offset = self._read_ifd(data, header, offset, visited)
            if not entries:
                break
            self._collect_thumbnail(data, header, entries, result)

        if not result.has_thumbnail \
                or result.thumbnail_offset + result.thumbnail_length > len(data):
            result.thumbnail_offset = 0
            result.thumbnail_length = 0
        return result

    def _read_ifd(self, data: bytes, header: TIFFHeader, offset: int,
                  visited: Set[int]) -> Tuple[List[IFDEntry], int]:
        if offset in visited:
            logger.debug("IFD at offset %d already visited -- circular chain", offset)
            return [], 0
        if len(visited) >= self.config.max_ifds:
            logger.debug("IFD limit %d reached, ignoring offset %d",
                         self.config.max_ifds, offset)
            return [], 0
        visited.add(offset)
        return read_ifd(data, header, offset, self.config.max_ifd_entries)

    def _collect(self, data: bytes, header: TIFFHeader, entries: List[IFDEntry],
                 part: ExifParts, result: ExifReadResult, seen_tags: Set[int],
                 visited: Set[int]):
        """Add the values of one IFD, recursing into EXIF/GPS sub-IFDs."""
        for entry in entries:
            tag_id = entry.tag_id

            if tag_id in _SUB_IFD_POINTERS:
                sub_offset = read_tag_long(data, header, entry)
                if sub_offset is None or entry.count != 1:
                    result.add_invalid(tag_id)
                    continue
                sub_entries, _ = self._read_ifd(data, header, sub_offset, visited)
                self._collect(data, header, sub_entries, _SUB_IFD_POINTERS[tag_id],
                              result, seen_tags, visited)
                continue

            if tag_id == ExifTag.InteroperabilityOffset or tag_id in THUMBNAIL_TAGS:
                continue

            if not is_valid_entry(tag_id, entry.dtype, entry.count):
                logger.debug("%s: type %d x %d does not match catalog",
                             tag_name(tag_id), entry.dtype, entry.count)
                result.add_invalid(tag_id)
                continue

            raw = read_tag_value_bytes(data, entry)
            if raw is None:
                logger.debug("%s: value at offset %d runs past end of buffer",
                             tag_name(tag_id), entry.value_offset)
                result.add_invalid(tag_id)
                continue

            info = lookup(tag_id)
            if info is None and not self.config.keep_unknown_tags:
                continue
            if tag_id in seen_tags:
                logger.debug("%s: duplicate entry ignored", tag_name(tag_id))
                continue

            scalar = entry.count == 1 and (info is None or info.count == 1)
            payload = decode_value(entry.dtype, raw, entry.count, header.endian, scalar)
            value_part = info.part if info is not None else part
            result.values.append(ExifValue(tag_id, entry.dtype, payload, value_part))
            seen_tags.add(tag_id)

    def _collect_thumbnail(self, data: bytes, header: TIFFHeader,
                           entries: List[IFDEntry], result: ExifReadResult):
        for entry in entries:
            if entry.tag_id not in THUMBNAIL_TAGS:
                continue
            number = read_tag_long(data, header, entry)
            if number is None:
                result.add_invalid(entry.tag_id)
                continue
            if entry.tag_id == ExifTag.JPEGInterchangeFormat:
                # 0 means no thumbnail, whatever the preamble
                if number == 0:
                    result.thumbnail_offset = 0
                    continue
                # Stored relative to the TIFF header; report it buffer-absolute
                result.thumbnail_offset = header.base + number
            else:
                result.thumbnail_length = number


def read(data: bytes, config: Optional[CodecConfig] = None) -> ExifReadResult:
    """Convenience wrapper around ExifReader(config).read(data)."""
    return ExifReader(config).read(data)
