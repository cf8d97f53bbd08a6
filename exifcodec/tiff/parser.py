"""Low-level TIFF structure parsing over an immutable byte buffer.

Every function takes the whole buffer plus an explicit offset and returns
owned values; nothing seeks or mutates.  All offsets handed out here are
absolute positions in the buffer (the TIFF base is already added).
"""

import struct
from typing import List, Optional, Tuple

from exifcodec.tags import element_size

# JPEG APP1 payloads start with this before the TIFF header
EXIF_PREAMBLE = b'Exif\x00\x00'

TIFF_MAGIC = 42
HEADER_SIZE = 8
ENTRY_SIZE = 12
INLINE_SIZE = 4

# Maximum plausible tag count per IFD.  Real EXIF IFDs hold well under a
# hundred entries; a huge count means the offset landed in garbage.
MAX_IFD_ENTRIES = 1000


class TIFFHeader:
    """Parsed TIFF header.  base is where the header starts in the buffer."""
    __slots__ = ('endian', 'base', 'first_ifd_offset')

    def __init__(self, endian: str, base: int, first_ifd_offset: int):
        self.endian = endian
        self.base = base
        self.first_ifd_offset = first_ifd_offset

    @property
    def byte_order(self) -> str:
        return 'II' if self.endian == '<' else 'MM'


class IFDEntry:
    """A single 12-byte IFD entry."""
    __slots__ = ('tag_id', 'dtype', 'count', 'value_offset', 'entry_offset')

    def __init__(self, tag_id: int, dtype: int, count: int,
                 value_offset: int, entry_offset: int):
        self.tag_id = tag_id
        self.dtype = dtype
        self.count = count
        self.value_offset = value_offset
        self.entry_offset = entry_offset

    @property
    def total_size(self) -> Optional[int]:
        elem_size = element_size(self.dtype)
        if elem_size is None:
            return None
        return elem_size * self.count


def read_header(data: bytes) -> Optional[TIFFHeader]:
    """Validate the TIFF header, skipping an optional Exif preamble.

    Returns None if the buffer does not start with a usable header.
    """
    base = len(EXIF_PREAMBLE) if data[:len(EXIF_PREAMBLE)] == EXIF_PREAMBLE else 0
    if len(data) < base + HEADER_SIZE:
        return None

    bo = data[base:base + 2]
    if bo == b'II':
        endian = '<'
    elif bo == b'MM':
        endian = '>'
    else:
        return None

    magic, first_ifd = struct.unpack_from(endian + 'HI', data, base + 2)
    if magic != TIFF_MAGIC:
        return None
    return TIFFHeader(endian, base, first_ifd)


def read_ifd(data: bytes, header: TIFFHeader, ifd_offset: int,
             max_entries: int = MAX_IFD_ENTRIES) -> Tuple[List[IFDEntry], int]:
    """Read the entries of the IFD at ifd_offset (relative to the TIFF base).

    Returns (entries, next_ifd_offset).  A truncated table yields the
    complete entries only and a next offset of 0.
    """
    endian = header.endian
    pos = header.base + ifd_offset
    if ifd_offset <= 0 or pos + 2 > len(data):
        return [], 0

    num_entries = struct.unpack_from(endian + 'H', data, pos)[0]
    if num_entries > max_entries:
        return [], 0
    pos += 2

    entries = []
    for _ in range(num_entries):
        if pos + ENTRY_SIZE > len(data):
            return entries, 0
        tag_id, dtype, count = struct.unpack_from(endian + 'HHI', data, pos)
        elem_size = element_size(dtype)
        total = elem_size * count if elem_size is not None else 0
        if total <= INLINE_SIZE:
            value_offset = pos + 8
        else:
            value_offset = header.base + struct.unpack_from(endian + 'I', data, pos + 8)[0]
        entries.append(IFDEntry(tag_id, dtype, count, value_offset, pos))
        pos += ENTRY_SIZE

    if pos + 4 > len(data):
        return entries, 0
    next_offset = struct.unpack_from(endian + 'I', data, pos)[0]
    return entries, next_offset


def read_tag_value_bytes(data: bytes, entry: IFDEntry) -> Optional[bytes]:
    """Raw bytes of an entry's value, or None if they fall outside the buffer."""
    size = entry.total_size
    if size is None or size <= 0:
        return None
    end = entry.value_offset + size
    if entry.value_offset < 0 or end > len(data):
        return None
    return data[entry.value_offset:end]


def read_tag_long(data: bytes, header: TIFFHeader, entry: IFDEntry) -> Optional[int]:
    """First component of a SHORT/LONG entry (IFD pointers, thumbnail fields)."""
    if entry.dtype == 3:
        fmt = 'H'
    elif entry.dtype == 4:
        fmt = 'I'
    else:
        return None
    raw = read_tag_value_bytes(data, entry)
    if raw is None:
        return None
    return struct.unpack_from(header.endian + fmt, raw)[0]
