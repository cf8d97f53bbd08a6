"""Shared test fixtures -- synthetic TIFF/EXIF block generators and sample images."""

import io
import struct

import pytest
from PIL import Image

from exifcodec.tiff import EXIF_PREAMBLE

# struct format for inline integer values, by TIFF type code
_INLINE_FORMATS = {1: 'B', 3: 'H', 4: 'I', 6: 'b', 8: 'h', 9: 'i'}


def _inline(endian, type_id, value):
    fmt = _INLINE_FORMATS.get(type_id, 'I')
    return struct.pack(endian + fmt, value).ljust(4, b'\x00')


def _block_size(entries):
    """Bytes taken by an IFD plus its out-of-line data."""
    ool = sum(len(v) for _, _, _, v in entries if isinstance(v, bytes) and len(v) > 4)
    return 2 + 12 * len(entries) + 4 + ool


def _ifd_block(entries, endian, start, next_ifd=0):
    """Encode one IFD at offset start, followed by its out-of-line data.

    Entries are (tag_id, type_id, count, value_or_bytes) tuples.  Ints are
    packed inline with the width of their type; bytes of up to four bytes
    are inlined as-is, longer bytes go to the data area after the IFD.
    """
    data_start = start + 2 + 12 * len(entries) + 4
    ifd_bytes = struct.pack(endian + 'H', len(entries))
    data_bytes = b''

    for tag_id, type_id, count, value in entries:
        ifd_bytes += struct.pack(endian + 'HHI', tag_id, type_id, count)
        if isinstance(value, bytes) and len(value) > 4:
            ifd_bytes += struct.pack(endian + 'I', data_start + len(data_bytes))
            data_bytes += value
        elif isinstance(value, bytes):
            ifd_bytes += value.ljust(4, b'\x00')
        else:
            ifd_bytes += _inline(endian, type_id, value)

    ifd_bytes += struct.pack(endian + 'I', next_ifd)
    return ifd_bytes + data_bytes


def _header(endian, first_ifd=8, preamble=False):
    bo = b'II' if endian == '<' else b'MM'
    header = bo + struct.pack(endian + 'HI', 42, first_ifd)
    return (EXIF_PREAMBLE + header) if preamble else header


def build_tiff(entries, endian='<', next_ifd=0, preamble=False):
    """Build a single-IFD EXIF block in memory.

    Args:
        entries: List of (tag_id, type_id, count, value_or_bytes) tuples.
        endian: '<' for little-endian, '>' for big-endian.
        next_ifd: Raw next-IFD offset written after the entries.
        preamble: Prefix the block with the JPEG 'Exif\\0\\0' marker.

    Returns:
        bytes: Complete EXIF block.
    """
    return _header(endian, preamble=preamble) + _ifd_block(entries, endian, 8, next_ifd)


def build_tiff_multi_ifd(ifd_entries_list, endian='<', preamble=False):
    """Build an EXIF block with a chain of linked IFDs."""
    starts = []
    offset = 8
    for entries in ifd_entries_list:
        starts.append(offset)
        offset += _block_size(entries)

    result = _header(endian, starts[0], preamble)
    for i, entries in enumerate(ifd_entries_list):
        next_ifd = starts[i + 1] if i + 1 < len(ifd_entries_list) else 0
        result += _ifd_block(entries, endian, starts[i], next_ifd)
    return result


def build_tiff_with_sub_ifd(main_entries, sub_entries, pointer_tag=0x8769,
                            endian='<', preamble=False):
    """Build IFD0 carrying a pointer entry to a sub-IFD placed right after it."""
    main = list(main_entries) + [(pointer_tag, 4, 1, 0)]
    sub_start = 8 + _block_size(main)
    main[-1] = (pointer_tag, 4, 1, sub_start)
    return (_header(endian, preamble=preamble)
            + _ifd_block(main, endian, 8)
            + _ifd_block(sub_entries, endian, sub_start))


def build_exif_with_thumbnail(main_entries, thumbnail, endian='<', preamble=False):
    """Build IFD0 chained to an IFD1 that points at appended thumbnail bytes."""
    ifd1_start = 8 + _block_size(main_entries)
    ifd1 = [(0x0103, 3, 1, 6), (0x0201, 4, 1, 0), (0x0202, 4, 1, len(thumbnail))]
    thumb_offset = ifd1_start + _block_size(ifd1)
    ifd1[1] = (0x0201, 4, 1, thumb_offset)
    return (_header(endian, preamble=preamble)
            + _ifd_block(main_entries, endian, 8, ifd1_start)
            + _ifd_block(ifd1, endian, ifd1_start)
            + thumbnail)


def rational_bytes(*pairs, endian='<', signed=False):
    """Pack (numerator, denominator) pairs as RATIONAL/SRATIONAL data."""
    fmt = 'ii' if signed else 'II'
    return b''.join(struct.pack(endian + fmt, n, d) for n, d in pairs)


def ascii_bytes(text):
    return text.encode('utf-8') + b'\x00'


def camera_entries(endian='<'):
    """Typical primary-IFD entries of a camera JPEG."""
    make = ascii_bytes('Canon')
    model = ascii_bytes('EOS 5D Mark IV')
    return [
        (0x010F, 2, len(make), make),                                    # Make
        (0x0110, 2, len(model), model),                                  # Model
        (0x0112, 3, 1, 1),                                               # Orientation
        (0x011A, 5, 1, rational_bytes((72, 1), endian=endian)),          # XResolution
        (0x011B, 5, 1, rational_bytes((72, 1), endian=endian)),          # YResolution
        (0x0128, 3, 1, 2),                                               # ResolutionUnit
    ]


def exposure_entries(endian='<'):
    """Typical EXIF sub-IFD entries."""
    taken = ascii_bytes('2024:06:15 10:30:00')
    return [
        (0x829A, 5, 1, rational_bytes((1, 250), endian=endian)),         # ExposureTime
        (0x8827, 3, 1, 100),                                             # ISOSpeedRatings
        (0x9003, 2, len(taken), taken),                                  # DateTimeOriginal
        (0x9000, 7, 4, b'0230'),                                         # ExifVersion
    ]


def gps_entries(endian='<'):
    """GPS sub-IFD entries for 52 deg 22' 12" N."""
    return [
        (0x0001, 2, 2, b'N\x00'),                                        # GPSLatitudeRef
        (0x0002, 5, 3, rational_bytes((52, 1), (22, 1), (12, 1), endian=endian)),
    ]


def make_jpeg(size=(16, 12), color=(200, 30, 30), exif=None):
    """Encode a small solid-colour JPEG, optionally carrying an EXIF block."""
    buf = io.BytesIO()
    params = {}
    if exif is not None:
        params['exif'] = exif
    Image.new('RGB', size, color).save(buf, format='JPEG', **params)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def jpeg_thumbnail():
    """Encoded 16x12 JPEG used as an embedded thumbnail."""
    return make_jpeg()


@pytest.fixture
def camera_exif():
    """Little-endian EXIF block: IFD0 camera tags plus an EXIF sub-IFD."""
    return build_tiff_with_sub_ifd(camera_entries(), exposure_entries())


@pytest.fixture
def thumbnail_exif(jpeg_thumbnail):
    """EXIF block (with JPEG preamble) carrying camera tags and a thumbnail."""
    return build_exif_with_thumbnail(camera_entries(), jpeg_thumbnail, preamble=True)


@pytest.fixture
def tmp_jpeg(tmp_path, thumbnail_exif):
    """A JPEG file whose APP1 segment holds thumbnail_exif."""
    filepath = tmp_path / 'photo.jpg'
    filepath.write_bytes(make_jpeg(size=(64, 48), exif=thumbnail_exif))
    return filepath


@pytest.fixture
def tmp_jpeg_no_exif(tmp_path):
    filepath = tmp_path / 'plain.jpg'
    filepath.write_bytes(make_jpeg())
    return filepath


@pytest.fixture
def tmp_exif_block(tmp_path, camera_exif):
    """A raw EXIF block saved as a .exif file."""
    filepath = tmp_path / 'camera.exif'
    filepath.write_bytes(camera_exif)
    return filepath
