"""Tests for ExifWriter -- layout, part filtering, pointers and thumbnails."""

import struct

import pytest

from exifcodec.rational import Rational
from exifcodec.reader import read
from exifcodec.tags import ExifDataType, ExifParts, ExifTag
from exifcodec.tiff import INLINE_SIZE, read_header, read_ifd, read_tag_long
from exifcodec.value import ExifValue
from exifcodec.writer import ExifWriter, write


@pytest.fixture
def values():
    return [
        ExifValue.create(ExifTag.Orientation, 1),
        ExifValue.create(ExifTag.Make, 'Sony'),
        ExifValue.create(ExifTag.XResolution, Rational(72, 1)),
        ExifValue.create(ExifTag.ExposureTime, Rational(1, 60)),
        ExifValue.create(ExifTag.LensModel, 'FE 24-70mm F2.8 GM'),
        ExifValue.create(ExifTag.GPSLatitudeRef, 'S'),
        ExifValue.create(ExifTag.GPSAltitude, Rational(1200, 10)),
    ]


def _ifd0(data):
    header = read_header(data)
    return read_ifd(data, header, header.first_ifd_offset)


def _pointer(data, tag):
    header = read_header(data)
    entries, _ = _ifd0(data)
    for entry in entries:
        if entry.tag_id == tag:
            return read_tag_long(data, header, entry)
    return None


class TestEmptyOutput:
    def test_no_values(self):
        assert ExifWriter([]).get_data() is None

    def test_nothing_selected(self, values):
        assert ExifWriter(values, ExifParts.NONE).get_data() is None
        assert ExifWriter(values, ExifParts.THUMBNAIL, b'\xff\xd8').get_data() is None

    def test_only_structural_values(self):
        pointer = ExifValue(ExifTag.ExifOffset, ExifDataType.LONG, 1234)
        assert ExifWriter([pointer]).get_data() is None


class TestLayout:
    def test_little_endian_header(self, values):
        data = ExifWriter(values).get_data()
        assert data[:8] == b'II*\x00\x08\x00\x00\x00'

    def test_entries_sorted(self, values):
        data = ExifWriter(reversed(values)).get_data()
        header = read_header(data)
        entries, _ = _ifd0(data)
        tags = [e.tag_id for e in entries]
        assert tags == sorted(tags)

        sub_entries, _ = read_ifd(data, header, _pointer(data, ExifTag.ExifOffset))
        sub_tags = [e.tag_id for e in sub_entries]
        assert sub_tags == sorted(sub_tags)

    def test_pointers_added(self, values):
        data = ExifWriter(values).get_data()
        assert _pointer(data, ExifTag.ExifOffset) is not None
        assert _pointer(data, ExifTag.GPSIFDOffset) is not None

    def test_sub_ifds_follow_ifd0(self, values):
        data = ExifWriter(values).get_data()
        entries, _ = _ifd0(data)
        ifd0_end = 8 + 2 + 12 * len(entries) + 4
        assert _pointer(data, ExifTag.ExifOffset) == ifd0_end

    def test_overflow_word_aligned(self, values):
        data = ExifWriter(values).get_data()
        header = read_header(data)
        offsets = []
        for offset in (header.first_ifd_offset, _pointer(data, ExifTag.ExifOffset),
                       _pointer(data, ExifTag.GPSIFDOffset)):
            entries, _ = read_ifd(data, header, offset)
            offsets += [e.value_offset for e in entries if e.total_size > INLINE_SIZE]
        assert offsets
        assert all(o % 2 == 0 for o in offsets)

    def test_inline_values_padded(self):
        data = ExifWriter([ExifValue.create(ExifTag.Orientation, 6)]).get_data()
        entries, _ = _ifd0(data)
        entry = entries[0]
        assert entry.value_offset == entry.entry_offset + 8
        assert data[entry.value_offset:entry.value_offset + 4] == b'\x06\x00\x00\x00'

    def test_ascii_count_includes_terminator(self):
        data = ExifWriter([ExifValue.create(ExifTag.Make, 'Sony')]).get_data()
        entries, _ = _ifd0(data)
        assert entries[0].count == 5


class TestPartFiltering:
    def test_ifd_only(self, values):
        data = ExifWriter(values, ExifParts.IFD_TAGS).get_data()
        tags = {v.tag for v in read(data).values}
        assert tags == {ExifTag.Orientation, ExifTag.Make, ExifTag.XResolution}
        assert _pointer(data, ExifTag.ExifOffset) is None
        assert _pointer(data, ExifTag.GPSIFDOffset) is None

    def test_gps_only(self, values):
        data = ExifWriter(values, ExifParts.GPS_TAGS).get_data()
        entries, _ = _ifd0(data)
        assert [e.tag_id for e in entries] == [ExifTag.GPSIFDOffset]
        tags = {v.tag for v in read(data).values}
        assert tags == {ExifTag.GPSLatitudeRef, ExifTag.GPSAltitude}

    def test_unknown_tag_follows_its_part(self):
        unknown = ExifValue(0xC000, ExifDataType.SHORT, 3, ExifParts.IFD_TAGS)
        data = ExifWriter([unknown], ExifParts.IFD_TAGS).get_data()
        assert [v.tag for v in read(data).values] == [0xC000]
        assert ExifWriter([unknown], ExifParts.EXIF_TAGS).get_data() is None


class TestStructuralValues:
    def test_stale_pointer_value_ignored(self, values):
        stale = ExifValue(ExifTag.ExifOffset, ExifDataType.LONG, 1234)
        data = ExifWriter(values + [stale]).get_data()
        entries, _ = _ifd0(data)
        assert [e.tag_id for e in entries].count(ExifTag.ExifOffset) == 1
        assert _pointer(data, ExifTag.ExifOffset) != 1234

    def test_duplicate_tag_first_wins(self):
        data = ExifWriter([ExifValue.create(ExifTag.Make, 'Sony'),
                           ExifValue.create(ExifTag.Make, 'Canon')]).get_data()
        result = read(data)
        assert [v.value for v in result.values] == ['Sony']


class TestThumbnail:
    def test_thumbnail_written(self, values, jpeg_thumbnail):
        data = ExifWriter(values, ExifParts.ALL, jpeg_thumbnail).get_data()
        result = read(data)
        assert result.thumbnail_length == len(jpeg_thumbnail)
        start = result.thumbnail_offset
        assert data[start:start + result.thumbnail_length] == jpeg_thumbnail
        assert data.endswith(jpeg_thumbnail)

    def test_thumbnail_ifd_chained(self, values, jpeg_thumbnail):
        data = ExifWriter(values, ExifParts.ALL, jpeg_thumbnail).get_data()
        header = read_header(data)
        _, next_offset = _ifd0(data)
        entries, last = read_ifd(data, header, next_offset)
        assert [e.tag_id for e in entries] == [
            ExifTag.Compression, ExifTag.JPEGInterchangeFormat,
            ExifTag.JPEGInterchangeFormatLength]
        assert read_tag_long(data, header, entries[0]) == 6
        assert last == 0

    def test_thumbnail_dropped_without_part(self, values, jpeg_thumbnail):
        parts = ExifParts.ALL & ~ExifParts.THUMBNAIL
        data = ExifWriter(values, parts, jpeg_thumbnail).get_data()
        _, next_offset = _ifd0(data)
        assert next_offset == 0
        assert not read(data).has_thumbnail


class TestRoundTrip:
    def test_value_set_preserved(self, values):
        result = read(write(values))
        assert sorted(result.values, key=lambda v: v.tag) == sorted(values, key=lambda v: v.tag)

    def test_rational_fields_preserved(self):
        value = ExifValue.create(ExifTag.XResolution, Rational(144, 2))
        assert read(write([value])).values[0].value == Rational(144, 2)

    def test_signed_and_float_payloads(self):
        values = [
            ExifValue.create(ExifTag.ExposureBiasValue, Rational(-1, 3, signed=True)),
            ExifValue(0xC000, ExifDataType.DOUBLE, (1.5, -2.25)),
            ExifValue(0xC001, ExifDataType.SLONG, -70000),
            ExifValue(0xC002, ExifDataType.FLOAT, 0.5),
        ]
        result = read(write(values))
        by_tag = {v.tag: v.value for v in result.values}
        assert by_tag[ExifTag.ExposureBiasValue] == Rational(-1, 3, signed=True)
        assert by_tag[0xC000] == (1.5, -2.25)
        assert by_tag[0xC001] == -70000
        assert by_tag[0xC002] == 0.5

    def test_non_ascii_text(self):
        value = ExifValue.create(ExifTag.Artist, 'Zoë Müller')
        assert read(write([value])).values[0].value == 'Zoë Müller'

    def test_entry_bytes(self):
        data = write([ExifValue.create(ExifTag.Orientation, 3)])
        assert data[8:10] == struct.pack('<H', 1)
        assert data[10:22] == struct.pack('<HHI', 0x0112, 3, 1) + b'\x03\x00\x00\x00'
