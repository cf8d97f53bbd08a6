"""ExifProfile -- the EXIF block of one image, parsed lazily.

A profile starts Unparsed, holding only the raw bytes it was given.  The
first access to its values runs ExifReader and moves it to Parsed for good.
Serializing an Unparsed profile hands back the original bytes untouched;
a Parsed one is re-encoded by ExifWriter, even if nothing was changed.
"""

import logging
import math
from typing import Callable, Iterator, List, Optional, Tuple

from exifcodec.config import CodecConfig
from exifcodec.rational import Rational
from exifcodec.reader import ExifReader
from exifcodec.tags import ExifParts, ExifTag, TagId
from exifcodec.value import ExifValue
from exifcodec.writer import ExifWriter

logger = logging.getLogger(__name__)

# Largest numerator of an unsigned RATIONAL
_RESOLUTION_MAX = 0xFFFFFFFF


class _Unparsed:
    """Raw bytes only; nothing decoded yet."""
    __slots__ = ('data',)

    def __init__(self, data: Optional[bytes]):
        self.data = data


class _Parsed:
    """Decoded, mutable value list.  Unique by tag."""
    __slots__ = ('values',)

    def __init__(self, values: List[ExifValue]):
        self.values = values


class ExifProfile:
    """Get, set, remove and re-serialize the EXIF values of an image.

    Not thread-safe; give each thread its own copy().
    """

    def __init__(self, data: Optional[bytes] = None,
                 config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig.default()
        self._parts = ExifParts(self.config.default_parts)
        # Raw bytes are never mutated, so copies may share them
        self._data = bytes(data) if data is not None else None
        self._state = _Unparsed(self._data)
        self._invalid_tags: List[int] = []
        self._thumbnail_offset = 0
        self._thumbnail_length = 0

    @classmethod
    def from_values(cls, values, config: Optional[CodecConfig] = None) -> 'ExifProfile':
        """Build a Parsed profile from existing values (copied, later tags win)."""
        profile = cls(config=config)
        profile._state = _Parsed([])
        for value in values:
            existing = profile.get_value(value.tag)
            if existing is not None:
                existing.value = value.value
            else:
                profile._state.values.append(value.copy())
        return profile

    @classmethod
    def from_profile(cls, other: 'ExifProfile') -> 'ExifProfile':
        """Copy another profile.  Parsed values are duplicated, raw bytes shared."""
        if other is None:
            raise TypeError('Cannot copy an EXIF profile from None')
        if not isinstance(other, ExifProfile):
            raise TypeError(f'Expected ExifProfile, got {type(other).__name__}')

        profile = cls(other._data, other.config)
        profile._parts = other._parts
        profile._thumbnail_offset = other._thumbnail_offset
        profile._thumbnail_length = other._thumbnail_length
        profile._invalid_tags = list(other._invalid_tags)
        if isinstance(other._state, _Parsed):
            profile._state = _Parsed([value.copy() for value in other._state.values])
        return profile

    def copy(self) -> 'ExifProfile':
        return ExifProfile.from_profile(self)

    __copy__ = copy

    def __deepcopy__(self, memo) -> 'ExifProfile':
        return self.copy()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_parsed(self) -> bool:
        return isinstance(self._state, _Parsed)

    def _initialize_values(self) -> List[ExifValue]:
        """Parse on first use.  The only Unparsed -> Parsed transition."""
        if isinstance(self._state, _Parsed):
            return self._state.values

        if self._data is None:
            self._state = _Parsed([])
            return self._state.values

        result = ExifReader(self.config).read(self._data)
        self._invalid_tags = list(result.invalid_tags)
        self._thumbnail_offset = result.thumbnail_offset
        self._thumbnail_length = result.thumbnail_length
        if result.invalid_tags:
            logger.debug("EXIF parse skipped %d invalid tag(s)", len(result.invalid_tags))
        self._state = _Parsed(result.values)
        return self._state.values

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def parts(self) -> ExifParts:
        """Which tag groups to_bytes() writes."""
        return self._parts

    @parts.setter
    def parts(self, value: ExifParts):
        self._parts = ExifParts(value)

    @property
    def invalid_tags(self) -> Tuple[int, ...]:
        """Tags skipped by the parser.  Empty until the profile is parsed."""
        return tuple(self._invalid_tags)

    @property
    def values(self) -> Tuple[ExifValue, ...]:
        """Snapshot of the current values.  Parses on first access.

        The tuple does not follow later set/remove calls, but its items are
        the live ExifValue objects.
        """
        return tuple(self._initialize_values())

    @property
    def thumbnail_offset(self) -> int:
        return self._thumbnail_offset

    @property
    def thumbnail_length(self) -> int:
        return self._thumbnail_length

    def get_value(self, tag: int) -> Optional[ExifValue]:
        """Return the value stored for tag, or None."""
        for value in self._initialize_values():
            if value.tag == tag:
                return value
        return None

    def set_value(self, tag: int, value) -> ExifValue:
        """Replace the payload of tag, or add a new value for it."""
        values = self._initialize_values()
        for existing in values:
            if existing.tag == tag:
                existing.value = value
                return existing
        new_value = ExifValue.create(tag, value)
        values.append(new_value)
        return new_value

    def remove_value(self, tag: int) -> bool:
        """Drop tag.  Returns True if it was present."""
        values = self._initialize_values()
        for i, existing in enumerate(values):
            if existing.tag == tag:
                del values[i]
                return True
        return False

    def get_resolution(self, tag: TagId) -> Optional[float]:
        """Float value of a rational tag such as XResolution, or None."""
        value = self.get_value(tag)
        if value is None or not isinstance(value.value, Rational):
            return None
        return value.value.to_float()

    # ------------------------------------------------------------------
    # Serialization and thumbnail
    # ------------------------------------------------------------------

    def to_bytes(self) -> Optional[bytes]:
        """Serialize the profile.

        Unparsed: the original bytes, verbatim.  Parsed with no values:
        None, meaning the container should omit the EXIF block.
        """
        if isinstance(self._state, _Unparsed):
            return self._state.data

        values = self._state.values
        if not values:
            return None
        thumbnail = self.thumbnail_bytes() if self._parts & ExifParts.THUMBNAIL else None
        return ExifWriter(values, self._parts, thumbnail).get_data()

    def thumbnail_bytes(self) -> Optional[bytes]:
        """The embedded thumbnail's bytes from the original buffer, or None."""
        self._initialize_values()
        offset, length = self._thumbnail_offset, self._thumbnail_length
        if offset <= 0 or length <= 0 or self._data is None:
            return None
        if offset + length > len(self._data):
            return None
        return self._data[offset:offset + length]

    def create_thumbnail(self, decoder: Optional[Callable[[bytes], object]] = None):
        """Decode the embedded thumbnail, or return None if there is none.

        decoder defaults to Pillow (exifcodec.image_io.decode_thumbnail).
        """
        data = self.thumbnail_bytes()
        if data is None:
            return None
        if decoder is None:
            from exifcodec.image_io import decode_thumbnail
            decoder = decode_thumbnail
        return decoder(data)

    # ------------------------------------------------------------------
    # Image metadata
    # ------------------------------------------------------------------

    def sync(self, metadata) -> None:
        """Copy the image resolution into existing X/YResolution tags.

        Only updates; a tag that is absent stays absent.  Resolutions that
        do not fit an unsigned RATIONAL are clamped: negative ones to 0 and
        finite ones above 0xFFFFFFFF to 0xFFFFFFFF.  nan is stored as 0/0
        and +inf as 1/0.
        """
        self._set_resolution(ExifTag.XResolution, metadata.horizontal_resolution)
        self._set_resolution(ExifTag.YResolution, metadata.vertical_resolution)

    def _set_resolution(self, tag: ExifTag, resolution: float):
        if self.get_value(tag) is not None:
            self.set_value(tag, _resolution_rational(resolution))

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._initialize_values())

    def __iter__(self) -> Iterator[ExifValue]:
        return iter(self.values)

    def __contains__(self, tag) -> bool:
        return self.get_value(tag) is not None

    def __repr__(self) -> str:
        if isinstance(self._state, _Parsed):
            return f'<ExifProfile parsed, {len(self._state.values)} value(s)>'
        size = len(self._data) if self._data is not None else 0
        return f'<ExifProfile unparsed, {size} byte(s)>'


def _resolution_rational(resolution: float) -> Rational:
    """Unsigned Rational for a resolution, clamped into the field range."""
    if resolution < 0:
        return Rational(0, 1)
    if resolution > _RESOLUTION_MAX and not math.isinf(resolution):
        return Rational(_RESOLUTION_MAX, 1)
    return Rational.from_float(resolution, signed=False)
