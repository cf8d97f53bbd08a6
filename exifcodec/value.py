"""ExifValue -- one (tag, type, payload) triple and its wire encoding.

Payloads are a closed set of shapes, checked against the type code on every
assignment:

    BYTE scalar, SHORT, LONG, SBYTE, SSHORT, SLONG   int or tuple of int
    BYTE array, UNDEFINED                           bytes
    FLOAT, DOUBLE                                   float or tuple of float
    RATIONAL, SRATIONAL                             Rational or tuple of Rational
    ASCII                                           str
"""

import struct
from typing import Optional

from exifcodec.rational import Rational
from exifcodec.tags import (
    FLOAT_TYPES,
    INTEGER_RANGES,
    INTEGER_TYPES,
    RATIONAL_TYPES,
    TYPE_FORMATS,
    ExifDataType,
    ExifParts,
    TagId,
    lookup,
    tag_name,
    to_tag,
)

# Sentinel for "payload does not fit this type"
_NO_FIT = object()


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return _is_int(value) or isinstance(value, float)


def _fit_int(data_type: ExifDataType, value):
    lo, hi = INTEGER_RANGES[data_type]
    if _is_int(value):
        return value if lo <= value <= hi else _NO_FIT
    if isinstance(value, (bytes, bytearray)):
        if data_type == ExifDataType.BYTE and value:
            return bytes(value)
        return _NO_FIT
    if isinstance(value, (list, tuple)) and value:
        if not all(_is_int(v) and lo <= v <= hi for v in value):
            return _NO_FIT
        if data_type == ExifDataType.BYTE:
            return bytes(value)
        return tuple(value)
    return _NO_FIT


def _fit_rational(data_type: ExifDataType, value):
    signed = data_type == ExifDataType.SRATIONAL

    def convert(r):
        if not isinstance(r, Rational):
            return _NO_FIT
        if r.signed == signed:
            return r
        try:
            return Rational(r.numerator, r.denominator, signed)
        except ValueError:
            return _NO_FIT

    if isinstance(value, Rational):
        return convert(value)
    if isinstance(value, (list, tuple)) and value:
        converted = tuple(convert(v) for v in value)
        if any(v is _NO_FIT for v in converted):
            return _NO_FIT
        return converted
    return _NO_FIT


def _fit(data_type: ExifDataType, value):
    """Normalise value for data_type, or return _NO_FIT."""
    if data_type == ExifDataType.ASCII:
        return value if isinstance(value, str) else _NO_FIT
    if data_type == ExifDataType.UNDEFINED:
        if isinstance(value, (bytes, bytearray)) and value:
            return bytes(value)
        if isinstance(value, (list, tuple)) and value and all(
                _is_int(v) and 0 <= v <= 0xFF for v in value):
            return bytes(value)
        return _NO_FIT
    if data_type in INTEGER_TYPES:
        return _fit_int(data_type, value)
    if data_type in FLOAT_TYPES:
        if _is_number(value):
            return float(value)
        if isinstance(value, (list, tuple)) and value and all(_is_number(v) for v in value):
            return tuple(float(v) for v in value)
        return _NO_FIT
    if data_type in RATIONAL_TYPES:
        return _fit_rational(data_type, value)
    return _NO_FIT


def _int_type(values) -> Optional[ExifDataType]:
    lo, hi = min(values), max(values)
    if lo >= 0:
        if hi <= 0xFFFF:
            return ExifDataType.SHORT
        if hi <= 0xFFFFFFFF:
            return ExifDataType.LONG
        return None
    for candidate in (ExifDataType.SSHORT, ExifDataType.SLONG):
        c_lo, c_hi = INTEGER_RANGES[candidate]
        if c_lo <= lo and hi <= c_hi:
            return candidate
    return None


def infer_type(value) -> ExifDataType:
    """Pick a type code from the runtime shape of a payload.

    Raises TypeError for shapes with no EXIF representation.
    """
    data_type = None
    if isinstance(value, str):
        data_type = ExifDataType.ASCII
    elif isinstance(value, (bytes, bytearray)):
        data_type = ExifDataType.UNDEFINED if value else None
    elif isinstance(value, Rational):
        data_type = ExifDataType.SRATIONAL if value.signed else ExifDataType.RATIONAL
    elif isinstance(value, float):
        data_type = ExifDataType.DOUBLE
    elif _is_int(value):
        data_type = _int_type([value])
    elif isinstance(value, (list, tuple)) and value:
        if all(isinstance(v, Rational) for v in value):
            signed = any(v.signed for v in value)
            data_type = ExifDataType.SRATIONAL if signed else ExifDataType.RATIONAL
        elif all(_is_int(v) for v in value):
            data_type = _int_type(value)
        elif all(_is_number(v) for v in value):
            data_type = ExifDataType.DOUBLE
    if data_type is None:
        raise TypeError(f'Unsupported EXIF value: {value!r}')
    return data_type


def _check_tag(tag) -> TagId:
    if not _is_int(tag):
        raise TypeError(f'EXIF tag must be an int, got {type(tag).__name__}')
    if not 0 <= tag <= 0xFFFF:
        raise ValueError(f'EXIF tag {tag} out of range')
    return to_tag(tag)


class ExifValue:
    """A single EXIF value.  The tag is fixed; the payload may be reassigned."""
    __slots__ = ('_tag', '_data_type', '_value', 'part')

    def __init__(self, tag: int, data_type: int, value, part: Optional[ExifParts] = None):
        self._tag = _check_tag(tag)
        self._data_type = ExifDataType(data_type)
        payload = _fit(self._data_type, value)
        if payload is _NO_FIT:
            raise TypeError(
                f'{value!r} is not a valid {self._data_type.name} value '
                f'for {tag_name(self._tag)}')
        self._value = payload
        if part is None:
            info = lookup(self._tag)
            part = info.part if info is not None else ExifParts.EXIF_TAGS
        self.part = part

    @classmethod
    def create(cls, tag: int, value) -> 'ExifValue':
        """Build a value, taking the type from the catalog when the payload fits.

        Unknown tags (and payloads that do not fit the catalog type) fall
        back to infer_type().  Numbers given for rational tags are converted.
        """
        tag = _check_tag(tag)
        info = lookup(tag)
        if info is not None:
            for data_type in info.types:
                payload = _fit(data_type, value)
                if payload is not _NO_FIT:
                    return cls(tag, data_type, payload, info.part)
            preferred = info.types[0]
            if preferred in RATIONAL_TYPES and _is_number(value):
                signed = preferred == ExifDataType.SRATIONAL
                return cls(tag, preferred, Rational.from_float(value, signed), info.part)
        return cls(tag, infer_type(value), value, info.part if info else None)

    @property
    def tag(self) -> TagId:
        return self._tag

    @property
    def data_type(self) -> ExifDataType:
        return self._data_type

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, new_value):
        payload = _fit(self._data_type, new_value)
        if payload is _NO_FIT:
            resolved = ExifValue.create(self._tag, new_value)
            self._data_type = resolved.data_type
            payload = resolved.value
        self._value = payload

    @property
    def is_array(self) -> bool:
        return isinstance(self._value, (tuple, bytes))

    @property
    def components(self) -> int:
        """Component count as written in the IFD entry."""
        if self._data_type == ExifDataType.ASCII:
            return len(self._value.encode('utf-8')) + 1
        if self.is_array:
            return len(self._value)
        return 1

    @property
    def name(self) -> str:
        return tag_name(self._tag)

    def encode(self, endian: str = '<') -> bytes:
        """Serialize the payload (without padding) in the given byte order."""
        dt = self._data_type
        value = self._value
        if dt == ExifDataType.ASCII:
            return value.encode('utf-8') + b'\x00'
        if isinstance(value, bytes):
            return value
        items = value if isinstance(value, tuple) else (value,)
        fmt_char = TYPE_FORMATS[dt][1]
        if dt in RATIONAL_TYPES:
            flat = []
            for r in items:
                flat.extend((r.numerator, r.denominator))
            return struct.pack(endian + fmt_char * len(items), *flat)
        return struct.pack(endian + fmt_char * len(items), *items)

    def copy(self) -> 'ExifValue':
        # Payloads are immutable (int, float, str, bytes, Rational, tuples)
        return ExifValue(self._tag, self._data_type, self._value, self.part)

    def format_value(self) -> str:
        """Short display form used by the CLI."""
        value = self._value
        if isinstance(value, bytes):
            if len(value) > 16:
                return f'{value[:16].hex(" ")} ... ({len(value)} bytes)'
            return value.hex(' ')
        if isinstance(value, tuple):
            return ', '.join(str(v) for v in value)
        return str(value)

    def __eq__(self, other):
        if not isinstance(other, ExifValue):
            return NotImplemented
        return (self._tag == other._tag and self._data_type == other._data_type
                and self._value == other._value)

    __hash__ = None

    def __repr__(self) -> str:
        return f'ExifValue({self.name}, {self._data_type.name}, {self._value!r})'

    def __str__(self) -> str:
        return self.format_value()


def decode_value(data_type: int, raw: bytes, count: int,
                 endian: str, scalar: bool) -> object:
    """Turn the raw bytes of an entry into a payload for ExifValue.

    raw must already hold exactly count components; callers bounds-check.
    """
    data_type = ExifDataType(data_type)
    if data_type == ExifDataType.ASCII:
        return raw.rstrip(b'\x00').decode('utf-8', errors='replace')
    if data_type == ExifDataType.UNDEFINED:
        return bytes(raw)
    if data_type == ExifDataType.BYTE:
        return raw[0] if scalar else bytes(raw)

    fmt_char = TYPE_FORMATS[data_type][1]
    items = struct.unpack(endian + fmt_char * count, raw)
    if data_type in RATIONAL_TYPES:
        signed = data_type == ExifDataType.SRATIONAL
        rationals = tuple(Rational(items[i], items[i + 1], signed)
                          for i in range(0, len(items), 2))
        return rationals[0] if scalar else rationals
    return items[0] if scalar else tuple(items)
