"""EXIF tag catalog -- type codes, tag groups and the known-tag table.

Tag ids are plain ints on the wire.  Known ids are members of ExifTag (an
IntEnum, so they compare equal to the raw id); anything else stays an int.
"""

from enum import IntEnum, IntFlag
from typing import Dict, NamedTuple, Optional, Tuple, Union


class ExifDataType(IntEnum):
    """TIFF field type codes."""
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12


# {type: (element_size_bytes, struct_format_char)}
TYPE_FORMATS: Dict[ExifDataType, Tuple[int, str]] = {
    ExifDataType.BYTE: (1, 'B'),
    ExifDataType.ASCII: (1, 's'),
    ExifDataType.SHORT: (2, 'H'),
    ExifDataType.LONG: (4, 'I'),
    ExifDataType.RATIONAL: (8, 'II'),
    ExifDataType.SBYTE: (1, 'b'),
    ExifDataType.UNDEFINED: (1, 's'),
    ExifDataType.SSHORT: (2, 'h'),
    ExifDataType.SLONG: (4, 'i'),
    ExifDataType.SRATIONAL: (8, 'ii'),
    ExifDataType.FLOAT: (4, 'f'),
    ExifDataType.DOUBLE: (8, 'd'),
}

INTEGER_TYPES = frozenset({
    ExifDataType.BYTE, ExifDataType.SHORT, ExifDataType.LONG,
    ExifDataType.SBYTE, ExifDataType.SSHORT, ExifDataType.SLONG,
})
RATIONAL_TYPES = frozenset({ExifDataType.RATIONAL, ExifDataType.SRATIONAL})
FLOAT_TYPES = frozenset({ExifDataType.FLOAT, ExifDataType.DOUBLE})

# Inclusive value range per integer type
INTEGER_RANGES: Dict[ExifDataType, Tuple[int, int]] = {
    ExifDataType.BYTE: (0, 0xFF),
    ExifDataType.SHORT: (0, 0xFFFF),
    ExifDataType.LONG: (0, 0xFFFFFFFF),
    ExifDataType.SBYTE: (-0x80, 0x7F),
    ExifDataType.SSHORT: (-0x8000, 0x7FFF),
    ExifDataType.SLONG: (-0x80000000, 0x7FFFFFFF),
}


def element_size(type_code: int) -> Optional[int]:
    """Byte size of one component, or None for an unknown type code."""
    try:
        return TYPE_FORMATS[ExifDataType(type_code)][0]
    except ValueError:
        return None


class ExifParts(IntFlag):
    """Tag groups, used to pick what gets written back."""
    NONE = 0
    IFD_TAGS = 1
    EXIF_TAGS = 2
    GPS_TAGS = 4
    THUMBNAIL = 8
    ALL = IFD_TAGS | EXIF_TAGS | GPS_TAGS | THUMBNAIL


PART_NAMES: Dict[str, ExifParts] = {
    'ifd': ExifParts.IFD_TAGS,
    'exif': ExifParts.EXIF_TAGS,
    'gps': ExifParts.GPS_TAGS,
    'thumbnail': ExifParts.THUMBNAIL,
}


def parse_parts(names) -> ExifParts:
    """Combine group names ('ifd', 'exif', 'gps', 'thumbnail', 'all') into a mask."""
    parts = ExifParts.NONE
    for name in names:
        key = name.strip().lower()
        if not key:
            continue
        if key == 'all':
            parts |= ExifParts.ALL
        elif key in PART_NAMES:
            parts |= PART_NAMES[key]
        else:
            raise ValueError(f'Unknown EXIF part: {name!r}')
    return parts


class ExifTag(IntEnum):
    """Known TIFF/EXIF/GPS tag ids."""
    # GPS sub-IFD
    GPSVersionID = 0x0000
    GPSLatitudeRef = 0x0001
    GPSLatitude = 0x0002
    GPSLongitudeRef = 0x0003
    GPSLongitude = 0x0004
    GPSAltitudeRef = 0x0005
    GPSAltitude = 0x0006
    GPSTimestamp = 0x0007
    GPSSatellites = 0x0008
    GPSStatus = 0x0009
    GPSMeasureMode = 0x000A
    GPSDOP = 0x000B
    GPSSpeedRef = 0x000C
    GPSSpeed = 0x000D
    GPSTrackRef = 0x000E
    GPSTrack = 0x000F
    GPSImgDirectionRef = 0x0010
    GPSImgDirection = 0x0011
    GPSMapDatum = 0x0012
    GPSDestLatitudeRef = 0x0013
    GPSDestLatitude = 0x0014
    GPSDestLongitudeRef = 0x0015
    GPSDestLongitude = 0x0016
    GPSDestBearingRef = 0x0017
    GPSDestBearing = 0x0018
    GPSDestDistanceRef = 0x0019
    GPSDestDistance = 0x001A
    GPSProcessingMethod = 0x001B
    GPSAreaInformation = 0x001C
    GPSDateStamp = 0x001D
    GPSDifferential = 0x001E
    GPSHPositioningError = 0x001F

    # Primary IFD
    NewSubfileType = 0x00FE
    SubfileType = 0x00FF
    ImageWidth = 0x0100
    ImageLength = 0x0101
    BitsPerSample = 0x0102
    Compression = 0x0103
    PhotometricInterpretation = 0x0106
    ImageDescription = 0x010E
    Make = 0x010F
    Model = 0x0110
    StripOffsets = 0x0111
    Orientation = 0x0112
    SamplesPerPixel = 0x0115
    RowsPerStrip = 0x0116
    StripByteCounts = 0x0117
    XResolution = 0x011A
    YResolution = 0x011B
    PlanarConfiguration = 0x011C
    ResolutionUnit = 0x0128
    TransferFunction = 0x012D
    Software = 0x0131
    DateTime = 0x0132
    Artist = 0x013B
    HostComputer = 0x013C
    WhitePoint = 0x013E
    PrimaryChromaticities = 0x013F
    JPEGInterchangeFormat = 0x0201
    JPEGInterchangeFormatLength = 0x0202
    YCbCrCoefficients = 0x0211
    YCbCrSubsampling = 0x0212
    YCbCrPositioning = 0x0213
    ReferenceBlackWhite = 0x0214
    Rating = 0x4746
    RatingPercent = 0x4749
    Copyright = 0x8298
    ExifOffset = 0x8769
    GPSIFDOffset = 0x8825
    XPTitle = 0x9C9B
    XPComment = 0x9C9C
    XPAuthor = 0x9C9D
    XPKeywords = 0x9C9E
    XPSubject = 0x9C9F

    # EXIF sub-IFD
    ExposureTime = 0x829A
    FNumber = 0x829D
    ExposureProgram = 0x8822
    SpectralSensitivity = 0x8824
    ISOSpeedRatings = 0x8827
    OECF = 0x8828
    SensitivityType = 0x8830
    ExifVersion = 0x9000
    DateTimeOriginal = 0x9003
    DateTimeDigitized = 0x9004
    OffsetTime = 0x9010
    OffsetTimeOriginal = 0x9011
    OffsetTimeDigitized = 0x9012
    ComponentsConfiguration = 0x9101
    CompressedBitsPerPixel = 0x9102
    ShutterSpeedValue = 0x9201
    ApertureValue = 0x9202
    BrightnessValue = 0x9203
    ExposureBiasValue = 0x9204
    MaxApertureValue = 0x9205
    SubjectDistance = 0x9206
    MeteringMode = 0x9207
    LightSource = 0x9208
    Flash = 0x9209
    FocalLength = 0x920A
    SubjectArea = 0x9214
    MakerNote = 0x927C
    UserComment = 0x9286
    SubsecTime = 0x9290
    SubsecTimeOriginal = 0x9291
    SubsecTimeDigitized = 0x9292
    FlashpixVersion = 0xA000
    ColorSpace = 0xA001
    PixelXDimension = 0xA002
    PixelYDimension = 0xA003
    RelatedSoundFile = 0xA004
    InteroperabilityOffset = 0xA005
    FlashEnergy = 0xA20B
    FocalPlaneXResolution = 0xA20E
    FocalPlaneYResolution = 0xA20F
    FocalPlaneResolutionUnit = 0xA210
    SubjectLocation = 0xA214
    ExposureIndex = 0xA215
    SensingMethod = 0xA217
    FileSource = 0xA300
    SceneType = 0xA301
    CFAPattern = 0xA302
    CustomRendered = 0xA401
    ExposureMode = 0xA402
    WhiteBalance = 0xA403
    DigitalZoomRatio = 0xA404
    FocalLengthIn35mmFilm = 0xA405
    SceneCaptureType = 0xA406
    GainControl = 0xA407
    Contrast = 0xA408
    Saturation = 0xA409
    Sharpness = 0xA40A
    DeviceSettingDescription = 0xA40B
    SubjectDistanceRange = 0xA40C
    ImageUniqueID = 0xA420
    OwnerName = 0xA430
    SerialNumber = 0xA431
    LensInfo = 0xA432
    LensMake = 0xA433
    LensModel = 0xA434
    LensSerialNumber = 0xA435
    Gamma = 0xA500


class TagInfo(NamedTuple):
    """Catalog entry: owning group, allowed types (first is preferred), count (0 = any)."""
    part: ExifParts
    types: Tuple[ExifDataType, ...]
    count: int


# Tags that describe layout rather than user data; never exposed as values
POINTER_TAGS = frozenset({
    ExifTag.ExifOffset, ExifTag.GPSIFDOffset, ExifTag.InteroperabilityOffset,
})
THUMBNAIL_TAGS = frozenset({
    ExifTag.JPEGInterchangeFormat, ExifTag.JPEGInterchangeFormatLength,
})
STRUCTURAL_TAGS = POINTER_TAGS | THUMBNAIL_TAGS

_T = ExifDataType
_IFD = ExifParts.IFD_TAGS
_EXIF = ExifParts.EXIF_TAGS
_GPS = ExifParts.GPS_TAGS
_SHORT_OR_LONG = (_T.SHORT, _T.LONG)
_LONG_OR_SHORT = (_T.LONG, _T.SHORT)


def _build_catalog() -> Dict[int, TagInfo]:
    rows = [
        # tag, part, types, count
        (ExifTag.GPSVersionID, _GPS, (_T.BYTE,), 4),
        (ExifTag.GPSLatitudeRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSLatitude, _GPS, (_T.RATIONAL,), 3),
        (ExifTag.GPSLongitudeRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSLongitude, _GPS, (_T.RATIONAL,), 3),
        (ExifTag.GPSAltitudeRef, _GPS, (_T.BYTE,), 1),
        (ExifTag.GPSAltitude, _GPS, (_T.RATIONAL,), 1),
        (ExifTag.GPSTimestamp, _GPS, (_T.RATIONAL,), 3),
        (ExifTag.GPSSatellites, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSStatus, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSMeasureMode, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSDOP, _GPS, (_T.RATIONAL,), 1),
        (ExifTag.GPSSpeedRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSSpeed, _GPS, (_T.RATIONAL,), 1),
        (ExifTag.GPSTrackRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSTrack, _GPS, (_T.RATIONAL,), 1),
        (ExifTag.GPSImgDirectionRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSImgDirection, _GPS, (_T.RATIONAL,), 1),
        (ExifTag.GPSMapDatum, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSDestLatitudeRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSDestLatitude, _GPS, (_T.RATIONAL,), 3),
        (ExifTag.GPSDestLongitudeRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSDestLongitude, _GPS, (_T.RATIONAL,), 3),
        (ExifTag.GPSDestBearingRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSDestBearing, _GPS, (_T.RATIONAL,), 1),
        (ExifTag.GPSDestDistanceRef, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSDestDistance, _GPS, (_T.RATIONAL,), 1),
        (ExifTag.GPSProcessingMethod, _GPS, (_T.UNDEFINED,), 0),
        (ExifTag.GPSAreaInformation, _GPS, (_T.UNDEFINED,), 0),
        (ExifTag.GPSDateStamp, _GPS, (_T.ASCII,), 0),
        (ExifTag.GPSDifferential, _GPS, (_T.SHORT,), 1),
        (ExifTag.GPSHPositioningError, _GPS, (_T.RATIONAL,), 1),

        (ExifTag.NewSubfileType, _IFD, (_T.LONG,), 1),
        (ExifTag.SubfileType, _IFD, (_T.SHORT,), 1),
        (ExifTag.ImageWidth, _IFD, _LONG_OR_SHORT, 1),
        (ExifTag.ImageLength, _IFD, _LONG_OR_SHORT, 1),
        (ExifTag.BitsPerSample, _IFD, (_T.SHORT,), 0),
        (ExifTag.Compression, _IFD, (_T.SHORT,), 1),
        (ExifTag.PhotometricInterpretation, _IFD, (_T.SHORT,), 1),
        (ExifTag.ImageDescription, _IFD, (_T.ASCII,), 0),
        (ExifTag.Make, _IFD, (_T.ASCII,), 0),
        (ExifTag.Model, _IFD, (_T.ASCII,), 0),
        (ExifTag.StripOffsets, _IFD, _LONG_OR_SHORT, 0),
        (ExifTag.Orientation, _IFD, (_T.SHORT,), 1),
        (ExifTag.SamplesPerPixel, _IFD, (_T.SHORT,), 1),
        (ExifTag.RowsPerStrip, _IFD, _LONG_OR_SHORT, 1),
        (ExifTag.StripByteCounts, _IFD, _LONG_OR_SHORT, 0),
        (ExifTag.XResolution, _IFD, (_T.RATIONAL,), 1),
        (ExifTag.YResolution, _IFD, (_T.RATIONAL,), 1),
        (ExifTag.PlanarConfiguration, _IFD, (_T.SHORT,), 1),
        (ExifTag.ResolutionUnit, _IFD, (_T.SHORT,), 1),
        (ExifTag.TransferFunction, _IFD, (_T.SHORT,), 768),
        (ExifTag.Software, _IFD, (_T.ASCII,), 0),
        (ExifTag.DateTime, _IFD, (_T.ASCII,), 0),
        (ExifTag.Artist, _IFD, (_T.ASCII,), 0),
        (ExifTag.HostComputer, _IFD, (_T.ASCII,), 0),
        (ExifTag.WhitePoint, _IFD, (_T.RATIONAL,), 2),
        (ExifTag.PrimaryChromaticities, _IFD, (_T.RATIONAL,), 6),
        (ExifTag.JPEGInterchangeFormat, ExifParts.THUMBNAIL, (_T.LONG,), 1),
        (ExifTag.JPEGInterchangeFormatLength, ExifParts.THUMBNAIL, (_T.LONG,), 1),
        (ExifTag.YCbCrCoefficients, _IFD, (_T.RATIONAL,), 3),
        (ExifTag.YCbCrSubsampling, _IFD, (_T.SHORT,), 2),
        (ExifTag.YCbCrPositioning, _IFD, (_T.SHORT,), 1),
        (ExifTag.ReferenceBlackWhite, _IFD, (_T.RATIONAL,), 6),
        (ExifTag.Rating, _IFD, (_T.SHORT,), 1),
        (ExifTag.RatingPercent, _IFD, (_T.SHORT,), 1),
        (ExifTag.Copyright, _IFD, (_T.ASCII,), 0),
        (ExifTag.ExifOffset, _IFD, (_T.LONG,), 1),
        (ExifTag.GPSIFDOffset, _IFD, (_T.LONG,), 1),
        (ExifTag.XPTitle, _IFD, (_T.BYTE,), 0),
        (ExifTag.XPComment, _IFD, (_T.BYTE,), 0),
        (ExifTag.XPAuthor, _IFD, (_T.BYTE,), 0),
        (ExifTag.XPKeywords, _IFD, (_T.BYTE,), 0),
        (ExifTag.XPSubject, _IFD, (_T.BYTE,), 0),

        (ExifTag.ExposureTime, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.FNumber, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.ExposureProgram, _EXIF, (_T.SHORT,), 1),
        (ExifTag.SpectralSensitivity, _EXIF, (_T.ASCII,), 0),
        (ExifTag.ISOSpeedRatings, _EXIF, (_T.SHORT,), 0),
        (ExifTag.OECF, _EXIF, (_T.UNDEFINED,), 0),
        (ExifTag.SensitivityType, _EXIF, (_T.SHORT,), 1),
        (ExifTag.ExifVersion, _EXIF, (_T.UNDEFINED,), 4),
        (ExifTag.DateTimeOriginal, _EXIF, (_T.ASCII,), 0),
        (ExifTag.DateTimeDigitized, _EXIF, (_T.ASCII,), 0),
        (ExifTag.OffsetTime, _EXIF, (_T.ASCII,), 0),
        (ExifTag.OffsetTimeOriginal, _EXIF, (_T.ASCII,), 0),
        (ExifTag.OffsetTimeDigitized, _EXIF, (_T.ASCII,), 0),
        (ExifTag.ComponentsConfiguration, _EXIF, (_T.UNDEFINED,), 4),
        (ExifTag.CompressedBitsPerPixel, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.ShutterSpeedValue, _EXIF, (_T.SRATIONAL,), 1),
        (ExifTag.ApertureValue, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.BrightnessValue, _EXIF, (_T.SRATIONAL,), 1),
        (ExifTag.ExposureBiasValue, _EXIF, (_T.SRATIONAL,), 1),
        (ExifTag.MaxApertureValue, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.SubjectDistance, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.MeteringMode, _EXIF, (_T.SHORT,), 1),
        (ExifTag.LightSource, _EXIF, (_T.SHORT,), 1),
        (ExifTag.Flash, _EXIF, (_T.SHORT,), 1),
        (ExifTag.FocalLength, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.SubjectArea, _EXIF, (_T.SHORT,), 0),
        (ExifTag.MakerNote, _EXIF, (_T.UNDEFINED,), 0),
        (ExifTag.UserComment, _EXIF, (_T.UNDEFINED,), 0),
        (ExifTag.SubsecTime, _EXIF, (_T.ASCII,), 0),
        (ExifTag.SubsecTimeOriginal, _EXIF, (_T.ASCII,), 0),
        (ExifTag.SubsecTimeDigitized, _EXIF, (_T.ASCII,), 0),
        (ExifTag.FlashpixVersion, _EXIF, (_T.UNDEFINED,), 4),
        (ExifTag.ColorSpace, _EXIF, (_T.SHORT,), 1),
        (ExifTag.PixelXDimension, _EXIF, _LONG_OR_SHORT, 1),
        (ExifTag.PixelYDimension, _EXIF, _LONG_OR_SHORT, 1),
        (ExifTag.RelatedSoundFile, _EXIF, (_T.ASCII,), 0),
        (ExifTag.InteroperabilityOffset, _EXIF, (_T.LONG,), 1),
        (ExifTag.FlashEnergy, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.FocalPlaneXResolution, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.FocalPlaneYResolution, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.FocalPlaneResolutionUnit, _EXIF, (_T.SHORT,), 1),
        (ExifTag.SubjectLocation, _EXIF, (_T.SHORT,), 2),
        (ExifTag.ExposureIndex, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.SensingMethod, _EXIF, (_T.SHORT,), 1),
        (ExifTag.FileSource, _EXIF, (_T.UNDEFINED,), 1),
        (ExifTag.SceneType, _EXIF, (_T.UNDEFINED,), 1),
        (ExifTag.CFAPattern, _EXIF, (_T.UNDEFINED,), 0),
        (ExifTag.CustomRendered, _EXIF, (_T.SHORT,), 1),
        (ExifTag.ExposureMode, _EXIF, (_T.SHORT,), 1),
        (ExifTag.WhiteBalance, _EXIF, (_T.SHORT,), 1),
        (ExifTag.DigitalZoomRatio, _EXIF, (_T.RATIONAL,), 1),
        (ExifTag.FocalLengthIn35mmFilm, _EXIF, (_T.SHORT,), 1),
        (ExifTag.SceneCaptureType, _EXIF, (_T.SHORT,), 1),
        (ExifTag.GainControl, _EXIF, (_T.SHORT,), 1),
        (ExifTag.Contrast, _EXIF, (_T.SHORT,), 1),
        (ExifTag.Saturation, _EXIF, (_T.SHORT,), 1),
        (ExifTag.Sharpness, _EXIF, (_T.SHORT,), 1),
        (ExifTag.DeviceSettingDescription, _EXIF, (_T.UNDEFINED,), 0),
        (ExifTag.SubjectDistanceRange, _EXIF, (_T.SHORT,), 1),
        (ExifTag.ImageUniqueID, _EXIF, (_T.ASCII,), 0),
        (ExifTag.OwnerName, _EXIF, (_T.ASCII,), 0),
        (ExifTag.SerialNumber, _EXIF, (_T.ASCII,), 0),
        (ExifTag.LensInfo, _EXIF, (_T.RATIONAL,), 4),
        (ExifTag.LensMake, _EXIF, (_T.ASCII,), 0),
        (ExifTag.LensModel, _EXIF, (_T.ASCII,), 0),
        (ExifTag.LensSerialNumber, _EXIF, (_T.ASCII,), 0),
        (ExifTag.Gamma, _EXIF, (_T.RATIONAL,), 1),
    ]
    return {int(tag): TagInfo(part, types, count) for tag, part, types, count in rows}


TAG_CATALOG: Dict[int, TagInfo] = _build_catalog()

TagId = Union[ExifTag, int]


def to_tag(tag_id: int) -> TagId:
    """Return the ExifTag member for a known id, else the raw int."""
    try:
        return ExifTag(tag_id)
    except ValueError:
        return int(tag_id)


def lookup(tag_id: int) -> Optional[TagInfo]:
    """Catalog entry for a tag id, or None for unknown tags."""
    return TAG_CATALOG.get(int(tag_id))


def tag_name(tag_id: int) -> str:
    """Human-readable name, 'Tag_0x9999' for unknown ids."""
    tag = to_tag(tag_id)
    if isinstance(tag, ExifTag):
        return tag.name
    return f'Tag_0x{tag:04X}'


def resolve_tag(name_or_id: str) -> TagId:
    """Parse a CLI-style tag reference: a catalog name, decimal or 0x-hex id."""
    text = name_or_id.strip()
    for member in ExifTag:
        if member.name.lower() == text.lower():
            return member
    try:
        tag_id = int(text, 0)
    except ValueError:
        raise ValueError(f'Unknown EXIF tag: {name_or_id!r}') from None
    if not 0 <= tag_id <= 0xFFFF:
        raise ValueError(f'Tag id {tag_id} out of range')
    return to_tag(tag_id)


def is_valid_entry(tag_id: int, type_code: int, count: int) -> bool:
    """Check a wire entry's type and count against the catalog.

    Unknown tags only need a known type code and a non-zero count.
    """
    if element_size(type_code) is None or count <= 0:
        return False
    info = lookup(tag_id)
    if info is None:
        return True
    if type_code not in info.types:
        return False
    return info.count == 0 or info.count == count
