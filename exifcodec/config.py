"""Codec settings -- reader limits and serialization defaults.

Defaults are safe for untrusted input; a JSON file can override any of them
without touching source code.
"""

import json
from dataclasses import dataclass

from exifcodec.tags import ExifParts, parse_parts
from exifcodec.tiff import MAX_IFD_ENTRIES


@dataclass
class CodecConfig:
    """Limits applied while walking IFDs, plus the default parts mask."""

    max_ifd_entries: int = MAX_IFD_ENTRIES
    # Cap on IFDs visited per buffer (chain + sub-IFDs), against hostile chains
    max_ifds: int = 16
    keep_unknown_tags: bool = True
    default_parts: ExifParts = ExifParts.ALL

    @classmethod
    def default(cls) -> 'CodecConfig':
        """Return the built-in defaults."""
        return cls()

    @classmethod
    def from_json(cls, path) -> 'CodecConfig':
        """Load settings from a JSON file on top of the defaults.

        JSON format::

            {
              "max_ifd_entries": 1000,
              "max_ifds": 16,
              "keep_unknown_tags": true,
              "default_parts": ["ifd", "exif", "gps", "thumbnail"]
            }

        All keys are optional; omitted keys keep their default.
        """
        with open(str(path), 'r') as f:
            data = json.load(f)

        config = cls.default()
        if 'max_ifd_entries' in data:
            config.max_ifd_entries = int(data['max_ifd_entries'])
        if 'max_ifds' in data:
            config.max_ifds = int(data['max_ifds'])
        if 'keep_unknown_tags' in data:
            config.keep_unknown_tags = bool(data['keep_unknown_tags'])
        if 'default_parts' in data:
            config.default_parts = parse_parts(data['default_parts'])

        if config.max_ifd_entries < 1 or config.max_ifds < 1:
            raise ValueError('max_ifd_entries and max_ifds must be positive')
        return config
