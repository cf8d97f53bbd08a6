"""Data models for EXIF read results and the image metadata collaborator."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from exifcodec.value import ExifValue

if TYPE_CHECKING:
    from exifcodec.profile import ExifProfile


@dataclass
class ExifReadResult:
    """Everything ExifReader recovers from one buffer."""
    values: List[ExifValue] = field(default_factory=list)
    invalid_tags: List[int] = field(default_factory=list)
    thumbnail_offset: int = 0
    thumbnail_length: int = 0
    byte_order: Optional[str] = None  # "II" | "MM" | None when no header

    def add_invalid(self, tag_id: int):
        if tag_id not in self.invalid_tags:
            self.invalid_tags.append(tag_id)

    @property
    def has_thumbnail(self) -> bool:
        return self.thumbnail_offset > 0 and self.thumbnail_length > 0


@dataclass
class ImageMetadata:
    """Image-level metadata that the EXIF resolution tags are kept in step with."""
    horizontal_resolution: float = 96.0
    vertical_resolution: float = 96.0
    exif_profile: Optional['ExifProfile'] = None

    def sync_profiles(self):
        """Push the current resolution into the attached EXIF profile."""
        if self.exif_profile is not None:
            self.exif_profile.sync(self)
