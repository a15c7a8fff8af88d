"""
Configuration constants and call-time layout configuration.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import LayoutConfigError


class Anchor(Enum):
    """Named reference points for placing an overlay on the canvas."""

    TOP_LEFT = 'top-left'
    TOP_CENTER = 'top-center'
    BOTTOM_LEFT = 'bottom-left'
    BOTTOM_CENTER = 'bottom-center'
    BOTTOM_RIGHT = 'bottom-right'

    @property
    def is_bottom(self) -> bool:
        return self.value.startswith('bottom')


class Config:
    """Static configuration for the composer."""

    # Media types
    PDF_MEDIA_TYPE = 'application/pdf'
    JPEG_MEDIA_TYPES = ('image/jpeg', 'image/jpg', 'image/pjpeg')
    PNG_MEDIA_TYPES = ('image/png',)
    SUPPORTED_IMAGE_MEDIA_TYPES = JPEG_MEDIA_TYPES + PNG_MEDIA_TYPES

    # Pillow format name expected for each raster media type
    PIL_FORMATS = {
        'image/jpeg': 'JPEG',
        'image/jpg': 'JPEG',
        'image/pjpeg': 'JPEG',
        'image/png': 'PNG',
    }

    # File extension -> media type, used by the CLI
    EXTENSION_MEDIA_TYPES = {
        '.pdf': 'application/pdf',
        '.jpg': 'image/jpeg',
        '.jpeg': 'image/jpeg',
        '.png': 'image/png',
    }

    # A4 in points, used when the primary document has no pages
    DEFAULT_PAGE_SIZE = (595, 842)

    # Margins and spacing in points
    DEFAULT_MARGIN_TOP = 30
    DEFAULT_MARGIN_BOTTOM = 30
    DEFAULT_MARGIN_LEFT = 40
    DEFAULT_MARGIN_RIGHT = 40
    DEFAULT_SPACING = 15

    DEFAULT_ANCHOR_ORDER = (
        Anchor.TOP_LEFT,
        Anchor.TOP_CENTER,
        Anchor.BOTTOM_LEFT,
        Anchor.BOTTOM_CENTER,
        Anchor.BOTTOM_RIGHT,
    )

    PDF_PRODUCER = "order-composer"
    PDF_CREATOR = "Order Composer"

    # Serialization options passed to fitz.Document.tobytes()
    SAVE_OPTIONS = {
        'garbage': 3,
        'deflate': True,
        'clean': True,
        'no_new_id': True,
    }

    @staticmethod
    def normalize_media_type(media_type: Optional[str]) -> str:
        """Lower-case a media type and strip any parameters."""
        if not media_type:
            return ''
        return media_type.split(';', 1)[0].strip().lower()


@dataclass(frozen=True)
class SlotSpec:
    """Anchor and size bounds for one named static asset slot."""

    anchor: Anchor
    max_width: Optional[float] = None
    max_height: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.anchor, Anchor):
            raise LayoutConfigError(f"Slot anchor must be an Anchor, got {self.anchor!r}")
        for name, bound in (('max_width', self.max_width), ('max_height', self.max_height)):
            if bound is not None and bound <= 0:
                raise LayoutConfigError(f"{name} must be positive, got {bound}")


def _default_slots() -> Dict[str, SlotSpec]:
    return {
        'logo': SlotSpec(Anchor.TOP_LEFT, 200, 100),
        'coupon': SlotSpec(Anchor.BOTTOM_LEFT, 180, 120),
        'social': SlotSpec(Anchor.BOTTOM_CENTER, 180, 120),
        'feedback': SlotSpec(Anchor.BOTTOM_RIGHT, 180, 120),
    }


@dataclass(frozen=True)
class LayoutConfig:
    """
    Layout settings passed explicitly into each composition call.

    Attributes:
        margin_top: Distance from the top edge to top-anchored placements
        margin_bottom: Distance from the bottom edge to the bottom band
        margin_left: Left margin for left-anchored placements
        margin_right: Right margin for right-anchored placements
        spacing: Gap between consecutive placements sharing an anchor
        anchor_order: Order in which anchors are positioned. Each anchor keeps
            its own cursor and center anchors ignore cursors, so with the
            built-in anchors this order does not change the resulting layout
        slots: Static asset slot name -> SlotSpec
    """

    margin_top: float = Config.DEFAULT_MARGIN_TOP
    margin_bottom: float = Config.DEFAULT_MARGIN_BOTTOM
    margin_left: float = Config.DEFAULT_MARGIN_LEFT
    margin_right: float = Config.DEFAULT_MARGIN_RIGHT
    spacing: float = Config.DEFAULT_SPACING
    anchor_order: Tuple[Anchor, ...] = Config.DEFAULT_ANCHOR_ORDER
    slots: Dict[str, SlotSpec] = field(default_factory=_default_slots)

    def __post_init__(self):
        missing = [anchor.value for anchor in Anchor if anchor not in self.anchor_order]
        if missing or len(set(self.anchor_order)) != len(self.anchor_order):
            raise LayoutConfigError(
                f"anchor_order must list every anchor exactly once (missing: {missing})")
        for name in ('margin_top', 'margin_bottom', 'margin_left', 'margin_right', 'spacing'):
            if getattr(self, name) < 0:
                raise LayoutConfigError(f"{name} must not be negative, got {getattr(self, name)}")

    def with_slot(self, name: str, spec: SlotSpec) -> 'LayoutConfig':
        """Return a copy with one slot added or replaced."""
        slots = dict(self.slots)
        slots[name] = spec
        return replace(self, slots=slots)
