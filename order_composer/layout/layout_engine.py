"""
Placement geometry for overlays anchored on a page.

Coordinates use PDF user space: origin at the bottom-left corner, y up.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.config import Anchor, LayoutConfig
from ..core.errors import LayoutConfigError
from ..utils.logging_config import get_layout_logger


@dataclass(frozen=True)
class PlacementSpec:
    """Where an asset should go and how large it may be."""

    asset_ref: str
    anchor: Anchor
    max_width: Optional[float] = None
    max_height: Optional[float] = None


@dataclass(frozen=True)
class ResolvedPlacement:
    """Final geometry of a placement, bottom-left origin."""

    asset_ref: str
    anchor: Anchor
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class PlacementRequest:
    """A placement spec paired with the asset's intrinsic size."""

    spec: PlacementSpec
    intrinsic_width: float
    intrinsic_height: float


def fit(intrinsic_width: float, intrinsic_height: float,
        max_width: Optional[float] = None,
        max_height: Optional[float] = None) -> Tuple[float, float]:
    """
    Scale a box down to fit within optional bounds, keeping its aspect ratio.

    Never upscales. A missing bound leaves that axis unconstrained.

    Example:
        >>> fit(800, 200, 200, 100)
        (200.0, 50.0)
    """
    if intrinsic_width <= 0 or intrinsic_height <= 0:
        raise ValueError(f"Intrinsic size must be positive, got {intrinsic_width}x{intrinsic_height}")
    if (max_width is not None and max_width <= 0) or (max_height is not None and max_height <= 0):
        raise ValueError(f"Bounds must be positive, got {max_width}x{max_height}")

    scale = 1.0
    if max_width is not None:
        scale = min(scale, max_width / intrinsic_width)
    if max_height is not None:
        scale = min(scale, max_height / intrinsic_height)

    width = intrinsic_width * scale
    height = intrinsic_height * scale

    # Guard the bounded axis against float drift
    if max_width is not None:
        width = min(width, max_width)
    if max_height is not None:
        height = min(height, max_height)

    return float(width), float(height)


class LayoutEngine:
    """Resolves placement specs into positions on a canvas."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self.logger = get_layout_logger()

    def resolve(self, canvas_width: float, canvas_height: float,
                requests: Sequence[PlacementRequest]) -> List[ResolvedPlacement]:
        """
        Resolve every request to (x, y, width, height).

        Sizes are resolved independently first. Positions are then assigned in
        one pass following config.anchor_order, since each placement in a
        shared band depends on the widths placed before it. Placements with the
        same anchor keep their request order.

        Args:
            canvas_width: Page width in points
            canvas_height: Page height in points
            requests: Placement requests

        Returns:
            Resolved placements in request order

        Raises:
            LayoutConfigError: If a size or bound is not positive
        """
        sizes = []
        for req in requests:
            try:
                sizes.append(fit(req.intrinsic_width, req.intrinsic_height,
                                 req.spec.max_width, req.spec.max_height))
            except ValueError as e:
                raise LayoutConfigError(f"Cannot size '{req.spec.asset_ref}': {e}") from e

        priority = {anchor: rank for rank, anchor in enumerate(self.config.anchor_order)}
        order = sorted(range(len(requests)), key=lambda i: priority[requests[i].spec.anchor])

        cursors = self._initial_cursors(canvas_width)
        resolved: Dict[int, ResolvedPlacement] = {}

        for idx in order:
            spec = requests[idx].spec
            width, height = sizes[idx]
            x = self._place_x(spec.anchor, width, canvas_width, cursors)
            y = self._place_y(spec.anchor, height, canvas_height)
            resolved[idx] = ResolvedPlacement(spec.asset_ref, spec.anchor, x, y, width, height)
            self.logger.debug("  > %s (%s): %.1f x %.1f at (%.1f, %.1f)",
                              spec.asset_ref, spec.anchor.value, width, height, x, y)

        return [resolved[i] for i in range(len(requests))]

    def _initial_cursors(self, canvas_width: float) -> Dict[Anchor, float]:
        return {
            Anchor.TOP_LEFT: self.config.margin_left,
            Anchor.BOTTOM_LEFT: self.config.margin_left,
            Anchor.BOTTOM_RIGHT: canvas_width - self.config.margin_right,
        }

    def _place_x(self, anchor: Anchor, width: float, canvas_width: float,
                 cursors: Dict[Anchor, float]) -> float:
        spacing = self.config.spacing

        if anchor in (Anchor.TOP_CENTER, Anchor.BOTTOM_CENTER):
            # Centered on the full canvas, not the space left over
            return (canvas_width - width) / 2

        if anchor is Anchor.BOTTOM_RIGHT:
            x = cursors[anchor] - width
            cursors[anchor] = x - spacing
            return x

        x = cursors[anchor]
        cursors[anchor] = x + width + spacing
        return x

    def _place_y(self, anchor: Anchor, height: float, canvas_height: float) -> float:
        if anchor.is_bottom:
            return self.config.margin_bottom
        return canvas_height - self.config.margin_top - height
