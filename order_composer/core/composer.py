"""
Composition orchestration.

This module contains the DocumentComposer class that drives one composition
call from input resolution through serialization.
"""

from typing import Dict, List, Mapping, Optional, Tuple

from ..document.asset_resolver import AssetResolver, DocumentAsset, ImageAsset, SourceAsset
from ..document.image_embedder import EmbeddedImage, ImageEmbedder
from ..layout.layout_engine import LayoutEngine, PlacementRequest, PlacementSpec, ResolvedPlacement
from ..pdf.page_composer import PageComposer, Secondary
from ..pdf.serializer import Serializer
from ..utils.logging_config import get_composer_logger
from .config import Config, LayoutConfig
from .errors import ComposerError, LayoutConfigError, UnsupportedMediaType


class DocumentComposer:
    """
    Composes a primary PDF, static overlays and a secondary asset into one PDF.

    The composer holds only configuration. Every call to compose() builds its
    own embedder and output document, so one instance can serve any number of
    calls.
    """

    def __init__(self, layout_config: Optional[LayoutConfig] = None):
        self.layout_config = layout_config or LayoutConfig()
        self.resolver = AssetResolver()
        self.layout_engine = LayoutEngine(self.layout_config)
        self.serializer = Serializer()
        self.logger = get_composer_logger()

    def compose(self, primary: Optional[SourceAsset],
                static_assets: Optional[Mapping[str, SourceAsset]] = None,
                secondary: Optional[SourceAsset] = None) -> bytes:
        """
        Run one composition.

        Args:
            primary: The base PDF
            static_assets: Slot name -> raster asset, e.g. {'logo': ...}
            secondary: Optional PDF or image appended after the primary

        Returns:
            The composed PDF as bytes

        Raises:
            ComposerError: Any failure; no partial output is produced
        """
        static_assets = dict(static_assets or {})
        try:
            # [Stage 1/5: Input Resolution]
            self.logger.info("[Stage 1/5: Input Resolution]")
            primary_doc = self.resolver.resolve_primary(primary)
            self.logger.info("  > Primary document: %d page(s)", primary_doc.page_count)
            static_images = self._resolve_static_assets(static_assets)
            secondary_asset = self.resolver.resolve_source(secondary) if secondary is not None else None

            # [Stage 2/5: Image Embedding]
            self.logger.info("[Stage 2/5: Image Embedding]")
            embedder = ImageEmbedder()
            embedded = {slot: embedder.embed(image) for slot, image in static_images.items()}
            secondary_content = self._prepare_secondary(secondary_asset, embedder)
            self.logger.info("  > %d distinct image(s) embedded", len(embedder))

            # [Stage 3/5: Layout]
            self.logger.info("[Stage 3/5: Layout]")
            placements = self._layout(primary_doc, embedded)

            # [Stage 4/5: Page Composition]
            self.logger.info("[Stage 4/5: Page Composition]")
            with PageComposer(embedder).compose(primary_doc, placements, secondary_content) as output:
                # [Stage 5/5: Serialization]
                self.logger.info("[Stage 5/5: Serialization]")
                pdf_bytes = self.serializer.finalize(output)

            self.logger.info("✓ Composition complete (%d bytes)", len(pdf_bytes))
            return pdf_bytes

        except ComposerError as e:
            self.logger.error("❌ Composition failed: %s", e)
            raise

    def _resolve_static_assets(self, static_assets: Dict[str, SourceAsset]) -> Dict[str, ImageAsset]:
        """Resolve every supplied slot, in layout config slot order."""
        unknown = sorted(set(static_assets) - set(self.layout_config.slots))
        if unknown:
            raise LayoutConfigError(f"No layout slot configured for: {', '.join(unknown)}")

        images = {}
        for slot in self.layout_config.slots:
            source = static_assets.get(slot)
            if source is None:
                continue
            resolved = self.resolver.resolve_source(source)
            if not isinstance(resolved, ImageAsset):
                raise UnsupportedMediaType(source.media_type, context=f"static slot '{slot}'")
            images[slot] = resolved
            self.logger.info("  > Static slot '%s': %s", slot, resolved.media_type)
        return images

    @staticmethod
    def _prepare_secondary(asset, embedder: ImageEmbedder) -> Optional[Secondary]:
        if asset is None:
            return None
        if isinstance(asset, ImageAsset):
            return embedder.embed(asset)
        return asset

    def _layout(self, primary_doc: DocumentAsset,
                embedded: Dict[str, EmbeddedImage]) -> List[Tuple[ResolvedPlacement, EmbeddedImage]]:
        """Resolve slot placements against the first page of the primary."""
        if not embedded:
            self.logger.info("  > No overlays to place. Skipping.")
            return []

        if primary_doc.page_count:
            canvas_width, canvas_height = primary_doc.page_sizes[0]
        else:
            canvas_width, canvas_height = Config.DEFAULT_PAGE_SIZE

        requests = []
        for slot, image in embedded.items():
            slot_spec = self.layout_config.slots[slot]
            spec = PlacementSpec(slot, slot_spec.anchor, slot_spec.max_width, slot_spec.max_height)
            requests.append(PlacementRequest(spec, image.width, image.height))

        resolved = self.layout_engine.resolve(canvas_width, canvas_height, requests)
        for placement in resolved:
            self.logger.info("  > %s: %.1f x %.1f at (%.1f, %.1f)", placement.asset_ref,
                             placement.width, placement.height, placement.x, placement.y)
        return [(placement, embedded[placement.asset_ref]) for placement in resolved]


def compose(primary: Optional[SourceAsset],
            static_assets: Optional[Mapping[str, SourceAsset]] = None,
            secondary: Optional[SourceAsset] = None,
            layout_config: Optional[LayoutConfig] = None) -> bytes:
    """Compose with a one-off DocumentComposer."""
    return DocumentComposer(layout_config).compose(primary, static_assets, secondary)
