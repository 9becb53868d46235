"""
SVG to PNG conversion for tokens that end up inside PDFs.

reportlab cannot place generated SVG markup directly, so tokens are rendered
to PNG first. Rendering can fail; callers building documents use
``rasterize_or_none`` and fall back to printing the ids as text.
"""
import asyncio
import logging
from contextlib import closing
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from badges.barcode import encode_linear_visual
from badges.errors import RasterizationError

logger = logging.getLogger(__name__)


class Renderer:
    """Turns payloads into vector markup and vector markup into PNG bytes."""

    def to_vector_markup(self, payload, **options):
        return encode_linear_visual(payload, **options)

    async def rasterize(self, markup):
        raise NotImplementedError


class CairoRenderer(Renderer):
    def __init__(self, scale=1.0, background_color="white"):
        self.scale = scale
        self.background_color = background_color

    def _render(self, markup):
        try:
            import cairosvg
        except (ImportError, OSError) as e:
            raise RasterizationError(f"SVG renderer not available: {e}") from e

        if isinstance(markup, str):
            markup = markup.encode("utf-8")

        with closing(BytesIO()) as out:
            try:
                cairosvg.svg2png(
                    bytestring=markup,
                    write_to=out,
                    scale=self.scale,
                    background_color=self.background_color,
                )
            except Exception as e:
                raise RasterizationError(f"Could not render SVG: {e}") from e
            png = out.getvalue()

        if not png:
            raise RasterizationError("Renderer produced an empty image")
        _verify_png(png)
        return png

    async def rasterize(self, markup):
        return await asyncio.to_thread(self._render, markup)


def _verify_png(png):
    with closing(BytesIO(png)) as buf:
        try:
            with Image.open(buf) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise RasterizationError(f"Renderer output is not a valid PNG: {e}") from e


_default_renderer = CairoRenderer()


async def rasterize(markup, renderer=None):
    renderer = renderer or _default_renderer
    return await renderer.rasterize(markup)


async def rasterize_or_none(markup, renderer=None):
    """Rasterize, returning None instead of raising when rendering fails."""
    try:
        return await rasterize(markup, renderer)
    except RasterizationError as e:
        logger.warning("Token rasterization failed, using text fallback: %s", e)
        return None
