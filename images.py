# images.py
"""
Best-effort decoding of logo and signature images.

embed_image() never raises for bad image data: it returns either an
EmbeddedImage ready to draw or an AssetError describing what went wrong.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from typing import Union

from reportlab.lib.utils import ImageReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddedImage:
    data: bytes
    pixel_width: int
    pixel_height: int

    def fit(self, max_w: float, max_h: float) -> tuple[float, float]:
        """Largest (w, h) inside the box that keeps the aspect ratio."""
        scale = min(max_w / float(self.pixel_width), max_h / float(self.pixel_height))
        return self.pixel_width * scale, self.pixel_height * scale

    def reader(self) -> ImageReader:
        return ImageReader(io.BytesIO(self.data))


@dataclass(frozen=True)
class AssetError:
    asset: str
    reason: str

    def __str__(self) -> str:
        return f"{self.asset}: {self.reason}"


EmbedResult = Union[EmbeddedImage, AssetError]


def _decode_ref(ref: bytes | str) -> bytes:
    if isinstance(ref, (bytes, bytearray)):
        return bytes(ref)
    text = ref.strip()
    if text.startswith("data:"):
        _, _, text = text.partition(",")
    return base64.b64decode(text, validate=True)


def embed_image(ref: bytes | str | None, asset: str = "image") -> EmbedResult:
    if not ref:
        return AssetError(asset, "no image data")
    try:
        data = _decode_ref(ref)
    except (binascii.Error, ValueError) as e:
        logger.warning("Could not decode %s: %s", asset, e)
        return AssetError(asset, f"not valid base64 image data ({e})")

    try:
        iw, ih = ImageReader(io.BytesIO(data)).getSize()
    except Exception as e:
        # ImageReader surfaces PIL/zlib/OS errors for corrupt data
        logger.warning("Could not read %s: %s", asset, e)
        return AssetError(asset, f"unreadable image ({e.__class__.__name__})")

    if not iw or not ih:
        return AssetError(asset, "image has no size")
    return EmbeddedImage(data=data, pixel_width=int(iw), pixel_height=int(ih))
