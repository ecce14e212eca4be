"""Image decoding and encoding utilities."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from pixcache.errors.exceptions import DecodeError, EncodeError

STORAGE_FORMAT = "PNG"

# Raster formats accepted from the network. Plugins outside this list
# (EPS and other external-delegate formats among them) are never tried.
ACCEPTED_FORMATS = ("PNG", "JPEG", "GIF", "WEBP", "BMP", "TIFF")

# Modes the PNG writer stores as-is
_PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into a fully loaded PIL image.

    Raises DecodeError if the bytes are empty, not a recognised image, or in
    a format outside ACCEPTED_FORMATS.
    """
    if not data:
        raise DecodeError("Empty image data", size_bytes=0)
    try:
        img = Image.open(io.BytesIO(data), formats=ACCEPTED_FORMATS)
        # Force pixel decoding now so truncated files fail here, not later
        img.load()
    except (
        UnidentifiedImageError,
        OSError,
        ValueError,
        SyntaxError,  # PIL reports broken PNG chunks this way
        Image.DecompressionBombError,
    ) as e:
        raise DecodeError(
            f"Cannot decode image ({len(data)} bytes): {e}",
            size_bytes=len(data),
            original=e,
        ) from e
    return img


def to_png_mode(img: Image.Image) -> Image.Image:
    """Return ``img`` in a mode PNG can hold.

    CMYK, YCbCr, LAB and the other modes PNG lacks become RGB, or RGBA when
    the image carries transparency.
    """
    if img.mode in _PNG_MODES:
        return img
    return img.convert("RGBA" if img.has_transparency_data else "RGB")


def encode_png(img: Image.Image) -> bytes:
    """Encode an image to PNG bytes, converting its mode first if needed."""
    buf = io.BytesIO()
    try:
        to_png_mode(img).save(buf, format=STORAGE_FORMAT)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"Cannot encode {img.mode} image as PNG: {e}", original=e) from e
    return buf.getvalue()
