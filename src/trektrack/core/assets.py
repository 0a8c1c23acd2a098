"""Asset normalization: displayable bytes, inline encoding and a display handle."""

import asyncio
import base64
from io import BytesIO
from pathlib import Path

from PIL import Image

from trektrack.core.handles import DisplayHandle
from trektrack.models import NormalizedAsset, RawFile

HEIC_SUFFIXES = (".heic", ".heif")
TRANSCODED_MIME_TYPE = "image/jpeg"
DEFAULT_QUALITY = 0.6


def is_heic_family(name: str) -> bool:
    return name.lower().endswith(HEIC_SUFFIXES)


def transcode_to_jpeg(path: Path, quality: float = DEFAULT_QUALITY) -> bytes:
    """Decode any Pillow-readable image and re-encode it as baseline JPEG.

    ``quality`` is a 0-1 factor; Pillow takes 1-100.
    """
    with Image.open(path) as img:
        rgb = img.convert("RGB")
    buf = BytesIO()
    rgb.save(buf, format="JPEG", quality=max(1, min(100, round(quality * 100))))
    return buf.getvalue()


def _suffix_for(mime_type: str, original: str) -> str:
    if mime_type == TRANSCODED_MIME_TYPE:
        return ".jpg"
    return Path(original).suffix.lower()


async def normalize(file: RawFile, handle_dir: Path, quality: float = DEFAULT_QUALITY) -> NormalizedAsset:
    """Turn a raw file into something every surface can render.

    HEIC/HEIF files are transcoded to JPEG; everything else passes through
    with its declared type. Raises if the file cannot be read or decoded.
    The returned display handle belongs to the caller.
    """
    if is_heic_family(file.name):
        data = await asyncio.to_thread(transcode_to_jpeg, file.path, quality)
        mime_type = TRANSCODED_MIME_TYPE
    else:
        data = await asyncio.to_thread(file.path.read_bytes)
        mime_type = file.mime_type

    inline_encoding = base64.b64encode(data).decode("ascii")
    handle = await asyncio.to_thread(
        DisplayHandle.create, handle_dir, data, mime_type, _suffix_for(mime_type, file.name),
    )
    return NormalizedAsset(
        display_handle=handle,
        inline_encoding=inline_encoding,
        mime_type=mime_type,
    )
