"""Exported image payload decoding and writing (internal)."""

import base64
import binascii
import logging
from pathlib import Path
from typing import Union
from urllib.parse import unquote_to_bytes

from lineageflow.errors import ImageExportError


logger = logging.getLogger(__name__)


def decode_data_uri(image_data: str) -> bytes:
    """Decode a data URI (or bare base64) into raw bytes.

    Accepts "data:<mime>;base64,<payload>", the percent-encoded
    "data:<mime>[;charset=...],<payload>" form renderers use for SVG, and a
    bare base64 string with no data: prefix.
    """
    if image_data.startswith("data:"):
        header, sep, payload = image_data.partition(",")
        if not sep:
            raise ImageExportError("Malformed data URI: missing ',' separator")
        is_base64 = header.endswith(";base64")
    else:
        payload = image_data
        is_base64 = True

    if not is_base64:
        return unquote_to_bytes(payload)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageExportError(f"Image payload is not valid base64: {e}") from e


def write_image(image_data: str, path: Union[str, Path]) -> Path:
    """Decode an image data URI and write it verbatim to path (no retry)."""
    image_path = Path(path)
    content = decode_data_uri(image_data)
    try:
        image_path.write_bytes(content)
    except OSError as e:
        raise ImageExportError(f"Could not write image {image_path}: {e}") from e
    logger.debug("Wrote %d bytes to %s", len(content), image_path)
    return image_path
