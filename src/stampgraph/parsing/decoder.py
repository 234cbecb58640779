"""
Content decoder for stamp payloads.

Payloads are base64. Some are gzip-compressed (``H4sI`` in base64 form);
those are decompressed transparently. Failures never raise: a bracketed
diagnostic string is returned instead so the rest of the analysis can carry on.
"""

import base64
import binascii
import gzip
import logging
import zlib

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


def is_gzip(data: bytes) -> bool:
    return data[:2] == GZIP_MAGIC


def decode_content(payload: str) -> str:
    """
    Decode a base64 payload into text.

    Args:
        payload: Base64 text, possibly wrapping gzip-compressed bytes.

    Returns:
        The decoded text, or ``[Error decompressing data: ...]`` on failure.
    """
    try:
        raw = base64.b64decode(payload.strip())
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Payload is not valid base64 ({len(payload)} chars): {e}")
        return f"[Error decompressing data: {e}]"

    if is_gzip(raw):
        try:
            text = gzip.decompress(raw).decode("utf-8", errors="replace")
        except (OSError, EOFError, zlib.error) as e:
            logger.warning(f"Failed to decompress gzipped payload: {e}")
            return f"[Error decompressing data: {e}]"
        logger.debug(f"Decompressed gzipped payload: {len(payload)} -> {len(text)} chars")
        return text

    text = raw.decode("utf-8", errors="replace")
    logger.debug(f"Decoded plain base64 payload: {len(text)} chars")
    return text
