"""Byte and string conversion helpers shared by the repository and patch code.

Git stores paths and file contents as raw bytes. Decoding uses UTF-8 with
``surrogateescape`` so that undecodable bytes survive a decode/encode round
trip unchanged.
"""

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed, preserving undecodable bytes.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode(_ENCODING, _ERRORS)
    return value


def encode_text(value: str) -> bytes:
    """Encode a string produced by :func:`decode_bytes` back to its bytes."""
    return value.encode(_ENCODING, _ERRORS)


def decode_display(value: bytes) -> str:
    """Decode bytes for display, replacing undecodable sequences."""
    return value.decode(_ENCODING, errors="replace")
