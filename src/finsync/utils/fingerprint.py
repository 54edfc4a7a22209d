"""Content hashing used for transaction ids and duplicate fingerprints.

The hash is djb2 in its xor variant (``hash * 33 ^ c``, seed 5381) evaluated
with 32-bit signed integer wrap-around over UTF-16 code units, then rendered
as the base-36 string of its absolute value. It is not collision resistant;
callers that need that should swap ``content_hash`` for a cryptographic
digest.
"""

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
DJB2_SEED = 5381


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def _utf16_units(text: str):
    for char in text:
        code_point = ord(char)
        if code_point > 0xFFFF:
            code_point -= 0x10000
            yield 0xD800 + (code_point >> 10)
            yield 0xDC00 + (code_point & 0x3FF)
        else:
            yield code_point


def djb2_hash(text: str) -> int:
    """Return the signed 32-bit djb2 (xor) hash of ``text``."""
    value = DJB2_SEED
    for unit in _utf16_units(text):
        value = _to_int32(value * 33) ^ unit
    return value


def to_base36(value: int) -> str:
    """Render a non-negative integer in base 36."""
    if value < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def content_hash(text: str) -> str:
    """Hash ``text`` into a short base-36 token.

    The input is used as-is; normalizing it is the caller's job.
    """
    return to_base36(abs(djb2_hash(text)))
