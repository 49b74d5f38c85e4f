"""Pack a service, a category and a subcode into one 32-bit error code.

Layout, most significant first::

    31        20 19    12 11         0
    [ service  ][category][ subcode   ]
       12 bits    8 bits    12 bits

The text form is three uppercase hex groups joined by dots, zero padded to
the width of each field: ``SSS.CC.SSS``.
"""

import string
from dataclasses import dataclass
from typing import NamedTuple

from .errors import FieldOutOfRange, MalformedErrorCode

CODE_MASK = 0xFFFFFFFF
SEPARATOR = "."

_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    width: int
    shift: int

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1

    @property
    def max_value(self) -> int:
        return self.mask

    @property
    def hex_digits(self) -> int:
        return (self.width + 3) // 4

    def fits(self, value: int) -> bool:
        return 0 <= value <= self.max_value

    def extract(self, code: int) -> int:
        return (code >> self.shift) & self.mask


SERVICE = FieldSpec("service", width=12, shift=20)
CATEGORY = FieldSpec("category", width=8, shift=12)
SUBCODE = FieldSpec("subcode", width=12, shift=0)

FIELDS = (SERVICE, CATEGORY, SUBCODE)


class CodeFields(NamedTuple):
    service: int
    category: int
    subcode: int

    def pack(self) -> int:
        return encode(self.service, self.category, self.subcode)

    def __str__(self) -> str:
        return format_code(self.pack())


def encode(service: int, category: int, subcode: int) -> int:
    """Pack three fields into an error code.

    Each value is masked to its field width before shifting, so an
    out-of-range value keeps only its low bits and never spills into a
    neighbouring field. Use :func:`validate_fields` first to reject such
    values instead.
    """

    return (
        ((service & SERVICE.mask) << SERVICE.shift)
        | ((category & CATEGORY.mask) << CATEGORY.shift)
        | (subcode & SUBCODE.mask)
    )


def encode_unchecked(service: int, category: int, subcode: int) -> int:
    """Pack three fields without masking them first.

    Only the result is truncated to 32 bits. Callers must guarantee the
    field widths: an oversized value loses its high bits past bit 31 or
    overwrites the low bits of the field above it.
    """

    return ((service << SERVICE.shift) | (category << CATEGORY.shift) | subcode) & CODE_MASK


def validate_fields(service: int, category: int, subcode: int) -> None:
    for spec, value in zip(FIELDS, (service, category, subcode)):
        if not spec.fits(value):
            raise FieldOutOfRange(spec.name, value, spec.max_value)


def decode(code: int) -> CodeFields:
    return CodeFields(SERVICE.extract(code), CATEGORY.extract(code), SUBCODE.extract(code))


def format_code(code: int) -> str:
    service, category, subcode = decode(code)
    return f"{service:03X}.{category:02X}.{subcode:03X}"


def _parse_segment(text: str, segment: str, spec: FieldSpec) -> int:
    if not segment:
        raise MalformedErrorCode(text, f"empty {spec.name} segment")
    # int(x, 16) also takes signs, 0x prefixes, underscores and whitespace.
    if not _HEX_DIGITS.issuperset(segment):
        raise MalformedErrorCode(text, f"{spec.name} segment {segment!r} is not hexadecimal")
    if len(segment) > spec.hex_digits:
        raise MalformedErrorCode(
            text, f"{spec.name} segment {segment!r} has more than {spec.hex_digits} digits"
        )
    return int(segment, 16)


def parse_code(text: str) -> int:
    """Parse the ``SSS.CC.SSS`` text form back into an error code.

    Hex digits are accepted in either case and short segments are zero
    extended. Raises :class:`MalformedErrorCode` for anything else.
    """

    segments = text.split(SEPARATOR)
    if len(segments) != len(FIELDS):
        raise MalformedErrorCode(
            text, f"expected {len(FIELDS)} dot-separated segments, got {len(segments)}"
        )
    service, category, subcode = (
        _parse_segment(text, segment, spec) for segment, spec in zip(segments, FIELDS)
    )
    return encode(service, category, subcode)
