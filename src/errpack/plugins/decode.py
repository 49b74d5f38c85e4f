import logging

from ..core.click_factory import int_literal
from ..core.codec import CODE_MASK, SEPARATOR, decode, format_code, parse_code
from ..core.dispatch import command
from ..core.errors import FieldOutOfRange, MalformedErrorCode, StatusCode
from ..core.results import ResultObject

log = logging.getLogger(__name__)


def coerce_code(text: str) -> int:
    """Read an error code given as ``SSS.CC.SSS`` or as an integer literal."""

    if SEPARATOR in text:
        return parse_code(text)
    try:
        value = int_literal(text)
    except ValueError:
        raise MalformedErrorCode(text, "neither SSS.CC.SSS nor an integer literal") from None
    if not 0 <= value <= CODE_MASK:
        raise FieldOutOfRange("code", value, CODE_MASK)
    return value


@command("decode")
def decode_code(results: ResultObject, *, code: str) -> None:
    """Split an error code into service, category and subcode.

    Args:
        code: Dotted text form (``4D2.BD.CF9``) or integer (``1294720249``,
            ``0x4D2BDCF9``).
    """

    value = coerce_code(code)
    fields = decode(value)
    log.debug("decoded %r as %s", code, fields)
    results.add_event(
        "decode",
        message=format_code(value),
        code=StatusCode.OK,
        details={"code": value, **fields._asdict()},
    )
