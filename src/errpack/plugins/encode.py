import logging

from ..core.codec import FIELDS, decode, encode, format_code, validate_fields
from ..core.dispatch import command
from ..core.errors import StatusCode
from ..core.results import ResultObject

log = logging.getLogger(__name__)


@command("encode")
def encode_code(
    results: ResultObject, *, service: int, category: int, subcode: int, truncate: bool = False
) -> None:
    """Pack a service, category and subcode into an error code.

    Args:
        service: Service id, 0-4095.
        category: Generic error category, 0-255.
        subcode: Service specific sub-code, 0-4095.
        truncate: Keep only the low bits of out-of-range values instead of
            failing.
    """

    values = (service, category, subcode)
    if not truncate:
        validate_fields(*values)
    for spec, value in zip(FIELDS, values):
        if not spec.fits(value):
            results.warn(
                f"{spec.name}={value} truncated to {value & spec.mask}",
                details={"field": spec.name, "value": value, "maximum": spec.max_value},
            )

    code = encode(service, category, subcode)
    log.debug("encoded %s/%s/%s as %#010x", service, category, subcode, code)
    results.add_event(
        "encode",
        message=format_code(code),
        code=StatusCode.OK,
        details={"code": code, **decode(code)._asdict()},
    )
