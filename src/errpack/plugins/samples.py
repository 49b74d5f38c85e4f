import itertools
import logging
from typing import Iterator

from ..core.codec import CATEGORY, SERVICE, SUBCODE, CodeFields, encode, format_code
from ..core.dispatch import command
from ..core.errors import StatusCode
from ..core.results import ResultObject

log = logging.getLogger(__name__)


def sample_grid(service_step: int, subcode_step: int, category_step: int) -> Iterator[CodeFields]:
    """Walk the field ranges: service outermost, then subcode, then category."""

    for service in range(0, SERVICE.max_value + 1, service_step):
        for subcode in range(0, SUBCODE.max_value + 1, subcode_step):
            for category in range(0, CATEGORY.max_value + 1, category_step):
                yield CodeFields(service, category, subcode)


@command(positional=False)
def samples(
    results: ResultObject,
    *,
    service_step: int = 7,
    subcode_step: int = 89,
    category_step: int = 30,
    limit: int = 0,
) -> None:
    """Print sample error codes across the field ranges.

    Args:
        limit: Stop after this many codes (0 means the whole grid).
    """

    if min(service_step, subcode_step, category_step) < 1 or limit < 0:
        results.fail(
            "steps must be positive and limit non-negative",
            code=StatusCode.E_INPUT_OUT_OF_RANGE,
            details={
                "service_step": service_step,
                "subcode_step": subcode_step,
                "category_step": category_step,
                "limit": limit,
            },
        )
        return

    grid = sample_grid(service_step, subcode_step, category_step)
    if limit:
        grid = itertools.islice(grid, limit)
    count = 0
    for fields in grid:
        code = encode(*fields)
        results.add_event("sample", message=format_code(code), details={"code": code})
        count += 1
    log.debug("emitted %d sample codes", count)
