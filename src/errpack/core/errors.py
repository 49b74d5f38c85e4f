from enum import IntEnum


class StatusCode(IntEnum):
    """Stable numeric status catalog for CLI result events."""

    OK = 0

    # 1xxx: input
    E_INPUT_INVALID = 1001
    E_INPUT_MALFORMED = 1002
    E_INPUT_OUT_OF_RANGE = 1003

    # 9xxx: bugs
    E_BUG_UNHANDLED = 9001


class CodecError(ValueError):
    """Base class for error code codec failures."""

    status = StatusCode.E_INPUT_INVALID


class MalformedErrorCode(CodecError):
    """Raised when a string is not a valid ``SSS.CC.SSS`` error code."""

    status = StatusCode.E_INPUT_MALFORMED

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"malformed error code {text!r}: {reason}")
        self.text = text
        self.reason = reason


class FieldOutOfRange(CodecError):
    """Raised when a field value does not fit its bit width."""

    status = StatusCode.E_INPUT_OUT_OF_RANGE

    def __init__(self, field: str, value: int, maximum: int) -> None:
        super().__init__(f"{field}={value} out of range [0, {maximum}]")
        self.field = field
        self.value = value
        self.maximum = maximum
