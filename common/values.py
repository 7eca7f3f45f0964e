"""Call argument values for services-userclient.

Arguments are flat: a Scalar, or a Record of named scalar fields.

Contains:
- Scalar: A single string/number/bool argument
- Record: Named scalar fields, one level deep
- to_argument: Wrap a plain Python value, rejecting nested structures
- to_wire: Convert an argument to the transport's value representation
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

from common.errors import ValidationError
from common.protocol import MAX_INT, MIN_INT

ScalarValue = Union[str, int, float, bool]

_SCALAR_TYPES = (str, int, float, bool)


def _check_range(value: object, what: str) -> None:
    if isinstance(value, int) and not isinstance(value, bool) and not MIN_INT <= value <= MAX_INT:
        raise ValidationError(f"{what} {value} is outside the XML-RPC integer range")


@dataclass(frozen=True)
class Scalar:
    """A single scalar argument."""

    value: ScalarValue

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not isinstance(self.value, _SCALAR_TYPES):
            raise ValidationError(
                f"Scalar value must be str, int, float or bool, got {type(self.value).__name__}"
            )
        _check_range(self.value, "Scalar value")


@dataclass(frozen=True)
class Record:
    """A named-field structure whose fields are scalars.

    Field order is preserved as given.
    """

    fields: Mapping[str, ScalarValue]

    def __post_init__(self) -> None:
        """Validate invariants."""
        checked: dict[str, ScalarValue] = {}
        for name, value in self.fields.items():
            if not isinstance(name, str) or not name:
                raise ValidationError(f"Record field names must be non-empty strings, got {name!r}")
            if isinstance(value, (Scalar, Record, Mapping, list, tuple)):
                raise ValidationError(
                    f"Record field {name!r} is not a scalar, nested structures are not supported"
                )
            if not isinstance(value, _SCALAR_TYPES):
                raise ValidationError(
                    f"Record field {name!r} must be str, int, float or bool, got {type(value).__name__}"
                )
            _check_range(value, f"Record field {name!r}")
            checked[name] = value
        object.__setattr__(self, "fields", MappingProxyType(checked))


CallArgument = Union[Scalar, Record]


def to_argument(value: object) -> CallArgument:
    """Wrap a plain Python value as a call argument.

    Raises ValidationError for nested or unsupported values.
    """
    if isinstance(value, (Scalar, Record)):
        return value
    if isinstance(value, Mapping):
        return Record(value)
    if isinstance(value, (list, tuple, set)):
        raise ValidationError("Sequence arguments are not supported")
    return Scalar(value)  # type: ignore[arg-type]


def to_wire(argument: CallArgument) -> ScalarValue | dict[str, ScalarValue]:
    """Convert an argument to the value handed to the transport."""
    match argument:
        case Scalar(value=value):
            return value
        case Record(fields=fields):
            return dict(fields)
        case _:
            raise ValidationError(f"Unsupported argument type: {type(argument).__name__}")
