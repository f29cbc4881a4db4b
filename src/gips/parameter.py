# -------------------------------------------------------------
# @file          parameter.py
# @author        Priyangkar Ghosh
# @created       2026-03-02
# @description   User-tunable uniform discovered in a node source
# @license       MIT
# -------------------------------------------------------------

import math
from dataclasses import dataclass, field
from enum import Enum

from gips.constants import INVALID_LOCATION, MAX_PASSES, PARAM_DEFAULTS


class ParameterType(str, Enum):
    SCALAR = 'scalar'
    VEC2   = 'vec2'
    VEC3   = 'vec3'
    VEC4   = 'vec4'
    TOGGLE = 'toggle'
    RGB    = 'rgb'
    RGBA   = 'rgba'

    @property
    def width(self) -> int:
        return _TYPE_WIDTHS[self]

    @classmethod
    def from_width(cls, width: int) -> 'ParameterType':
        try: return _WIDTH_TYPES[width]
        except KeyError as exc:
            raise ValueError(f"No parameter type for data width {width}") from exc

_TYPE_WIDTHS: dict[ParameterType, int] = {
    ParameterType.SCALAR: 1,
    ParameterType.VEC2:   2,
    ParameterType.VEC3:   3,
    ParameterType.VEC4:   4,
    ParameterType.TOGGLE: 1,
    ParameterType.RGB:    3,
    ParameterType.RGBA:   4,
}

# provisional type for a freshly declared uniform
_WIDTH_TYPES: dict[int, ParameterType] = {
    1: ParameterType.SCALAR,
    2: ParameterType.VEC2,
    3: ParameterType.VEC3,
    4: ParameterType.VEC4,
}


def auto_format(min_value: float, max_value: float, unit: str = '') -> str:
    # enough decimals to show ~3 significant digits at the largest bound
    abs_max = max(abs(min_value), abs(max_value))
    digits = max(0, 2 - math.floor(math.log10(max(abs_max, 1e-6))))
    fmt = f'%.{digits}f'
    return f'{fmt} {unit}' if unit else fmt


@dataclass(slots=True)
class Parameter:
    name: str
    width: int
    type: ParameterType = ParameterType.SCALAR
    value: list[float] = field(
        default_factory=lambda: [0.0] * 4
    )
    min_value: float = PARAM_DEFAULTS['min']
    max_value: float = PARAM_DEFAULTS['max']
    unit: str = ''
    format: str = ''
    description: str = ''
    locations: list[int] = field(
        default_factory=lambda: [INVALID_LOCATION] * MAX_PASSES
    )

    @classmethod
    def declare(cls, name: str, width: int) -> 'Parameter':
        return cls(name=name, width=width, type=ParameterType.from_width(width))

    def finalize(self) -> None:
        self.format = auto_format(self.min_value, self.max_value, self.unit)

    def retype(self, ptype: ParameterType) -> bool:
        # only accept a type that matches the declared data width
        if ptype.width != self.width: return False
        self.type = ptype
        return True

    @property
    def label(self) -> str:
        return self.description or self.name

    @property
    def is_on(self) -> bool:
        v = self.value[0]
        return abs(v - self.max_value) < abs(v - self.min_value)

    def uniform_value(self) -> float | tuple[float, ...]:
        if self.width == 1: return self.value[0]
        return tuple(self.value[:self.width])

    def set_value(self, values: float | bool | list[float] | tuple[float, ...]) -> bool:
        """Clamp ``values`` according to the parameter type and store them.

        Returns ``True`` when the stored value changed.
        """
        if isinstance(values, (int, float)): values = [values]
        raw = list(values)[:self.width]
        if not raw: raise ValueError(f"No value given for parameter '{self.name}'")
        values = [float(v) for v in raw]
        lo, hi = sorted((self.min_value, self.max_value))

        match self.type:
            case ParameterType.TOGGLE:
                if isinstance(raw[0], bool): on = raw[0]
                else: on = abs(values[0] - self.max_value) < abs(values[0] - self.min_value)
                new = [self.max_value if on else self.min_value]
            case ParameterType.RGB | ParameterType.RGBA:
                new = [min(max(v, 0.0), 1.0) for v in values]
            case ParameterType.SCALAR | ParameterType.VEC2 | ParameterType.VEC3 | ParameterType.VEC4:
                new = [min(max(v, lo), hi) for v in values]

        old = self.value[:len(new)]
        self.value[:len(new)] = new
        return old != new

    def toggle(self) -> bool:
        if self.type is not ParameterType.TOGGLE:
            raise TypeError(f"Parameter '{self.name}' is not a toggle")
        return self.set_value(not self.is_on)

    def location(self, pass_index: int) -> int:
        return self.locations[pass_index]
