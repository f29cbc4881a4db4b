# -------------------------------------------------------------
# @file          shader_pass.py
# @author        Priyangkar Ghosh
# @created       2026-03-04
# @description   One compiled stage of a node plus the settings
#                it was recognized with
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from gips.constants import (
    IDENTITY_MAP, INVALID_LOCATION, POS2NDC,
    U_IMAGE_SIZE, U_MAP2TEX, U_POS2NDC, U_REL2MAP,
)
from gips.parameter import Parameter

if TYPE_CHECKING:
    from gips.backend import ShaderBackend


class InputKind(str, Enum):
    COORD = 'coord'
    RGB   = 'rgb'
    RGBA  = 'rgba'


class OutputKind(str, Enum):
    RGB  = 'rgb'
    RGBA = 'rgba'


class CoordMode(str, Enum):
    PIXEL    = 'pixel'
    RELATIVE = 'relative'
    NONE     = 'none'


class TexFilter(str, Enum):
    NEAREST = 'nearest'
    LINEAR  = 'linear'

    @classmethod
    def from_flag(cls, linear: bool) -> 'TexFilter':
        return cls.LINEAR if linear else cls.NEAREST


Vec4 = tuple[float, float, float, float]


def coordinate_transforms(mode: CoordMode, width: int, height: int) -> tuple[Vec4, Vec4]:
    """Return the ``(rel2map, map2tex)`` transforms for a pass.

    ``rel2map`` maps the unit square onto the coordinate space handed to the
    user function; ``map2tex`` maps that space back onto texture coordinates
    for the ``pixel()`` helper.
    """
    w, h = float(max(width, 1)), float(max(height, 1))
    match mode:
        case CoordMode.PIXEL:
            return (0.0, 0.0, w, h), (0.0, 0.0, 1.0 / w, 1.0 / h)
        case CoordMode.RELATIVE:
            # shorter side spans [-1, 1], centered on the image
            ax, ay = max(w / h, 1.0), max(h / w, 1.0)
            return (-ax, -ay, 2.0 * ax, 2.0 * ay), (0.5, 0.5, 0.5 / ax, 0.5 / ay)
        case CoordMode.NONE:
            return IDENTITY_MAP, IDENTITY_MAP


@dataclass
class PassConfig:
    index: int
    input: InputKind
    output: OutputKind
    coord: CoordMode
    filter: TexFilter


class Pass:
    __slots__ = (
        '_config', '_program', '_released',
        'loc_image_size', 'loc_rel2map', 'loc_map2tex',
    )

    def __init__(self, config: PassConfig, program: Any) -> None:
        self._config = config
        self._program = program
        self._released = False
        self.loc_image_size = INVALID_LOCATION
        self.loc_rel2map = INVALID_LOCATION
        self.loc_map2tex = INVALID_LOCATION

    @property
    def config(self) -> PassConfig: return self._config

    @property
    def index(self) -> int: return self._config.index

    @property
    def input(self) -> InputKind: return self._config.input

    @property
    def output(self) -> OutputKind: return self._config.output

    @property
    def coord(self) -> CoordMode: return self._config.coord

    @property
    def filter(self) -> TexFilter: return self._config.filter

    @property
    def program(self) -> Any: return self._program

    @property
    def released(self) -> bool: return self._released

    def bind(self, backend: 'ShaderBackend', params: list[Parameter]) -> None:
        # resolve uniform locations once right after linking
        prog = self._program
        if (backend.uniform_location(prog, U_POS2NDC)) != INVALID_LOCATION:
            backend.set_uniform(prog, U_POS2NDC, POS2NDC)
        self.loc_image_size = backend.uniform_location(prog, U_IMAGE_SIZE)
        self.loc_rel2map = backend.uniform_location(prog, U_REL2MAP)
        self.loc_map2tex = (
            backend.uniform_location(prog, U_MAP2TEX)
            if self.input is InputKind.COORD else INVALID_LOCATION
        )
        for p in params:
            p.locations[self.index] = backend.uniform_location(prog, p.name)
        logger.debug(
            "Pass %d bound %d of %d parameters",
            self.index + 1,
            sum(p.location(self.index) != INVALID_LOCATION for p in params),
            len(params),
        )

    def run(
        self,
        backend: 'ShaderBackend',
        params: list[Parameter],
        source: Any,
        target: Any,
        width: int,
        height: int,
    ) -> None:
        if self._released: raise RuntimeError(f"Pass {self.index + 1} was already released")
        prog = self._program
        rel2map, map2tex = coordinate_transforms(self.coord, width, height)
        if self.loc_image_size != INVALID_LOCATION:
            backend.set_uniform(prog, U_IMAGE_SIZE, (float(width), float(height)))
        if self.loc_rel2map != INVALID_LOCATION:
            backend.set_uniform(prog, U_REL2MAP, rel2map)
        if self.loc_map2tex != INVALID_LOCATION:
            backend.set_uniform(prog, U_MAP2TEX, map2tex)
        for p in params:
            if p.location(self.index) != INVALID_LOCATION:
                backend.set_uniform(prog, p.name, p.uniform_value())
        backend.draw(prog, source, target, linear=self.filter is TexFilter.LINEAR)

    def release(self, backend: 'ShaderBackend') -> None:
        # programs are owned exclusively by their pass; free exactly once
        if self._released: return
        backend.release(self._program)
        self._released = True
