"""
Shared fixtures: a recording stand-in for the GPU backend.
"""

from dataclasses import dataclass, field
from typing import Any

import pytest
import regex as re

from gips.backend import ShaderBuildError
from gips.constants import U_POS2NDC, U_REL2MAP

UNIFORM_DECL = re.compile(r'\buniform\s+\w+\s+(\w+)')


@dataclass(eq=False)
class FakeProgram:
    source: str
    uniforms: dict[str, int]
    values: dict[str, Any] = field(default_factory=dict)
    released: int = 0


@dataclass(eq=False)
class FakeImage:
    width: int
    height: int
    label: str = ''


@dataclass(eq=False)
class FakeTarget:
    image: FakeImage
    released: int = 0


class FakeBackend:
    """Links nothing; every uniform declared in a source gets a location.

    ``fail_on`` makes :meth:`link` fail for sources containing that text,
    ``fail_at`` for the n-th link call (1-based).
    """

    def __init__(self) -> None:
        self.sources: list[str] = []
        self.programs: list[FakeProgram] = []
        self.targets: list[FakeTarget] = []
        self.draws: list[tuple[FakeProgram, Any, FakeTarget, bool]] = []
        self.released: list[Any] = []
        self.fail_on: str | None = None
        self.fail_at: int | None = None
        self.log = "0(3) : error C0000: syntax error, unexpected '}'"

    def link(self, fragment_source: str) -> FakeProgram:
        self.sources.append(fragment_source)
        if self.fail_on is not None and self.fail_on in fragment_source:
            raise ShaderBuildError(self.log)
        if self.fail_at is not None and len(self.sources) == self.fail_at:
            raise ShaderBuildError(self.log)

        # vertex stage uniforms are always active
        names = [U_POS2NDC, U_REL2MAP, *UNIFORM_DECL.findall(fragment_source)]
        uniforms = {name: loc for loc, name in enumerate(dict.fromkeys(names))}
        prog = FakeProgram(fragment_source, uniforms)
        self.programs.append(prog)
        return prog

    def uniform_location(self, program: FakeProgram, name: str) -> int:
        return program.uniforms.get(name, -1)

    def set_uniform(self, program: FakeProgram, name: str, value: Any) -> None:
        if name not in program.uniforms: raise ValueError(f"'{name}' is not a uniform")
        program.values[name] = value

    def create_target(self, width: int, height: int) -> FakeTarget:
        target = FakeTarget(FakeImage(width, height, f'target{len(self.targets)}'))
        self.targets.append(target)
        return target

    def target_image(self, target: FakeTarget) -> FakeImage:
        return target.image

    def draw(self, program: FakeProgram, source: Any, target: FakeTarget, linear: bool = True) -> None:
        assert program.released == 0, "drawing with a released program"
        self.draws.append((program, source, target, linear))

    def release(self, obj: Any) -> None:
        obj.released += 1
        self.released.append(obj)

    @property
    def live_programs(self) -> list[FakeProgram]:
        return [p for p in self.programs if not p.released]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def source_image() -> FakeImage:
    return FakeImage(64, 32, 'input')


@pytest.fixture
def shader_dir(tmp_path):
    """Directory with a few node sources on disk."""
    (tmp_path / 'brightness.glsl').write_text(
        'uniform float gain = 1.0;  // brightness @min=0 @max=4\n'
        'vec4 run(vec4 c) { return vec4(c.rgb * gain, c.a); }\n'
    )
    (tmp_path / 'shift.frag').write_text(
        'uniform vec2 offset;  // @min=-10 @max=10 @unit=px\n'
        'vec4 run(vec2 pos) { return pixel(pos + offset); }\n'
    )
    sub = tmp_path / 'more'
    sub.mkdir()
    (sub / 'tint.gips').write_text(
        'uniform vec3 tint = vec3(1.0, 0.5, 0.25);  // @color\n'
        'vec3 run(vec3 c) { return c * tint; }\n'
    )
    (tmp_path / 'notes.txt').write_text('not a shader')
    return tmp_path
