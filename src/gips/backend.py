# -------------------------------------------------------------
# @file          backend.py
# @author        Priyangkar Ghosh
# @created       2026-03-05
# @description   GPU seam used by the loader and the pipeline:
#                compile/link, uniform lookup, pass execution
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

from dataclasses import dataclass
from typing import Any, Protocol

import moderngl
from moderngl import Context, Framebuffer, Program, Texture, Uniform

from gips.constants import GLSL_VERSION, INVALID_LOCATION, U_POS2NDC, U_REL2MAP, U_TEXTURE

# shared vertex stage for every pass: a unit quad drawn as a 4 vertex strip
VERTEX_SOURCE = f'''#version {GLSL_VERSION}
uniform vec4 {U_POS2NDC};
uniform vec4 {U_REL2MAP};
out vec2 gips_pos;
void main() {{
    vec2 pos = vec2(float(gl_VertexID & 1), float((gl_VertexID & 2) >> 1));
    gips_pos = {U_REL2MAP}.xy + pos * {U_REL2MAP}.zw;
    gl_Position = vec4({U_POS2NDC}.xy + pos * {U_POS2NDC}.zw, 0.0, 1.0);
}}
'''


class ShaderBuildError(RuntimeError):
    """Compile or link failure; ``log`` holds the driver's message verbatim."""

    def __init__(self, log: str) -> None:
        super().__init__(log)
        self.log = log


class ShaderBackend(Protocol):
    def link(self, fragment_source: str) -> Any: ...
    def uniform_location(self, program: Any, name: str) -> int: ...
    def set_uniform(self, program: Any, name: str, value: Any) -> None: ...
    def create_target(self, width: int, height: int) -> Any: ...
    def target_image(self, target: Any) -> Any: ...
    def draw(self, program: Any, source: Any, target: Any, linear: bool = True) -> None: ...
    def release(self, obj: Any) -> None: ...


@dataclass(slots=True)
class RenderTarget:
    texture: Texture
    fbo: Framebuffer

    @property
    def size(self) -> tuple[int, int]:
        return self.texture.size

    def release(self) -> None:
        self.fbo.release()
        self.texture.release()


class ModernGLBackend:
    def __init__(self, ctx: Context, vertex_source: str = VERTEX_SOURCE) -> None:
        self._ctx = ctx
        self._vertex_source = vertex_source
        self._vaos: dict[int, moderngl.VertexArray] = {}

    @property
    def ctx(self) -> Context: return self._ctx

    @property
    def vertex_source(self) -> str: return self._vertex_source

    def link(self, fragment_source: str) -> Program:
        try:
            return self._ctx.program(
                vertex_shader=self._vertex_source,
                fragment_shader=fragment_source,
            )
        except moderngl.Error as e:
            logger.error("Failed to link pass program: %s", e)
            raise ShaderBuildError(str(e)) from e

    def uniform_location(self, program: Program, name: str) -> int:
        # inactive or missing uniforms have no location
        member = program.get(name, None)
        if not isinstance(member, Uniform): return INVALID_LOCATION
        return member.location

    def set_uniform(self, program: Program, name: str, value: Any) -> None:
        member = program.get(name, None)
        if not isinstance(member, Uniform): raise ValueError(f"'{name}' is not a uniform")
        member.value = value

    def create_image(self, width: int, height: int, data: bytes | None = None) -> Texture:
        tex = self._ctx.texture((width, height), 4, data)
        tex.repeat_x = tex.repeat_y = False
        return tex

    def create_target(self, width: int, height: int) -> RenderTarget:
        tex = self.create_image(width, height)
        return RenderTarget(tex, self._ctx.framebuffer(color_attachments=[tex]))

    def target_image(self, target: RenderTarget) -> Texture:
        return target.texture

    def read(self, image: Texture) -> bytes:
        return image.read()

    def draw(self, program: Program, source: Texture, target: RenderTarget, linear: bool = True) -> None:
        if (vao := self._vaos.get(program.glo)) is None:
            self._vaos[program.glo] = vao = self._ctx.vertex_array(program, [])

        mode = moderngl.LINEAR if linear else moderngl.NEAREST
        source.filter = (mode, mode)
        source.use(location=0)
        if (tex := program.get(U_TEXTURE, None)) is not None: tex.value = 0

        target.fbo.use()
        self._ctx.viewport = (0, 0, *target.size)
        vao.render(moderngl.TRIANGLE_STRIP, vertices=4)

    def release(self, obj: Any) -> None:
        if isinstance(obj, Program) and (vao := self._vaos.pop(obj.glo, None)) is not None:
            vao.release()
        obj.release()
