# -------------------------------------------------------------
# @file          codegen.py
# @author        Priyangkar Ghosh
# @created       2026-03-06
# @description   Builds one complete fragment stage per pass out
#                of the user source, compiles it and resolves
#                the uniform locations
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

import time
from dataclasses import dataclass, field

from jinja2 import DictLoader, Environment, StrictUndefined

from gips.backend import ShaderBackend, ShaderBuildError
from gips.constants import (
    DIAG_PREFIX, GLSL_VERSION, MAX_PASSES,
    U_IMAGE_SIZE, U_MAP2TEX, U_TEXTURE,
)
from gips.declarations import ScanResult
from gips.parameter import Parameter
from gips.shader_pass import InputKind, OutputKind, Pass, PassConfig

# #line directives keep driver messages pointing into the user source:
# -> 8000+ is the header, 1+ (source string = pass number) is user code,
#    9000+ is the generated main()
TEMPLATES: dict[str, str] = {
    'fragment': '''\
#version {{ version }}
#line 8000 0
in vec2 gips_pos;
out vec4 gips_frag;
uniform sampler2D {{ u_texture }};
uniform vec2 {{ u_image_size }};
{% if coord_input %}
uniform vec4 {{ u_map2tex }};
vec4 pixel(in vec2 pos) {
  return texture({{ u_texture }}, {{ u_map2tex }}.xy + pos * {{ u_map2tex }}.zw);
}
{% endif %}
#line 1 {{ pass_number }}
{{ code }}
#line 9000 0
void main() {
{% if not coord_input %}
  vec4 color = texture({{ u_texture }}, gips_pos);
{% endif %}
  gips_frag = {{ result }};
}
''',
}

CALL_ARGS: dict[InputKind, str] = {
    InputKind.COORD: 'gips_pos',
    InputKind.RGB:   'color.rgb',
    InputKind.RGBA:  'color',
}


@dataclass
class GenerationResult:
    passes: list[Pass | None] = field(
        default_factory=lambda: [None] * MAX_PASSES
    )
    sources: list[str | None] = field(
        default_factory=lambda: [None] * MAX_PASSES
    )
    count: int = 0
    fatal: bool = False
    params: list[Parameter] = field(
        default_factory=list
    )
    diagnostics: list[str] = field(
        default_factory=list
    )

    def release(self, backend: ShaderBackend) -> None:
        for p in self.passes:
            if p is not None: p.release(backend)
        self.passes = [None] * MAX_PASSES
        self.count = 0


class CodeGenerator:
    def __init__(self, version: str = GLSL_VERSION) -> None:
        self._version = version
        self._env = Environment(
            loader=DictLoader(TEMPLATES),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    @staticmethod
    def entry_call(config: PassConfig, single_pass: bool) -> str:
        # bare 'run' only for the single pass form, 'run_passN' otherwise
        name = 'run' if single_pass and config.index == 0 else f'run_pass{config.index + 1}'
        call = f'{name}({CALL_ARGS[config.input]})'
        if config.output is OutputKind.RGB:
            alpha = '1.0' if config.input is InputKind.COORD else 'color.a'
            call = f'vec4({call}, {alpha})'
        return call

    def render_source(self, code: str, config: PassConfig, single_pass: bool) -> str:
        return self._env.get_template('fragment').render(
            version=self._version,
            u_texture=U_TEXTURE,
            u_image_size=U_IMAGE_SIZE,
            u_map2tex=U_MAP2TEX,
            coord_input=config.input is InputKind.COORD,
            pass_number=config.index + 1,
            code=code,
            result=self.entry_call(config, single_pass),
        )

    def generate(self, name: str, code: str, scan: ScanResult, backend: ShaderBackend) -> GenerationResult:
        t0 = time.perf_counter()
        result = GenerationResult(params=scan.params, diagnostics=list(scan.diagnostics))

        # first pass defined?
        if not scan.mask[0]:
            result.diagnostics.append(f"{DIAG_PREFIX} no valid first-pass function ('run' or 'run_pass1') found")
            result.fatal = True
            return result

        # generate passes in order, stopping at the first gap
        remaining = scan.mask.copy()
        for index in range(MAX_PASSES):
            if not remaining[index]: break
            remaining[index] = False
            config = scan.passes[index]

            src = self.render_source(code, config, scan.single_pass)
            result.sources[index] = src
            logger.debug("-> Linking pass %d of %s", index + 1, name)
            try: program = backend.link(src)
            except ShaderBuildError as e:
                logger.error("Failed to build pass %d of '%s'", index + 1, name)
                result.diagnostics.append(e.log)
                result.fatal = True
                break

            result.passes[index] = p = Pass(config, program)
            p.bind(backend, scan.params)
            result.count += 1

        # all recognized passes processed?
        if not result.fatal and remaining.any():
            result.diagnostics.append(f"{DIAG_PREFIX} intermediate passes are missing, truncating pipeline")

        t1 = time.perf_counter()
        logger.info("Generated %d passes for '%s' in %.2f seconds", result.count, name, t1 - t0)
        return result
