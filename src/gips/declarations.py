# -------------------------------------------------------------
# @file          declarations.py
# @author        Priyangkar Ghosh
# @created       2026-03-03
# @description   Finds uniform declarations and pass functions
#                in a node source using a 4 token lookback
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from bitarray import bitarray

from gips.annotations import AnnotationParser
from gips.constants import DIAG_PREFIX, MAX_PASSES
from gips.parameter import Parameter
from gips.shader_pass import CoordMode, InputKind, OutputKind, PassConfig, TexFilter
from gips.tokenizer import Token, Tokenizer, parse_number

WINDOW_SIZE = 4


class GLSLToken(str, Enum):
    OTHER     = 'other'
    IGNORED   = 'ignored'
    UNIFORM   = 'uniform'
    FLOAT     = 'float'
    VEC2      = 'vec2'
    VEC3      = 'vec3'
    VEC4      = 'vec4'
    RUN       = 'run'
    RUN_PASS1 = 'run_pass1'
    RUN_PASS2 = 'run_pass2'
    RUN_PASS3 = 'run_pass3'
    RUN_PASS4 = 'run_pass4'
    OPEN      = 'open'
    CLOSE     = 'close'

    @classmethod
    def classify(cls, text: str) -> 'GLSLToken':
        return _TOKEN_MAP.get(text, cls.OTHER)

_TOKEN_MAP: dict[str, GLSLToken] = {
    'in':        GLSLToken.IGNORED,
    'uniform':   GLSLToken.UNIFORM,
    'float':     GLSLToken.FLOAT,
    'vec2':      GLSLToken.VEC2,
    'vec3':      GLSLToken.VEC3,
    'vec4':      GLSLToken.VEC4,
    'run':       GLSLToken.RUN,
    'run_pass1': GLSLToken.RUN_PASS1,
    'run_pass2': GLSLToken.RUN_PASS2,
    'run_pass3': GLSLToken.RUN_PASS3,
    'run_pass4': GLSLToken.RUN_PASS4,
    '(':         GLSLToken.OPEN,
    ')':         GLSLToken.CLOSE,
    '){':        GLSLToken.CLOSE,
}

UNIFORM_WIDTHS: dict[GLSLToken, int] = {
    GLSLToken.FLOAT: 1,
    GLSLToken.VEC2:  2,
    GLSLToken.VEC3:  3,
    GLSLToken.VEC4:  4,
}

PASS_INDICES: dict[GLSLToken, int] = {
    GLSLToken.RUN:       0,
    GLSLToken.RUN_PASS1: 0,
    GLSLToken.RUN_PASS2: 1,
    GLSLToken.RUN_PASS3: 2,
    GLSLToken.RUN_PASS4: 3,
}

PASS_INPUTS: dict[GLSLToken, InputKind] = {
    GLSLToken.VEC2: InputKind.COORD,
    GLSLToken.VEC3: InputKind.RGB,
    GLSLToken.VEC4: InputKind.RGBA,
}

PASS_OUTPUTS: dict[GLSLToken, OutputKind] = {
    GLSLToken.VEC3: OutputKind.RGB,
    GLSLToken.VEC4: OutputKind.RGBA,
}


@dataclass
class ScanResult:
    params: list[Parameter] = field(
        default_factory=list
    )
    passes: list[PassConfig | None] = field(
        default_factory=lambda: [None] * MAX_PASSES
    )
    mask: bitarray = field(
        default_factory=lambda: bitarray('0' * MAX_PASSES)
    )
    single_pass: bool = False
    diagnostics: list[str] = field(
        default_factory=list
    )


class DeclarationRecognizer:
    """Single scan over a node source.

    Keeps the last four classified tokens (most recent first) and matches
    two fixed shapes against them:

    * ``uniform <float|vecN> <name>`` opens a parameter
    * ``<vec3|vec4> <run|run_passN> ( <vecN>`` declares a pass
    """

    def __init__(self) -> None:
        self._window: deque[GLSLToken] = deque([GLSLToken.OTHER] * WINDOW_SIZE, maxlen=WINDOW_SIZE)
        self._annotations = AnnotationParser()
        self._result = ScanResult(diagnostics=self._annotations.diagnostics)

        # parameter statement state
        self._param: Parameter | None = None
        self._in_statement = False
        self._value_index = -1
        self._negate = False

    def _error(self, msg: str) -> None:
        self._result.diagnostics.append(f"{DIAG_PREFIX} {msg}")

    def scan(self, src: str) -> ScanResult:
        tok = Tokenizer(src)
        for token in tok:
            if token.is_comment():
                self._comment(tok.comment())
                continue

            # 'in' qualifiers would break up the signature pattern
            if (tt := GLSLToken.classify(token.text)) is GLSLToken.IGNORED:
                continue
            self._window.appendleft(tt)

            if self._window[2] is GLSLToken.UNIFORM:
                self._uniform(token)
                continue
            if self._statement(token):
                continue
            if self._window[0] is not GLSLToken.OTHER:
                self._signature()

        # finalize parameters
        for p in self._result.params: p.finalize()
        logger.debug(
            "Scanned %d parameters and passes %s",
            len(self._result.params), self._result.mask.to01()
        )
        return self._result

    def _comment(self, body: str) -> None:
        # a comment describes the parameter declared right before it
        # -> after that the parameter is no longer open
        self._annotations.parse(body, self._param)
        self._param = None

    def _uniform(self, token: Token) -> None:
        # pattern: [2]="uniform", [1]="float"|"vec2"|"vec3"|"vec4", [0]=name
        if (width := UNIFORM_WIDTHS.get(self._window[1])) is None:
            self._error(f"uniform variable '{token.text}' has unsupported data type")
            self._param = None
            self._in_statement = False
            return

        self._param = Parameter.declare(token.text, width)
        self._result.params.append(self._param)
        self._value_index = -1
        self._negate = False
        self._in_statement = True
        logger.debug("Found parameter '%s' (width %d)", token.text, width)

    def _statement(self, token: Token) -> bool:
        # returns True when the token was consumed by the open uniform statement
        param = self._param if self._in_statement else None

        # begin of the default value assignment
        if param is not None and self._value_index < 0 and token.contains('='):
            self._value_index = 0
            return True

        # collect up to 4 numbers of the default value
        if param is not None and 0 <= self._value_index < 4:
            if token.text == '-':
                self._negate = not self._negate
            elif (num := parse_number(token.text)) is not None:
                param.value[self._value_index] = -num if self._negate else num
                self._value_index += 1
                self._negate = False
            else:
                self._negate = False

        # end of the uniform statement
        if token.contains(';'):
            self._in_statement = False
            return True
        return False

    def _signature(self) -> None:
        # pattern: [3]="vec3"|"vec4", [2]="run[_passN]", [1]="(", [0]="vec2"|"vec3"|"vec4"
        w = self._window
        if (output := PASS_OUTPUTS.get(w[3])) is None: return
        if (index := PASS_INDICES.get(w[2])) is None: return
        if w[1] is not GLSLToken.OPEN: return
        if (kind := PASS_INPUTS.get(w[0])) is None: return

        match w[2]:
            case GLSLToken.RUN: self._result.single_pass = True
            case GLSLToken.RUN_PASS1: self._result.single_pass = False
        if index >= MAX_PASSES: return

        # pending settings are applied as they are at this point of the scan
        pending = self._annotations.pending
        coord = CoordMode(pending.coord) if kind is InputKind.COORD else CoordMode.NONE
        self._result.mask[index] = True
        self._result.passes[index] = PassConfig(
            index=index,
            input=kind,
            output=output,
            coord=coord,
            filter=TexFilter.from_flag(pending.filter),
        )
        logger.debug("Found pass %d: %s -> %s", index + 1, kind.value, output.value)
