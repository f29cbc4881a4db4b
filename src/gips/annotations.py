# -------------------------------------------------------------
# @file          annotations.py
# @author        Priyangkar Ghosh
# @created       2026-03-03
# @description   Parses @key[=value] directives out of comments
#                and applies them to the open parameter or to
#                the pending pass settings
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

from dataclasses import dataclass, field
import regex as re

from gips.constants import ALIAS, COORD_ALIAS, DIAG_PREFIX, FILTER_ALIAS, PASS_DEFAULTS
from gips.parameter import Parameter, ParameterType
from gips.tokenizer import parse_number

# i.e. @min=0, @toggle, @unit=px, @on=-1
DIRECTIVE_PATTERN = re.compile(r'''
    @
    (?P<key>\w*)                    # key, may be empty
    (?:=(?P<value>                  # optional =value
        [-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?(?!\w)   # number
        |[-+]?[\w.]*                                      # identifier
    ))?
''', re.VERBOSE)


@dataclass(slots=True)
class Directive:
    key: str
    value: str | None

    @property
    def number(self) -> float | None:
        return parse_number(self.value) if self.value else None


@dataclass
class PassSettings:
    coord: str = PASS_DEFAULTS['coord']
    filter: bool = PASS_DEFAULTS['filter']


@dataclass
class AnnotationParser:
    """Applies comment directives against the current parsing context.

    ``pending`` holds the coordinate-mapping and filter modes that the next
    recognized pass signature picks up; they persist until overwritten.
    """
    pending: PassSettings = field(
        default_factory=PassSettings
    )
    diagnostics: list[str] = field(
        default_factory=list
    )

    def _error(self, msg: str) -> None:
        logger.debug("Annotation diagnostic: %s", msg)
        self.diagnostics.append(f"{DIAG_PREFIX} {msg}")

    def parse(self, comment: str, param: Parameter | None = None) -> str:
        # doxygen style '//!' and '/*!' comments are treated the same
        if comment.startswith('!'): comment = comment[1:]

        pos = 0
        while (m := DIRECTIVE_PATTERN.search(comment, pos)):
            start = m.start()
            # ignore '@' in the middle of a word (e.g. mail addresses)
            if start and comment[start - 1].isalnum():
                pos = start + 1
                continue

            value = m.group('value')
            directive = Directive(
                key=m.group('key').lower(),
                value=value.lower() if value is not None else None,
            )
            self.apply(directive, param)

            # cut the directive and the character after it out of the comment
            end = min(m.end() + 1, len(comment))
            comment = comment[:start] + comment[end:]
            pos = start

        text = comment.strip()
        if param is not None and text:
            param.description = text
        return text

    def apply(self, d: Directive, param: Parameter | None) -> None:
        match ALIAS.get(d.key, d.key):
            case 'min':
                if self._need_param(d, param) and self._need_number(d):
                    param.min_value = d.number
            case 'max':
                if self._need_param(d, param) and self._need_number(d):
                    param.max_value = d.number
            case 'unit':
                if self._need_param(d, param) and self._need_value(d):
                    param.unit = d.value
            case 'toggle':
                if self._need_param(d, param):
                    self._retype(d, param, ParameterType.TOGGLE)
            case 'color':
                if self._need_param(d, param):
                    if not (param.retype(ParameterType.RGB) or param.retype(ParameterType.RGBA)):
                        self._incompatible(d, param)
            case 'coord':
                if self._need_value(d):
                    if (mode := COORD_ALIAS.get(d.value)) is None:
                        self._error(f"unrecognized coordinate mapping mode '{d.value}'")
                    else: self.pending.coord = mode
            case 'filter':
                if self._need_value(d):
                    if (linear := FILTER_ALIAS.get(d.value)) is None:
                        self._error(f"unrecognized texture filtering mode '{d.value}'")
                    else: self.pending.filter = linear
            case _:
                self._error(f"unrecognized token '@{d.key}'")

    def _retype(self, d: Directive, param: Parameter, ptype: ParameterType) -> None:
        if not param.retype(ptype): self._incompatible(d, param)

    def _incompatible(self, d: Directive, param: Parameter) -> None:
        self._error(
            f"'@{d.key}' format is incompatible with uniform data type "
            f"of parameter '{param.name}'"
        )

    def _need_param(self, d: Directive, param: Parameter | None) -> bool:
        if param is None:
            self._error(f"'@{d.key}' token is only valid inside a parameter comment")
        return param is not None

    def _need_value(self, d: Directive) -> bool:
        if not d.value:
            self._error(f"'@{d.key}' token requires a value")
        return bool(d.value)

    def _need_number(self, d: Directive) -> bool:
        if d.number is None:
            self._error(f"'@{d.key}' token requires a numeric value")
        return d.number is not None
