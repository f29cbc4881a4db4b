# -------------------------------------------------------------
# @file          tokenizer.py
# @author        Priyangkar Ghosh
# @created       2026-03-02
# @description   Lazy lexer for node sources. Only knows enough
#                to feed the declaration recognizer; bodies are
#                never parsed.
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

from dataclasses import dataclass
import regex as re

# order matters: comment markers and multi-char punctuation must win over
# their single-char prefixes
TOKEN_PATTERN = re.compile(r'''
      (?P<comment>//|/\*)
    | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?[fF]?)
    | (?P<ident>[A-Za-z_]\w*)
    | (?P<punct>\)\{|==|!=|<=|>=|\+=|-=|\*=|/=|&&|\|\||\+\+|--|[^\s\w])
''', re.VERBOSE)

NUMBER_PATTERN = re.compile(r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')

COMMENT_TERMINATORS: dict[str, str] = {
    '//': '\n',
    '/*': '*/',
}


def parse_number(text: str) -> float | None:
    # numeric literal -> float, anything else -> None
    if text[-1:] in ('f', 'F') and len(text) > 1: text = text[:-1]
    if not NUMBER_PATTERN.fullmatch(text): return None
    return float(text)


@dataclass(slots=True)
class Token:
    kind: str
    text: str
    start: int

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    def contains(self, c: str) -> bool:
        return c in self.text

    def is_comment(self) -> bool:
        return self.kind == 'comment'


class Tokenizer:
    """Lazy token stream over one source string.

    Iterating yields :class:`Token` objects. When the current token is a
    comment start, :meth:`extend_until` grows it to cover the whole comment
    so the caller can pull it out in one piece with :meth:`extract`.
    """

    def __init__(self, src: str) -> None:
        self._src = src
        self._pos = 0
        self._current: Token | None = None

    def __iter__(self) -> 'Tokenizer':
        return self

    def __next__(self) -> Token:
        if (m := TOKEN_PATTERN.search(self._src, self._pos)) is None:
            self._current = None
            raise StopIteration
        self._pos = m.end()
        self._current = Token(m.lastgroup, m.group(), m.start())
        return self._current

    @property
    def source(self) -> str:
        return self._src

    @property
    def current(self) -> Token | None:
        return self._current

    @property
    def token(self) -> str:
        return self._current.text if self._current else ''

    @property
    def start(self) -> int:
        return self._current.start if self._current else self._pos

    @property
    def length(self) -> int:
        return self._current.length if self._current else 0

    def contains(self, c: str) -> bool:
        return self._current is not None and self._current.contains(c)

    def is_token(self, text: str) -> bool:
        return self._current is not None and self._current.text == text

    def extend_until(self, terminator: str) -> Token:
        # grow the current token through the terminator (or to the end of the source)
        if self._current is None:
            raise ValueError("No current token to extend")
        idx = self._src.find(terminator, self._current.end)
        end = len(self._src) if idx < 0 else idx + len(terminator)
        self._current.text = self._src[self._current.start:end]
        self._pos = end
        return self._current

    def extract(self) -> str:
        return self.token

    def comment(self) -> str:
        # capture the comment starting at the current token and return its body
        # -> both the opening and the closing marker are stripped
        if self._current is None or not self._current.is_comment():
            raise ValueError(f"'{self.token}' is not a comment start")
        marker = self._current.text
        text = self.extend_until(COMMENT_TERMINATORS[marker]).text
        body = text[len(marker):]
        if marker == '/*' and body.endswith('*/'): body = body[:-2]
        elif body.endswith('\n'): body = body[:-1]
        return body
