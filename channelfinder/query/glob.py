"""
Glob to SQL LIKE pattern translation.

Search requests use file-glob wildcards (``*`` for any sequence, ``?`` for a
single character, ``\\`` to escape). The catalog is queried with SQL ``LIKE``,
which uses ``%`` and ``_`` instead and escapes with a backslash (every LIKE
built from these patterns passes ``escape=LIKE_ESCAPE``).

Translation is done by a single left-to-right scan that splits the input into
tagged tokens, then renders each token:

    ====================  ================  ===========
    glob                  kind              LIKE
    ====================  ================  ===========
    ``*``                 WILDCARD          ``%``
    ``?``                 WILDCARD          ``_``
    ``\\*``               ESCAPED_WILDCARD  ``*``
    ``\\?``               ESCAPED_WILDCARD  ``?``
    ``%`` or ``\\%``      LIKE_SPECIAL      ``\\%``
    ``_`` or ``\\_``      LIKE_SPECIAL      ``\\_``
    anything else         LITERAL           unchanged
    ====================  ================  ===========

Backslashes in front of a token are counted in pairs. Every pair is an
escaped backslash and is copied through unchanged, so ``\\\\*`` stays a
literal backslash followed by ``%``. A backslash escaping ``%`` or ``_`` is
absorbed: both are literals in a glob whether escaped or not. A single
backslash at the very end of a glob escapes nothing and becomes a literal
backslash, so no pattern ends with the escape character.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List

LIKE_ESCAPE = "\\"

GLOB_WILDCARDS = "*?"
LIKE_SPECIALS = "%_"

_WILDCARD_TO_LIKE = {"*": "%", "?": "_"}


class TokenKind(Enum):
    """Kind of a scanned glob token."""
    LITERAL = "literal"
    WILDCARD = "wildcard"
    ESCAPED_WILDCARD = "escaped_wildcard"
    LIKE_SPECIAL = "like_special"


@dataclass(frozen=True)
class GlobToken:
    """
    One token of a glob pattern.

    ``text`` is the significant character (or the literal run for LITERAL
    tokens); ``escaped_backslashes`` is the number of backslash pairs that
    preceded it.
    """
    kind: TokenKind
    text: str
    escaped_backslashes: int = 0

    def to_like(self) -> str:
        """Render this token as LIKE pattern text."""
        prefix = LIKE_ESCAPE * (2 * self.escaped_backslashes)
        if self.kind is TokenKind.WILDCARD:
            return prefix + _WILDCARD_TO_LIKE[self.text]
        if self.kind is TokenKind.ESCAPED_WILDCARD:
            return prefix + self.text
        if self.kind is TokenKind.LIKE_SPECIAL:
            return prefix + LIKE_ESCAPE + self.text
        return self.text


def scan_glob(glob: str) -> Iterator[GlobToken]:
    """
    Split a glob pattern into tagged tokens.

    Each position of the input is examined once. A run of backslashes is
    claimed by the token that directly follows it; runs that are not followed
    by a wildcard or LIKE special character are part of the literal text.
    """
    literal: List[str] = []
    i = 0
    n = len(glob)

    while i < n:
        j = i
        while j < n and glob[j] == "\\":
            j += 1

        if j < n and glob[j] in GLOB_WILDCARDS + LIKE_SPECIALS:
            if literal:
                yield GlobToken(TokenKind.LITERAL, "".join(literal))
                literal = []

            pairs, odd = divmod(j - i, 2)
            char = glob[j]
            if char in LIKE_SPECIALS:
                kind = TokenKind.LIKE_SPECIAL
            elif odd:
                kind = TokenKind.ESCAPED_WILDCARD
            else:
                kind = TokenKind.WILDCARD
            yield GlobToken(kind, char, pairs)
            i = j + 1
        elif j > i:
            # backslash run that escapes nothing we translate
            run = glob[i:j]
            if j == n and len(run) % 2:
                # a dangling escape at the end is a literal backslash
                run += LIKE_ESCAPE
            literal.append(run)
            i = j
        else:
            literal.append(glob[i])
            i += 1

    if literal:
        yield GlobToken(TokenKind.LITERAL, "".join(literal))


def glob_to_like(glob: str) -> str:
    """
    Translate a file-glob pattern into the equivalent SQL LIKE pattern.

    >>> glob_to_like("ab*")
    'ab%'
    >>> glob_to_like("50%")
    '50\\\\%'
    """
    return "".join(token.to_like() for token in scan_glob(glob))


def has_wildcards(value: str) -> bool:
    """Whether a criterion value contains glob wildcard characters."""
    return any(c in value for c in GLOB_WILDCARDS)
