"""
Tokenizer for chained-call fragments.

Produces a flat token list with source offsets. Anything outside the
restricted grammar that can be detected lexically (comments, heredocs,
increment operators, nullsafe access, unterminated strings) is rejected
here with a ChainSyntaxError.
"""

import re
from dataclasses import dataclass
from enum import Enum

from ..errors import ChainSyntaxError


class TokenType(Enum):
    """Kinds of tokens in a fragment."""

    STRING = "string"
    NUMBER = "number"
    VARIABLE = "variable"
    NAME = "name"
    OP = "operator"
    EOF = "end of fragment"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int

    def is_op(self, *texts: str) -> bool:
        return self.type == TokenType.OP and self.text in texts

    def is_name(self, *names: str) -> bool:
        return self.type == TokenType.NAME and self.text.lower() in names


# Lexically detectable constructs the grammar does not cover
UNSUPPORTED_PATTERNS = [
    (re.compile(r"//|#|/\*"), "comments are not supported inside fragments"),
    (re.compile(r"<<<"), "heredoc strings are not supported"),
    (re.compile(r"\?->"), "unsupported operator '?->'"),
    (re.compile(r"\+\+|--"), "increment and decrement operators are not supported"),
    (re.compile(r"\.\.\."), "argument unpacking is not supported"),
    (re.compile(r"`"), "shell execution strings are not supported"),
    (re.compile(r"@"), "error suppression is not supported"),
]

# Longest operators first so that '===' wins over '=='
OPERATORS = [
    "===", "!==", "??=", "<=>",
    "::", "->", "=>", "==", "!=", "<>", "<=", ">=", "&&", "||", "??",
    ".=", "+=", "-=", "*=", "/=",
    "(", ")", "[", "]", "{", "}", ",", ";", ":", "?", "!", ".",
    "+", "-", "*", "/", "%", "<", ">", "=", "&", "|",
]

TOKEN_PATTERNS = [
    (TokenType.STRING, r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\""),
    (TokenType.NUMBER, r"0[xX][0-9a-fA-F]+|\d[\d_]*(?:\.\d+)?(?:[eE][+-]?\d+)?"),
    (TokenType.VARIABLE, r"\$[A-Za-z_]\w*"),
    (TokenType.NAME, r"\\?[A-Za-z_]\w*(?:\\[A-Za-z_]\w*)*"),
    (TokenType.OP, "|".join(re.escape(op) for op in OPERATORS)),
]

_MASTER = re.compile(
    "|".join(f"(?P<{kind.name}>{pattern})" for kind, pattern in TOKEN_PATTERNS),
    re.DOTALL,
)
_WHITESPACE = re.compile(r"\s+")


def tokenize(source: str) -> list[Token]:
    """Split ``source`` into tokens, ending with a single EOF token.

    Raises:
        ChainSyntaxError: On any character sequence outside the grammar.
    """
    tokens: list[Token] = []
    position = 0
    length = len(source)

    while position < length:
        whitespace = _WHITESPACE.match(source, position)
        if whitespace:
            position = whitespace.end()
            continue

        for pattern, reason in UNSUPPORTED_PATTERNS:
            if pattern.match(source, position):
                raise ChainSyntaxError.at(source, position, reason)

        match = _MASTER.match(source, position)
        if match is None:
            char = source[position]
            if char in "'\"":
                raise ChainSyntaxError.at(source, position, "unterminated string literal")
            raise ChainSyntaxError.at(source, position, f"unexpected character {char!r}")

        kind = TokenType[match.lastgroup]
        tokens.append(Token(kind, match.group(), position))
        position = match.end()

    tokens.append(Token(TokenType.EOF, "", length))
    return tokens
