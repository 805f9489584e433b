"""Parsing and emission of chained-call fragments."""

from .emitter import emit_fragment, emit_node
from .lexer import Token, TokenType, tokenize
from .parser import Parser, parse_expression, parse_fragment

__all__ = [
    "Parser",
    "Token",
    "TokenType",
    "emit_fragment",
    "emit_node",
    "parse_expression",
    "parse_fragment",
    "tokenize",
]
