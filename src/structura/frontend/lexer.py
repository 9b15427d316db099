"""
Lexer

Ordered-match tokenizer: at every cursor position the rules in TOKEN_RULES
are tried in declaration order and the first one that matches exactly at
the cursor wins. Rule order is part of the language (keywords are tried
before identifiers), so it must not be rearranged.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Tuple

from ..shared.builtins import RESERVED_BUILTINS
from ..shared.errors import LexError
from ..shared.source_location import SourceLocation
from ..shared.types import PRIMITIVE_NAMES
from ..utils.config import DEFAULT_SOURCE_FILE

logger = logging.getLogger("structura.frontend.lexer")


class TokenKind(Enum):
    KEYWORD = "KEYWORD"
    IDENTIFIER = "IDENTIFIER"
    TYPE = "TYPE"
    NUMBER_LITERAL = "NUMBER_LITERAL"
    STRING_LITERAL = "STRING_LITERAL"
    SYMBOL = "SYMBOL"
    OPERATOR = "OPERATOR"
    RETURN_TYPE = "RETURN_TYPE"  # synthesized from ') : type'
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int = 1

    def is_symbol(self, text: str) -> bool:
        return self.kind is TokenKind.SYMBOL and self.text == text

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.text!r}, line={self.line})"


# Names of statements plus every runtime-library helper; all lex as KEYWORD.
KEYWORDS = tuple(sorted(RESERVED_BUILTINS)) + (
    "len", "reverse", "sqrt", "sum", "push", "pop",
    "toUpperCase", "toLowerCase", "substring", "replace", "includes",
    "clamp", "startsWith", "endsWith", "unique", "range",
    "return", "for", "while", "if", "else", "let",
)

_PRIMITIVE = r"(?:%s)\b" % "|".join(PRIMITIVE_NAMES)
_TYPE_MEMBER = _PRIMITIVE + r"(?:\[\])?"
TYPE_LITERAL_PATTERN = re.compile(_TYPE_MEMBER + r"(?:\|" + _TYPE_MEMBER + r")*")

# (kind, pattern) in match order; kind None marks comments and whitespace.
TOKEN_RULES: Tuple[Tuple[Optional[TokenKind], Pattern[str]], ...] = (
    (None, re.compile(r"//[^\n]*")),
    (None, re.compile(r"/\*[\s\S]*?\*/")),
    (TokenKind.KEYWORD, re.compile(r"(?:%s)\b" % "|".join(KEYWORDS))),
    (TokenKind.TYPE, TYPE_LITERAL_PATTERN),
    (TokenKind.IDENTIFIER, re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")),
    (TokenKind.NUMBER_LITERAL, re.compile(r"-?\d+(?:\.\d+)?")),
    (TokenKind.STRING_LITERAL, re.compile(r"\"[^\"]*\"|'[^']*'")),
    (TokenKind.SYMBOL, re.compile(r"[()\[\]{}:,;.]|=(?!=)")),
    (TokenKind.OPERATOR, re.compile(r"&&|\|\||==|!=|<=|>=")),
    (TokenKind.OPERATOR, re.compile(r"[+\-*/<>!|]")),
    (None, re.compile(r"\s+")),
)


class Lexer:
    """
    Converts source text into a token list ending with an EOF token.
    """

    def __init__(self, source_file: str = DEFAULT_SOURCE_FILE):
        self.source_file = source_file

    def tokenize(self, source: str) -> List[Token]:
        tokens: List[Token] = []
        position = 0
        line = 1
        line_start = 0
        while position < len(source):
            for kind, pattern in TOKEN_RULES:
                match = pattern.match(source, position)
                if match is None or match.end() == position:
                    continue
                text = match.group()
                if kind is not None:
                    tokens.append(Token(kind, text, line, position - line_start + 1))
                newlines = text.count("\n")
                if newlines:
                    line += newlines
                    line_start = position + text.rfind("\n") + 1
                position = match.end()
                break
            else:
                raise LexError(
                    position,
                    source[position],
                    SourceLocation(self.source_file, line, position - line_start + 1),
                )

        tokens = self._merge_return_types(tokens)
        tokens.append(Token(TokenKind.EOF, "", line, position - line_start + 1))
        logger.debug(f"Tokenized {self.source_file}: {len(tokens)} tokens")
        return tokens

    @staticmethod
    def _merge_return_types(tokens: List[Token]) -> List[Token]:
        """
        Fold `)` `:` TYPE|IDENTIFIER into `)` RETURN_TYPE so the parser never
        needs colon lookahead for return types.
        """
        merged: List[Token] = []
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if (
                token.is_symbol(":")
                and i > 0 and tokens[i - 1].is_symbol(")")
                and i + 1 < len(tokens)
                and tokens[i + 1].kind in (TokenKind.TYPE, TokenKind.IDENTIFIER)
            ):
                type_token = tokens[i + 1]
                merged.append(Token(TokenKind.RETURN_TYPE, type_token.text, type_token.line, type_token.column))
                i += 2
                continue
            merged.append(token)
            i += 1
        return merged


def tokenize(source: str, source_file: str = DEFAULT_SOURCE_FILE) -> List[Token]:
    """Tokenize `source`; raises LexError at the first unmatched character."""
    return Lexer(source_file).tokenize(source)
