from enum import Enum
from typing import Any


class TokenType(Enum):
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    MINUS = "-"
    PLUS = "+"
    SEMICOLON = ";"
    SLASH = "/"
    STAR = "*"
    QUESTION = "?"
    COLON = ":"

    BANG = "!"
    BANG_EQUAL = "!="
    EQUAL = "="
    EQUAL_EQUAL = "=="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="
    MINUS_EQUAL = "-="
    PLUS_EQUAL = "+="
    SLASH_EQUAL = "/="
    STAR_EQUAL = "*="

    IDENTIFIER = "<identifier>"
    STRING = "<string>"
    NUMBER = "<number>"

    AND = "and"
    BREAK = "break"
    CLASS = "class"
    CONTINUE = "continue"
    ELSE = "else"
    FALSE = "false"
    FUN = "fun"
    FOR = "for"
    IF = "if"
    NIL = "nil"
    OR = "or"
    PRINT = "print"
    RETURN = "return"
    SUPER = "super"
    THIS = "this"
    TRUE = "true"
    VAR = "var"
    WHILE = "while"

    EOF = "<eof>"


KEYWORDS: dict[str, TokenType] = {
    tt.value: tt
    for tt in TokenType
    if isinstance(tt.value, str) and tt.value.isalpha()
}

_TT = TokenType
class TokenGroup:
    Comparison = {_TT.GREATER, _TT.GREATER_EQUAL, _TT.LESS, _TT.LESS_EQUAL}
    Equality = {_TT.EQUAL_EQUAL, _TT.BANG_EQUAL}
    Factor = {_TT.STAR, _TT.SLASH}
    Term = {_TT.PLUS, _TT.MINUS}
    # Compound assignment operator -> the binary operator it expands to
    CompoundAssign = {
        _TT.PLUS_EQUAL: _TT.PLUS,
        _TT.MINUS_EQUAL: _TT.MINUS,
        _TT.STAR_EQUAL: _TT.STAR,
        _TT.SLASH_EQUAL: _TT.SLASH,
    }
    Statement = {
        _TT.CLASS, _TT.FOR, _TT.FUN, _TT.IF,
        _TT.PRINT, _TT.RETURN, _TT.VAR, _TT.WHILE,
    }


class Token:
    __slots__ = ("type", "lexeme", "literal", "line")

    def __init__(
        self, type: TokenType, lexeme: str, line: int, literal: Any = None
    ) -> None:
        object.__setattr__(self, "type", type)
        object.__setattr__(self, "lexeme", lexeme)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(self, "line", line)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable, can't set '{name}'")

    def __str__(self) -> str:
        return f"{self.type} {self.lexeme} {self.literal}"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r}, line={self.line})"
