"""
TypeScript Token Definitions.

Defines the token kinds produced by the lexer, the `Token` record, and the
keyword tables the printer and type eraser consult.
"""

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
  """Enumeration of Lexer Token Types."""

  WHITESPACE = "WHITESPACE"
  NEWLINE = "NEWLINE"
  LINE_COMMENT = "LINE_COMMENT"
  BLOCK_COMMENT = "BLOCK_COMMENT"
  STRING = "STRING"
  TEMPLATE = "TEMPLATE"
  REGEX = "REGEX"
  NUMBER = "NUMBER"
  IDENTIFIER = "IDENTIFIER"
  PUNCT = "PUNCT"


TRIVIA = frozenset({TokenKind.WHITESPACE, TokenKind.NEWLINE, TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT})

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {v: k for k, v in OPENERS.items()}

# Keywords after which an expression (not an operator) is expected.
# Used to decide regex-vs-division and whether an identifier ends an expression.
EXPRESSION_KEYWORDS = frozenset(
  {
    "return",
    "typeof",
    "instanceof",
    "in",
    "of",
    "new",
    "delete",
    "void",
    "throw",
    "case",
    "do",
    "else",
    "yield",
    "await",
    "extends",
  }
)

# Modifiers TypeScript allows on class members and parameter properties.
MEMBER_MODIFIERS = frozenset({"public", "private", "protected", "readonly", "override", "declare", "abstract"})


@dataclass(frozen=True)
class Token:
  kind: TokenKind
  text: str
  line: int
  col: int

  @property
  def is_trivia(self) -> bool:
    return self.kind in TRIVIA

  def is_punct(self, *texts: str) -> bool:
    return self.kind == TokenKind.PUNCT and self.text in texts

  def is_word(self, *texts: str) -> bool:
    return self.kind == TokenKind.IDENTIFIER and self.text in texts
