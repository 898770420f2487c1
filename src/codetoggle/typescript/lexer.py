"""
TypeScript Lexer.

Splits a snippet into a lossless token stream: concatenating the `text` of every
token reproduces the input (after CRLF normalization). Whitespace, newlines and
comments are kept as trivia tokens so the printer and eraser can preserve the
author's layout.

Two TypeScript-specific choices:

* `>` is always emitted on its own, never as `>>` or `>=`. Nested generics such as
  `Ref<Array<number>>` then close one bracket per token, and adjacent `>` tokens
  still print back as `>>` because no whitespace separates them.
* `/` starts a regular expression only where an expression is expected, judged
  from the previous significant token.
"""

import re
from typing import List, Optional

from codetoggle.typescript.tokens import EXPRESSION_KEYWORDS, Token, TokenKind


class LexError(Exception):
  """
  Raised when the input cannot be tokenized (or is structurally unbalanced).

  Attributes:
      message (str): Description without the location suffix.
      line (int): 1-based line of the offending character.
      col (int): 0-based column of the offending character.
  """

  def __init__(self, message: str, line: int, col: int) -> None:
    self.message = message
    self.line = line
    self.col = col
    super().__init__(f"{message} at {line}:{col}")


PUNCTUATORS = [
  "...",
  "===",
  "!==",
  "**=",
  "<<=",
  "&&=",
  "||=",
  "??=",
  "=>",
  "==",
  "!=",
  "<=",
  "+=",
  "-=",
  "*=",
  "%=",
  "&=",
  "|=",
  "^=",
  "**",
  "++",
  "--",
  "<<",
  "&&",
  "||",
  "??",
  "?.",
]
SINGLE_PUNCT = "{}()[];,<>+-*/%&|^!~?:=.@"

_IDENT_RE = re.compile(r"#?[A-Za-z_$\u0080-\uffff][\w$\u0080-\uffff]*")
_NUMBER_RE = re.compile(
  r"(?:0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO][0-7_]+|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?)n?"
)
_WS_RE = re.compile(r"[ \t\f\v\u00a0\ufeff]+")
_FLAGS_RE = re.compile(r"[A-Za-z]*")


class Lexer:
  """
  Hand-written scanner producing `Token` objects.
  """

  def __init__(self, text: str) -> None:
    self.text = text.replace("\r\n", "\n").replace("\r", "\n")
    self.pos = 0
    self.line = 1
    self.line_start = 0
    self.tokens: List[Token] = []

  def tokenize(self) -> List[Token]:
    """
    Scans the whole input.

    Returns:
        List[Token]: Lossless token stream.

    Raises:
        LexError: On unterminated literals/comments or unexpected characters.
    """
    text = self.text
    n = len(text)

    while self.pos < n:
      start = self.pos
      ch = text[start]
      nxt = text[start + 1] if start + 1 < n else ""

      if ch == "\n":
        self._emit(TokenKind.NEWLINE, start + 1)
        continue

      ws = _WS_RE.match(text, start)
      if ws:
        self._emit(TokenKind.WHITESPACE, ws.end())
        continue

      if ch == "/" and nxt == "/":
        end = text.find("\n", start)
        self._emit(TokenKind.LINE_COMMENT, n if end < 0 else end)
        continue

      if ch == "/" and nxt == "*":
        end = text.find("*/", start + 2)
        if end < 0:
          self._fail("Unterminated block comment", start)
        self._emit(TokenKind.BLOCK_COMMENT, end + 2)
        continue

      if ch == "/" and self._regex_allowed():
        self._emit(TokenKind.REGEX, self._scan_regex(start))
        continue

      if ch in "'\"":
        self._emit(TokenKind.STRING, self._scan_string(start))
        continue

      if ch == "`":
        self._emit(TokenKind.TEMPLATE, self._scan_template(start))
        continue

      if ch.isdigit() or (ch == "." and nxt.isdigit()):
        num = _NUMBER_RE.match(text, start)
        self._emit(TokenKind.NUMBER, num.end())
        continue

      ident = _IDENT_RE.match(text, start)
      if ident:
        self._emit(TokenKind.IDENTIFIER, ident.end())
        continue

      punct = self._match_punct(start)
      if punct is None:
        self._fail(f"Unexpected character {ch!r}", start)
      self._emit(TokenKind.PUNCT, start + len(punct))

    return self.tokens

  def _match_punct(self, start: int) -> Optional[str]:
    text = self.text
    for candidate in PUNCTUATORS:
      if text.startswith(candidate, start):
        # `a?.5:b` is a conditional, not optional chaining
        if candidate == "?." and text[start + 2 : start + 3].isdigit():
          continue
        return candidate
    ch = text[start]
    return ch if ch in SINGLE_PUNCT else None

  def _regex_allowed(self) -> bool:
    prev = self._last_significant()
    if prev is None:
      return True
    if prev.kind == TokenKind.PUNCT:
      return prev.text not in (")", "]", "}")
    if prev.kind == TokenKind.IDENTIFIER:
      return prev.text in EXPRESSION_KEYWORDS
    return False

  def _last_significant(self) -> Optional[Token]:
    for tok in reversed(self.tokens):
      if not tok.is_trivia:
        return tok
    return None

  def _scan_string(self, start: int) -> int:
    text = self.text
    quote = text[start]
    i = start + 1
    while i < len(text):
      c = text[i]
      if c == "\\":
        i += 2
        continue
      if c == quote:
        return i + 1
      if c == "\n":
        break
      i += 1
    self._fail("Unterminated string literal", start)

  def _scan_template(self, start: int) -> int:
    text = self.text
    i = start + 1
    while i < len(text):
      c = text[i]
      if c == "\\":
        i += 2
        continue
      if c == "`":
        return i + 1
      if c == "$" and text.startswith("{", i + 1):
        i = self._scan_template_expr(i + 2, start)
        continue
      i += 1
    self._fail("Unterminated template literal", start)

  def _scan_template_expr(self, start: int, template_start: int) -> int:
    text = self.text
    depth = 0
    i = start
    while i < len(text):
      c = text[i]
      if c in "'\"":
        i = self._scan_string(i)
        continue
      if c == "`":
        i = self._scan_template(i)
        continue
      if c == "{":
        depth += 1
      elif c == "}":
        if depth == 0:
          return i + 1
        depth -= 1
      i += 1
    self._fail("Unterminated template literal", template_start)

  def _scan_regex(self, start: int) -> int:
    text = self.text
    in_class = False
    i = start + 1
    while i < len(text):
      c = text[i]
      if c == "\\":
        i += 2
        continue
      if c == "\n":
        break
      if c == "[":
        in_class = True
      elif c == "]":
        in_class = False
      elif c == "/" and not in_class:
        return _FLAGS_RE.match(text, i + 1).end()
      i += 1
    self._fail("Unterminated regular expression", start)

  def _emit(self, kind: TokenKind, end: int) -> None:
    start = self.pos
    value = self.text[start:end]
    self.tokens.append(Token(kind, value, self.line, start - self.line_start))
    newlines = value.count("\n")
    if newlines:
      self.line += newlines
      self.line_start = start + value.rindex("\n") + 1
    self.pos = end

  def _fail(self, message: str, offset: int) -> None:
    line = self.text.count("\n", 0, offset) + 1
    col = offset - (self.text.rfind("\n", 0, offset) + 1)
    raise LexError(message, line, col)


def tokenize(code: str) -> List[Token]:
  """
  Convenience wrapper around `Lexer`.

  Args:
      code (str): TypeScript or JavaScript source.

  Returns:
      List[Token]: Lossless token stream.
  """
  return Lexer(code).tokenize()
