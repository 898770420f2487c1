"""
Canonical Printer.

Produces a stable, whitespace-normalized rendering of a TypeScript/JavaScript
snippet in the house style used for comparison and for the JavaScript pane:

- no statement-terminating semicolons (`a(); b()` is split onto two lines; a
  semicolon protecting a line that starts with `(`, `[` or a template becomes a
  leading `;` on that line),
- single-quoted strings unless that would need more escapes,
- two-space indentation derived from bracket nesting,
- single spaces between tokens, no trailing whitespace, no blank lines.

Comments, template literals and regular expressions are emitted verbatim.
Printing is idempotent: `print_canonical(print_canonical(x)) == print_canonical(x)`.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from codetoggle.typescript.lexer import LexError, tokenize
from codetoggle.typescript.tokens import CLOSERS, OPENERS, Token, TokenKind

INDENT = "  "

# A line starting with one of these continues the previous expression.
_CONTINUATION_STARTERS = frozenset({".", "?.", "?", ":", "|", "&", "&&", "||", "??"})

# Statement starters that would be glued to the previous line without a terminator.
_ASI_HAZARDS = frozenset({TokenKind.TEMPLATE, TokenKind.REGEX})

_DROP = "drop"
_SPLIT = "split"
_GUARD = "guard"


def requote(literal: str) -> str:
  """
  Re-quotes a string literal, preferring single quotes.

  Double quotes win only when the content holds more single quotes than double
  quotes. Escapes of the unused quote character are dropped; occurrences of the
  chosen quote character are escaped.

  Args:
      literal (str): A complete string literal including its quotes.

  Returns:
      str: The re-quoted literal.
  """
  body = literal[1:-1]
  singles = doubles = 0
  i = 0
  while i < len(body):
    c = body[i]
    if c == "\\" and i + 1 < len(body):
      if body[i + 1] == "'":
        singles += 1
      elif body[i + 1] == '"':
        doubles += 1
      i += 2
      continue
    if c == "'":
      singles += 1
    elif c == '"':
      doubles += 1
    i += 1

  quote = '"' if singles > doubles else "'"
  other = "'" if quote == '"' else '"'

  out = []
  i = 0
  while i < len(body):
    c = body[i]
    if c == "\\" and i + 1 < len(body):
      nxt = body[i + 1]
      out.append(nxt if nxt == other else c + nxt)
      i += 2
      continue
    out.append("\\" + c if c == quote else c)
    i += 1
  return f"{quote}{''.join(out)}{quote}"


def check_balance(tokens: List[Token]) -> None:
  """
  Verifies that `()`, `[]` and `{}` nest correctly.

  Args:
      tokens (List[Token]): Token stream from the lexer.

  Raises:
      LexError: On an unexpected closer or an unclosed opener.
  """
  stack: List[Token] = []
  for tok in tokens:
    if tok.kind != TokenKind.PUNCT:
      continue
    if tok.text in OPENERS:
      stack.append(tok)
    elif tok.text in CLOSERS:
      if not stack or OPENERS[stack[-1].text] != tok.text:
        raise LexError(f"Unexpected '{tok.text}'", tok.line, tok.col)
      stack.pop()
  if stack:
    opener = stack[-1]
    raise LexError(f"Unclosed '{opener.text}'", opener.line, opener.col)


@dataclass
class _Line:
  tokens: List[Token] = field(default_factory=list)
  guard: bool = False  # Prefix with ';'


class CanonicalPrinter:
  """
  Renders a token stream in canonical style.
  """

  def __init__(self, tokens: List[Token]) -> None:
    self.tokens = tokens

  def print(self) -> str:
    """
    Returns:
        str: The canonical text (no trailing newline).
    """
    lines = self._split_lines()
    return "\n".join(self._render(lines))

  def _split_lines(self) -> List[_Line]:
    """
    Breaks the stream into physical lines, resolving semicolons on the way.
    """
    actions = self._terminators()
    lines: List[_Line] = [_Line()]
    guard_next = False

    for idx, tok in enumerate(self.tokens):
      if tok.kind == TokenKind.NEWLINE:
        lines.append(_Line())
        continue

      action = actions.get(idx)
      if action == _SPLIT:
        lines.append(_Line())
        continue
      if action == _GUARD:
        guard_next = True
        continue
      if action == _DROP:
        continue

      if guard_next and not tok.is_trivia:
        lines[-1].guard = True
        guard_next = False
      lines[-1].tokens.append(tok)

    return lines

  def _terminators(self) -> Dict[int, str]:
    """
    Decides what happens to every statement-terminating `;`.

    Semicolons directly inside parentheses (`for (;;)`), separators inside a
    brace group opened on the same line (`{ a: T; b: U }`), and leading guards
    (`;(fn)()`) written by a previous pass are kept verbatim.

    Returns:
        Dict[int, str]: Token index -> one of `_DROP`, `_SPLIT`, `_GUARD`.
    """
    tokens = self.tokens
    result: Dict[int, str] = {}
    stack: List[Tuple[str, int]] = []
    line_no = 0
    line_has_code = False

    for idx, tok in enumerate(tokens):
      if tok.kind == TokenKind.NEWLINE:
        line_no += 1
        line_has_code = False
        continue
      if tok.is_trivia:
        continue
      if tok.kind == TokenKind.PUNCT:
        if tok.text in OPENERS:
          stack.append((tok.text, line_no))
        elif tok.text in CLOSERS and stack:
          stack.pop()
        elif tok.text == ";" and (not stack or stack[-1][0] != "("):
          result.update(self._classify_semicolon(idx, stack, line_no, line_has_code))
      line_has_code = True
    return result

  def _classify_semicolon(self, idx: int, stack: List[Tuple[str, int]], line_no: int, line_has_code: bool) -> Dict[int, str]:
    tokens = self.tokens
    nxt = self._next_significant(idx)
    if nxt is None:
      return {idx: _DROP}

    nxt_tok = tokens[nxt]
    same_line = not any(t.kind == TokenKind.NEWLINE for t in tokens[idx + 1 : nxt])

    if not same_line:
      return {idx: _GUARD if self._is_hazard(nxt_tok) else _DROP}

    if not line_has_code and self._is_hazard(nxt_tok):
      return {}
    if nxt_tok.is_punct("}", ";") or nxt_tok.kind in (TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT):
      return {idx: _DROP}
    if stack and stack[-1] == ("{", line_no):
      return {}
    return {idx: _SPLIT}

  @staticmethod
  def _is_hazard(tok: Token) -> bool:
    return tok.is_punct("(", "[") or tok.kind in _ASI_HAZARDS

  def _next_significant(self, idx: int) -> Optional[int]:
    for j in range(idx + 1, len(self.tokens)):
      tok = self.tokens[j]
      if tok.kind not in (TokenKind.WHITESPACE, TokenKind.NEWLINE):
        return j
    return None

  def _render(self, lines: List[_Line]) -> List[str]:
    out: List[str] = []
    # Each entry: (closer expected, indent level of the line that opened it)
    stack: List[List] = []

    for line in lines:
      body = [t for t in line.tokens]
      while body and body[0].kind == TokenKind.WHITESPACE:
        body.pop(0)
      while body and body[-1].kind == TokenKind.WHITESPACE:
        body.pop()
      if not body:
        continue

      first = body[0]
      if first.kind == TokenKind.PUNCT and first.text in CLOSERS and stack:
        level = stack[-1][1]
      elif stack:
        level = stack[-1][1] + 1
      else:
        level = 0
      if first.kind == TokenKind.PUNCT and first.text in _CONTINUATION_STARTERS:
        level += 1

      for tok in body:
        if tok.kind != TokenKind.PUNCT:
          continue
        if tok.text in OPENERS:
          stack.append([OPENERS[tok.text], level])
        elif tok.text in CLOSERS and stack:
          stack.pop()

      text = "".join(self._render_token(t) for t in body)
      out.append(f"{INDENT * level}{';' if line.guard else ''}{text}")

    return out

  @staticmethod
  def _render_token(tok: Token) -> str:
    if tok.kind == TokenKind.WHITESPACE:
      return " "
    if tok.kind == TokenKind.STRING:
      return requote(tok.text)
    return tok.text


def print_canonical(code: str) -> str:
  """
  Tokenizes, validates and prints `code` in canonical style.

  Args:
      code (str): TypeScript or JavaScript source.

  Returns:
      str: Canonical text.

  Raises:
      LexError: If the snippet cannot be tokenized or its brackets do not balance.
  """
  tokens = tokenize(code)
  check_balance(tokens)
  return CanonicalPrinter(tokens).print()
