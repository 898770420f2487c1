"""
TypeScript Type Eraser.

Downlevels TypeScript to JavaScript by deleting type-only syntax from the token
stream, the way `transpileModule` does for an ESNext target:

- `interface`, `type` aliases and `declare` statements (and their `export` forms),
- `import type` / `export type` and inline `type` specifiers,
- annotations on variables, parameters, return types and class fields,
  together with the optional `?` and definite `!` markers,
- type parameter lists and explicit type arguments,
- `as` / `satisfies` assertions and non-null `!`,
- accessibility, `readonly` and `override` modifiers, `implements` clauses,
  `this` parameters, overload signatures, abstract and `declare` members and
  index signatures.

Constructs that need code generation rather than deletion are lowered as well:
`enum` declarations become the usual `var E; (function (E) {...})(E || (E = {}))`
form, constructor parameter properties become assignments, and
`import x = require('y')` becomes a `const`.
Named imports whose bindings are no longer referenced after erasure are elided.

The eraser works on significant tokens only (trivia is skipped when reasoning
about structure but preserved in the output), so the author's layout survives
everywhere except where syntax was removed.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from codetoggle.typescript.lexer import tokenize
from codetoggle.typescript.printer import check_balance
from codetoggle.typescript.tokens import (
  CLOSERS,
  EXPRESSION_KEYWORDS,
  MEMBER_MODIFIERS,
  OPENERS,
  Token,
  TokenKind,
)


class EraseError(Exception):
  """Raised for TypeScript constructs that cannot be lowered to JavaScript."""


# Previous token that leaves an expression open across a line break.
_NON_TERMINAL_WORDS = EXPRESSION_KEYWORDS | {"as", "satisfies", "implements", "keyof", "is"}
# Tokens that continue the previous line's expression when they start a line.
_CONTINUATION_PUNCT = frozenset(
  {
    ".",
    "?.",
    "?",
    ":",
    "=",
    "=>",
    ",",
    "|",
    "&",
    "&&",
    "||",
    "??",
    "+",
    "-",
    "*",
    "/",
    "%",
    "**",
    "==",
    "===",
    "!=",
    "!==",
    "<",
    ">",
    "<=",
    "<<",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "&&=",
    "||=",
    "??=",
    "**=",
    "<<=",
    "^",
  }
)
_CONTINUATION_WORDS = frozenset({"as", "satisfies", "extends", "implements", "instanceof", "in", "of", "is"})
_TYPE_PREFIXES = frozenset({"keyof", "typeof", "readonly", "unique", "infer", "asserts"})
_PARAMETER_PROPERTY_MODIFIERS = frozenset({"public", "private", "protected", "readonly", "override"})
_CLASS_MEMBER_PREFIXES = frozenset({"static", "async", "get", "set", "accessor"})
_TEMPLATE_EXPR_RE = re.compile(r"\$\{([^}]*)\}")
_WORD_RE = re.compile(r"[A-Za-z_$][\w$]*")


@dataclass
class _Frame:
  """Bracket context on the eraser's stack."""

  kind: str  # block | class | object | params | expr
  open_p: int
  item_start: bool = True  # statement / member / parameter / property start
  binding: bool = False  # destructuring pattern in a declaration or parameter list
  optional: bool = False  # pattern may carry a `?` marker
  var_decl: bool = False  # inside a const/let/var declarator list
  signature_start: Optional[int] = None  # params of a declaration that may be an overload
  ctor_class_p: Optional[int] = None  # params of a constructor: sig pos of the class body `{`
  param_properties: List[str] = field(default_factory=list)


@dataclass
class _ImportSpec:
  imported: str
  local: str
  is_type: bool


@dataclass
class _ImportDecl:
  start: int
  end: int
  source: str
  type_only: bool = False
  default: Optional[str] = None
  namespace: Optional[str] = None
  named: List[_ImportSpec] = field(default_factory=list)
  attributes: str = ""


class TypeEraser:
  """
  Single-use converter: construct with TypeScript source, call `erase()`.
  """

  def __init__(self, code: str) -> None:
    self.tokens: List[Token] = tokenize(code)
    check_balance(self.tokens)

    self.sig: List[int] = [i for i, t in enumerate(self.tokens) if not t.is_trivia]
    self.n = len(self.sig)
    self.match: Dict[int, int] = self._match_brackets()

    self.erased: List[bool] = [False] * len(self.tokens)
    self.replacements: Dict[int, Tuple[int, str]] = {}
    self.inserts: Dict[int, List[str]] = {}
    self.imports: List[_ImportDecl] = []
    self.unwrap_candidates: List[int] = []

    self.stack: List[_Frame] = []
    self.pending_params = -1
    self.pending_signature: Optional[int] = None
    self.pending_ctor_class: Optional[int] = None
    self.pending_block = -1
    self.pending_class_body = -1
    self.pending_ctor_body: Tuple[int, List[str]] = (-1, [])
    self.stmt_p = -1

  # --- Public API ---

  def erase(self) -> str:
    """
    Returns:
        str: JavaScript source with layout preserved around removed syntax.

    Raises:
        EraseError: For unsupported constructs (namespaces, un-numberable enum members).
    """
    self._walk()
    self._unwrap_assertions()
    self._elide_imports()
    return self._render()

  # --- Token helpers ---

  def _t(self, p: int) -> Optional[Token]:
    if 0 <= p < self.n:
      return self.tokens[self.sig[p]]
    return None

  def _punct(self, p: int, *texts: str) -> bool:
    tok = self._t(p)
    return tok is not None and tok.is_punct(*texts)

  def _word(self, p: int, *words: str) -> bool:
    tok = self._t(p)
    return tok is not None and tok.is_word(*words)

  def _kind(self, p: int, *kinds: TokenKind) -> bool:
    tok = self._t(p)
    return tok is not None and tok.kind in kinds

  def _newline_between(self, a: int, b: int) -> bool:
    lo, hi = self.sig[a], self.sig[b]
    return any(self.tokens[i].kind == TokenKind.NEWLINE for i in range(lo + 1, hi))

  def _adjacent(self, a: int, b: int) -> bool:
    return self.sig[b] == self.sig[a] + 1

  def _is_erased(self, p: int) -> bool:
    return self.erased[self.sig[p]]

  def _prev_live(self, p: int) -> int:
    """Sig position of the closest preceding token that was not erased (-1 if none)."""
    q = p - 1
    while q >= 0 and self._is_erased(q):
      q -= 1
    return q

  def _erase(self, p_from: int, p_to: int, leading_ws: bool = False, trailing_ws: bool = False) -> None:
    if p_to < p_from:
      return
    a, b = self.sig[p_from], self.sig[p_to]
    if leading_ws and a > 0 and self.tokens[a - 1].kind == TokenKind.WHITESPACE:
      a -= 1
    if trailing_ws and b + 1 < len(self.tokens) and self.tokens[b + 1].kind == TokenKind.WHITESPACE:
      b += 1
    for i in range(a, b + 1):
      self.erased[i] = True

  def _insert_after(self, p: int, text: str) -> None:
    self.inserts.setdefault(self.sig[p], []).append(text)

  def _match_brackets(self) -> Dict[int, int]:
    result: Dict[int, int] = {}
    stack: List[int] = []
    for p in range(self.n):
      tok = self._t(p)
      if tok.kind != TokenKind.PUNCT:
        continue
      if tok.text in OPENERS:
        stack.append(p)
      elif tok.text in CLOSERS:
        result[stack.pop()] = p
    return result

  def _is_expression_end(self, p: int) -> bool:
    tok = self._t(p)
    if tok is None:
      return False
    if tok.kind == TokenKind.IDENTIFIER:
      return tok.text not in EXPRESSION_KEYWORDS
    if tok.kind in (TokenKind.NUMBER, TokenKind.STRING, TokenKind.TEMPLATE, TokenKind.REGEX):
      return True
    return tok.is_punct(")", "]", "}")

  def _continues(self, a: int, b: int) -> bool:
    """True if the line break between sig positions `a` and `b` does not end a statement."""
    prev, cur = self._t(a), self._t(b)
    if prev.kind == TokenKind.PUNCT and prev.text not in (")", "]", "}", "++", "--"):
      return True
    if prev.kind == TokenKind.IDENTIFIER and prev.text in _NON_TERMINAL_WORDS:
      return True
    if cur.kind == TokenKind.PUNCT and cur.text in _CONTINUATION_PUNCT:
      return True
    return cur.kind == TokenKind.IDENTIFIER and cur.text in _CONTINUATION_WORDS

  def _statement_end(self, p: int) -> int:
    """Sig position of the last token of the statement starting at `p`."""
    r = p
    while r < self.n:
      if r in self.match:
        r = self.match[r]
      if r + 1 >= self.n:
        return r
      if self._punct(r + 1, ";"):
        return r + 1
      if self._punct(r + 1, *CLOSERS):
        return r
      if self._newline_between(r, r + 1) and not self._continues(r, r + 1):
        return r
      r += 1
    return self.n - 1

  # --- Type skipping ---

  def _skip_type(self, p: int) -> Optional[int]:
    """
    Skips a type expression.

    Returns:
        Optional[int]: Sig position of the first token after the type, or None
        if no type starts at `p`.
    """
    if self._punct(p, "|", "&"):
      p += 1
    while True:
      p = self._skip_type_operand(p)
      if p is None:
        return None
      if self._punct(p, "|", "&"):
        p += 1
        continue
      if self._word(p, "extends"):
        q = self._skip_type(p + 1)
        if q is None or not self._punct(q, "?"):
          return None
        q = self._skip_type(q + 1)
        if q is None or not self._punct(q, ":"):
          return None
        return self._skip_type(q + 1)
      return p

  def _skip_type_operand(self, p: int) -> Optional[int]:
    while self._word(p, *_TYPE_PREFIXES) and self._kind(p + 1, TokenKind.IDENTIFIER, TokenKind.PUNCT):
      if self._punct(p + 1, "|", "&", ",", ")", "]", "}", ">", "=", ";", "?", ":"):
        break
      p += 1

    tok = self._t(p)
    if tok is None:
      return None

    if tok.is_punct("("):
      p = self.match[p] + 1
      if self._punct(p, "=>"):
        return self._skip_type(p + 1)
    elif tok.is_word("new") or (tok.is_word("abstract") and self._word(p + 1, "new")):
      p += 2 if tok.is_word("abstract") else 1
      if self._punct(p, "<"):
        p = self._skip_angles(p)
        if p is None:
          return None
      if not self._punct(p, "("):
        return None
      p = self.match[p] + 1
      if not self._punct(p, "=>"):
        return None
      return self._skip_type(p + 1)
    elif tok.is_punct("<"):
      p = self._skip_angles(p)
      if p is None or not self._punct(p, "("):
        return None
      p = self.match[p] + 1
      if not self._punct(p, "=>"):
        return None
      return self._skip_type(p + 1)
    elif tok.is_punct("{", "["):
      p = self.match[p] + 1
    elif tok.kind in (TokenKind.STRING, TokenKind.NUMBER, TokenKind.TEMPLATE):
      p += 1
    elif tok.is_punct("-") and self._kind(p + 1, TokenKind.NUMBER):
      p += 2
    elif tok.kind == TokenKind.IDENTIFIER:
      if tok.text == "import" and self._punct(p + 1, "("):
        p = self.match[p + 1] + 1
      else:
        p += 1
      while self._punct(p, ".") and self._kind(p + 1, TokenKind.IDENTIFIER):
        p += 2
      if self._punct(p, "<") and self._adjacent(p - 1, p):
        p = self._skip_angles(p)
        if p is None:
          return None
      if self._word(p, "is") and not self._newline_between(p - 1, p):
        return self._skip_type(p + 1)
    else:
      return None

    # Array types and indexed access
    while self._punct(p, "[") and not self._newline_between(p - 1, p):
      p = self.match[p] + 1
    return p

  def _skip_angles(self, p: int) -> Optional[int]:
    """Skips a balanced `<...>` group starting at `p`; None if it does not close."""
    depth = 0
    r = p
    while r < self.n:
      tok = self._t(r)
      if tok.is_punct("<"):
        depth += 1
      elif tok.is_punct(">"):
        depth -= 1
        if depth == 0:
          return r + 1
      elif tok.kind == TokenKind.PUNCT and tok.text in OPENERS:
        r = self.match[r]
      elif tok.is_punct(";") or (tok.kind == TokenKind.PUNCT and tok.text in CLOSERS):
        return None
      r += 1
    return None

  def _skip_type_args(self, p: int) -> Optional[int]:
    """Strictly parses `<T, U>`; used where `<` might be a comparison."""
    q = p + 1
    while True:
      q = self._skip_type(q)
      if q is None:
        return None
      if self._punct(q, ","):
        q += 1
        continue
      if self._punct(q, ">"):
        return q + 1
      return None

  def _erase_type_annotation(self, colon_p: int) -> int:
    end = self._skip_type(colon_p + 1)
    if end is None:
      tok = self._t(colon_p)
      raise EraseError(f"Malformed type annotation at {tok.line}:{tok.col}")
    self._erase(colon_p, end - 1)
    return end

  # --- Main walk ---

  def _walk(self) -> None:
    self.stack = [_Frame("block", -1)]
    p = 0
    while p < self.n:
      if self._is_erased(p):
        p += 1
        continue

      tok = self._t(p)
      frame = self.stack[-1]

      if tok.kind == TokenKind.PUNCT and tok.text in CLOSERS:
        closed = self.stack.pop()
        p = self._after_close(closed, p)
        continue

      self.stmt_p = -1
      if frame.kind in ("block", "class"):
        at_start = frame.item_start or (p > 0 and self._newline_between(p - 1, p) and not self._continues(p - 1, p))
        if at_start:
          frame.item_start = True
          frame.var_decl = False
          self.stmt_p = p

      handled: Optional[int] = None
      if frame.item_start:
        frame.item_start = False
        if frame.kind == "block":
          handled = self._statement(frame, p)
        elif frame.kind == "class":
          handled = self._member(frame, p)
        elif frame.kind == "params":
          handled = self._parameter(frame, p)
        elif frame.kind == "object":
          handled = self._property(p)

      if handled is not None and handled > p:
        p = handled
        continue
      p = self._expression_token(frame, p)

  def _expression_token(self, frame: _Frame, p: int) -> int:
    tok = self._t(p)

    if tok.kind == TokenKind.PUNCT:
      if tok.text in OPENERS:
        return self._open(frame, p)
      if tok.text == ";":
        if frame.kind in ("block", "class"):
          frame.item_start = True
        frame.var_decl = False
        return p + 1
      if tok.text == ",":
        if frame.kind in ("params", "object"):
          frame.item_start = True
        if frame.var_decl:
          return self._declarator(frame, p + 1)
        return p + 1
      if tok.text == "!" and p > 0 and self._adjacent(p - 1, p) and self._is_expression_end(self._prev_live(p)):
        self._erase(p, p)
        return p + 1
      if tok.text == "<":
        handled = self._angle(p)
        if handled is not None:
          return handled
      return p + 1

    if tok.kind != TokenKind.IDENTIFIER or self._punct(p - 1, ".", "?."):
      return p + 1

    word = tok.text
    if word in ("as", "satisfies") and self._is_expression_end(self._prev_live(p)) and not self._punct(p - 1, "*"):
      end = self._skip_type(p + 1)
      if end is None:
        raise EraseError(f"Malformed '{word}' expression at {tok.line}:{tok.col}")
      self._erase(p, end - 1, leading_ws=True)
      if self._punct(end, ")"):
        self.unwrap_candidates.append(end)
      return end
    if word in ("const", "let", "var") and self._kind(p + 1, TokenKind.IDENTIFIER, TokenKind.PUNCT):
      if self._word(p + 1, "enum"):
        return p + 1
      if self._kind(p + 1, TokenKind.IDENTIFIER) or self._punct(p + 1, "{", "["):
        frame.var_decl = True
        return self._declarator(frame, p + 1)
    if word == "function":
      return self._function(p, sig_start=None)
    if word == "class":
      return self._class(p)
    if word == "catch" and self._punct(p + 1, "("):
      self.pending_params = p + 1
    return p + 1

  def _open(self, frame: _Frame, p: int, binding: bool = False, optional: bool = False) -> int:
    tok = self._t(p)
    new = _Frame("expr", p, binding=binding, optional=optional)

    if tok.text == "(":
      if p == self.pending_params:
        new.kind = "params"
        new.signature_start = self.pending_signature
        new.ctor_class_p = self.pending_ctor_class
        self.pending_params = -1
        self.pending_signature = None
        self.pending_ctor_class = None
      elif self._is_arrow_params(p):
        new.kind = "params"
    elif tok.text == "{":
      if p == self.pending_class_body:
        new.kind = "class"
      elif binding:
        new.kind = "object"
      elif p == self.pending_block or p == self.stmt_p or self._opens_block(frame, p):
        new.kind = "block"
        if p == self.pending_ctor_body[0]:
          for name in self.pending_ctor_body[1]:
            self._insert_after(p, f"\nthis.{name} = {name}")
      else:
        new.kind = "object"

    new.item_start = new.kind != "expr"
    self.stack.append(new)
    return p + 1

  def _opens_block(self, frame: _Frame, p: int) -> bool:
    if frame.kind == "class":
      return True
    if self._punct(p - 1, ")", "=>"):
      return True
    return self._word(p - 1, "else", "try", "finally", "do")

  def _is_arrow_params(self, p: int) -> bool:
    if p > 0 and self._is_expression_end(p - 1) and not self._word(p - 1, "async"):
      return False
    m = self.match[p]
    if self._punct(m + 1, "=>"):
      return True
    if self._punct(m + 1, ":"):
      end = self._skip_type(m + 2)
      return end is not None and self._punct(end, "=>")
    return False

  def _after_close(self, closed: _Frame, p: int) -> int:
    parent = self.stack[-1]
    q = p + 1

    if closed.kind == "params":
      if self._punct(q, ":"):
        q = self._erase_type_annotation(q)
      if closed.signature_start is not None and not self._punct(q, "{"):
        end = q if self._punct(q, ";") else q - 1
        self._erase(closed.signature_start, end)
        parent.item_start = True
        return end + 1
      if self._punct(q, "{"):
        self.pending_block = q
        if closed.param_properties:
          self.pending_ctor_body = (q, list(closed.param_properties))
      return q

    if closed.binding:
      if closed.optional and self._punct(q, "?"):
        self._erase(q, q)
        q += 1
      if self._punct(q, ":"):
        q = self._erase_type_annotation(q)
      return q

    if closed.kind in ("block", "class") and parent.kind in ("block", "class"):
      parent.item_start = True
    return q

  # --- Statement-level constructs ---

  def _statement(self, frame: _Frame, p: int) -> Optional[int]:
    tok = self._t(p)
    q = p + 1 if tok.is_word("export") else p
    if tok.is_word("export") and self._word(q, "default") and self._word(q + 1, "interface"):
      q += 1

    if self._word(q, "declare") and self._kind(q + 1, TokenKind.IDENTIFIER):
      end = self._statement_end(q)
      self._erase(p, end)
      frame.item_start = True
      return end + 1

    if self._word(q, "interface") and self._kind(q + 1, TokenKind.IDENTIFIER):
      r = q + 2
      while r < self.n and not self._punct(r, "{"):
        r = self.match.get(r, r) + 1
      if r >= self.n:
        raise EraseError(f"Interface without a body at {tok.line}:{tok.col}")
      self._erase(p, self.match[r])
      frame.item_start = True
      return self.match[r] + 1

    if self._word(q, "type"):
      if self._kind(q + 1, TokenKind.IDENTIFIER) and self._punct(q + 2, "=", "<"):
        r = q + 2
        if self._punct(r, "<"):
          r = self._skip_angles(r)
        if r is None or not self._punct(r, "="):
          raise EraseError(f"Malformed type alias at {tok.line}:{tok.col}")
        end = self._skip_type(r + 1)
        if end is None:
          raise EraseError(f"Malformed type alias at {tok.line}:{tok.col}")
        last = end if self._punct(end, ";") else end - 1
        self._erase(p, last)
        frame.item_start = True
        return last + 1
      if q != p and self._punct(q + 1, "{", "*"):
        end = self._statement_end(q)
        self._erase(p, end)
        frame.item_start = True
        return end + 1

    if self._word(q, "namespace", "module") and self._kind(q + 1, TokenKind.IDENTIFIER, TokenKind.STRING):
      if self._punct(q + 2, "{", "."):
        raise EraseError(f"Namespace declarations cannot be downleveled ({tok.line}:{tok.col})")

    if self._word(q, "enum") or (self._word(q, "const") and self._word(q + 1, "enum")):
      return self._enum(frame, p, q)

    if self._word(q, "abstract") and self._word(q + 1, "class"):
      self._erase(q, q, trailing_ws=True)
      return q + 1

    if tok.is_word("import") and not self._punct(p + 1, "(", "."):
      return self._import(frame, p)

    if tok.is_word("export") and self._punct(q, "{"):
      return self._export_specifiers(frame, p)

    if self._word(q, "function"):
      return self._function(q, sig_start=p)
    if self._word(q, "async") and self._word(q + 1, "function"):
      return self._function(q + 1, sig_start=p)

    return None

  def _declarator(self, frame: _Frame, p: int) -> int:
    if self._punct(p, "{", "["):
      return self._open(frame, p, binding=True)
    if not self._kind(p, TokenKind.IDENTIFIER):
      return p
    q = p + 1
    if self._punct(q, "!") and self._punct(q + 1, ":"):
      self._erase(q, q)
      q += 1
    if self._punct(q, ":"):
      q = self._erase_type_annotation(q)
    return q

  def _function(self, p: int, sig_start: Optional[int]) -> int:
    r = p + 1
    if self._punct(r, "*"):
      r += 1
    if self._kind(r, TokenKind.IDENTIFIER):
      r += 1
    if self._punct(r, "<"):
      end = self._skip_angles(r)
      if end is None:
        return p + 1
      self._erase(r, end - 1)
      r = end
    if self._punct(r, "("):
      self.pending_params = r
      self.pending_signature = sig_start
      return r
    return p + 1

  def _class(self, p: int) -> int:
    r = p + 1
    while r < self.n:
      tok = self._t(r)
      if tok.is_punct("{"):
        self.pending_class_body = r
        break
      if tok.is_punct("(", "["):
        r = self.match[r] + 1
        continue
      if tok.is_punct("<") and self._kind(r - 1, TokenKind.IDENTIFIER) and self._adjacent(r - 1, r):
        end = self._skip_angles(r)
        if end is None:
          break
        self._erase(r, end - 1)
        r = end
        continue
      if tok.is_word("implements"):
        s = r
        while s < self.n and not self._punct(s, "{"):
          s = self.match.get(s, s) + 1
        self._erase(r, s - 1, leading_ws=True)
        self.pending_class_body = s
        break
      r += 1
    return p + 1

  def _member(self, frame: _Frame, p: int) -> Optional[int]:
    start = p
    r = p

    while self._punct(r, "@"):
      r += 1
      while self._kind(r, TokenKind.IDENTIFIER) and self._punct(r + 1, "."):
        r += 2
      r += 1
      if self._punct(r, "("):
        r = self.match[r] + 1
    start = r

    if self._punct(r, "[") and self._kind(r + 1, TokenKind.IDENTIFIER) and self._punct(r + 2, ":"):
      end = self._statement_end(r)
      self._erase(start, end)
      frame.item_start = True
      return end + 1

    while self._word(r, *MEMBER_MODIFIERS) and self._modifier_applies(r):
      if self._word(r, "declare", "abstract"):
        end = self._statement_end(r)
        self._erase(start, end)
        frame.item_start = True
        return end + 1
      self._erase(r, r, trailing_ws=True)
      r += 1

    while (self._word(r, *_CLASS_MEMBER_PREFIXES) and self._modifier_applies(r)) or self._punct(r, "*"):
      r += 1

    name_p = r
    if self._kind(r, TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.NUMBER):
      r += 1
    elif self._punct(r, "["):
      r = self.match[r] + 1
    else:
      return r if r > p else None

    if self._punct(r, "?", "!") and self._punct(r + 1, ":", "(", "<", "="):
      self._erase(r, r)
      r += 1
    if self._punct(r, "<"):
      end = self._skip_angles(r)
      if end is not None:
        self._erase(r, end - 1)
        r = end
    if self._punct(r, "("):
      self.pending_params = r
      self.pending_signature = start
      if self._word(name_p, "constructor"):
        self.pending_ctor_class = frame.open_p
      return r
    if self._punct(r, ":"):
      return self._erase_type_annotation(r)
    return r

  def _modifier_applies(self, r: int) -> bool:
    nxt = self._t(r + 1)
    if nxt is None or self._newline_between(r, r + 1):
      return False
    if nxt.kind in (TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.NUMBER):
      return True
    return nxt.is_punct("[", "*")

  def _parameter(self, frame: _Frame, p: int) -> Optional[int]:
    r = p
    while self._punct(r, "@"):
      r += 1
      while self._kind(r, TokenKind.IDENTIFIER) and self._punct(r + 1, "."):
        r += 2
      r += 1
      if self._punct(r, "("):
        r = self.match[r] + 1

    is_property = False
    while self._word(r, *_PARAMETER_PROPERTY_MODIFIERS) and (
      self._kind(r + 1, TokenKind.IDENTIFIER) or self._punct(r + 1, "{", "[")
    ):
      self._erase(r, r, trailing_ws=True)
      is_property = True
      r += 1

    if self._word(r, "this") and self._punct(r + 1, ":"):
      end = self._skip_type(r + 2)
      if end is None:
        raise EraseError("Malformed 'this' parameter")
      if self._punct(end, ","):
        self._erase(r, end, trailing_ws=True)
        frame.item_start = True
        return end + 1
      self._erase(r, end - 1)
      return end

    if self._punct(r, "..."):
      r += 1

    if self._kind(r, TokenKind.IDENTIFIER):
      if is_property and frame.ctor_class_p is not None:
        name = self._t(r).text
        frame.param_properties.append(name)
        self._insert_after(frame.ctor_class_p, f"\n{name}")
      r += 1
      if self._punct(r, "?"):
        self._erase(r, r)
        r += 1
      if self._punct(r, ":"):
        r = self._erase_type_annotation(r)
      return r

    if self._punct(r, "{", "["):
      return self._open(frame, r, binding=True, optional=True)

    return r if r > p else None

  def _property(self, p: int) -> Optional[int]:
    r = p
    while self._word(r, "async", "get", "set") and (
      self._kind(r + 1, TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.NUMBER) or self._punct(r + 1, "[", "*")
    ):
      r += 1
    if self._punct(r, "*"):
      r += 1
    if not self._kind(r, TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.NUMBER):
      return None
    if self._punct(r + 1, "<"):
      end = self._skip_angles(r + 1)
      if end is not None and self._punct(end, "("):
        self._erase(r + 1, end - 1)
        self.pending_params = end
        return end
    if self._punct(r + 1, "("):
      self.pending_params = r + 1
      return r + 1
    return None

  def _angle(self, p: int) -> Optional[int]:
    """
    Type arguments on a call (`ref<number>(1)`), a generic arrow (`<T>(x: T) => x`)
    or a prefix assertion (`<HTMLElement>el`).
    """
    if p > 0 and self._adjacent(p - 1, p) and self._kind(p - 1, TokenKind.IDENTIFIER):
      if self._t(p - 1).text in EXPRESSION_KEYWORDS:
        return None
      end = self._skip_type_args(p)
      if end is None:
        return None
      if self._punct(end, "(") or self._kind(end, TokenKind.TEMPLATE) or self._word(p - 2, "new"):
        self._erase(p, end - 1)
        return end
      return None

    if p == 0 or not self._is_expression_end(p - 1) or self._word(p - 1, "async"):
      end = self._skip_angles(p)
      if end is not None and self._punct(end, "(") and self._is_arrow_params(end):
        self._erase(p, end - 1)
        return end

      end = self._skip_type_args(p)
      if end is not None and self._starts_operand(end):
        self._erase(p, end - 1)
        opener = self._prev_live(p)
        if self._punct(opener, "("):
          self.unwrap_candidates.append(self.match[opener])
        return end
    return None

  def _starts_operand(self, p: int) -> bool:
    tok = self._t(p)
    if tok is None:
      return False
    if tok.kind in (TokenKind.IDENTIFIER, TokenKind.NUMBER, TokenKind.STRING, TokenKind.TEMPLATE, TokenKind.REGEX):
      return True
    return tok.is_punct("(", "[", "{", "<", "!", "-", "+", "~")

  def _unwrap_assertions(self) -> None:
    """Drops parentheses left around a bare operand once its assertion is gone: `(el as any).x` -> `el.x`."""
    openers = {close: open_ for open_, close in self.match.items()}
    for close in self.unwrap_candidates:
      open_ = openers[close]
      if not self._punct(open_, "(") or self._is_erased(open_):
        continue
      before = self._prev_live(open_)
      if before >= 0 and (self._is_expression_end(before) or self._word(before, "new")):
        continue  # call arguments, a control statement head or a `new` callee
      if self._is_simple_operand(open_ + 1, close):
        self._erase(open_, open_)
        self._erase(close, close)

  def _is_simple_operand(self, lo: int, hi: int) -> bool:
    """True if the live tokens in [lo, hi) form a member/call chain on one name or literal."""
    live = [q for q in range(lo, hi) if not self._is_erased(q)]
    if not live:
      return False
    first = self._t(live[0])
    if first.kind == TokenKind.IDENTIFIER:
      if first.text in EXPRESSION_KEYWORDS:
        return False
    elif first.kind not in (TokenKind.NUMBER, TokenKind.STRING, TokenKind.TEMPLATE):
      return False

    i = 1
    while i < len(live):
      q = live[i]
      tok = self._t(q)
      # `?.` stays wrapped: unwrapping would widen the short-circuit.
      if tok.is_punct(".") and i + 1 < len(live) and self._kind(live[i + 1], TokenKind.IDENTIFIER):
        i += 2
      elif tok.is_punct("(", "[") and not self._newline_between(live[i - 1], q):
        end = self.match[q]
        while i < len(live) and live[i] <= end:
          i += 1
      elif tok.kind == TokenKind.TEMPLATE:
        i += 1
      else:
        return False
    return True

  # --- Modules ---

  def _import(self, frame: _Frame, p: int) -> int:
    r = p + 1
    frame.item_start = True

    # import x = require('y')
    if self._kind(r, TokenKind.IDENTIFIER) and self._punct(r + 1, "="):
      if self._word(r, "type") or self._word(r + 1, "type"):
        end = self._statement_end(p)
        self._erase(p, end)
        return end + 1
      self.replacements[self.sig[p]] = (self.sig[p], "const")
      return p + 1

    if self._kind(r, TokenKind.STRING):
      if self._word(r + 1, "with", "assert") and self._punct(r + 2, "{") and not self._newline_between(r, r + 1):
        return self.match[r + 2] + 1
      return r + 1

    decl = _ImportDecl(start=p, end=p, source="")
    if self._word(r, "type") and not self._word(r + 1, "from") and not self._punct(r + 1, ","):
      decl.type_only = True
      r += 1

    if self._kind(r, TokenKind.IDENTIFIER) and not self._word(r, "from"):
      decl.default = self._t(r).text
      r += 1
      if self._punct(r, ","):
        r += 1
    if self._punct(r, "*") and self._word(r + 1, "as"):
      decl.namespace = self._t(r + 2).text
      r += 3
    if self._punct(r, "{"):
      m = self.match[r]
      decl.named = self._parse_specifiers(r + 1, m)
      r = m + 1

    if not self._word(r, "from") or not self._kind(r + 1, TokenKind.STRING):
      tok = self._t(p)
      raise EraseError(f"Malformed import declaration at {tok.line}:{tok.col}")
    decl.source = self._t(r + 1).text
    decl.end = r + 1
    # Import attributes: `with { type: 'json' }` (or the older `assert`)
    if self._word(r + 2, "with", "assert") and self._punct(r + 3, "{") and not self._newline_between(r + 1, r + 2):
      decl.end = self.match[r + 3]
      decl.attributes = self._source_text(r + 2, decl.end)
    if self._punct(decl.end + 1, ";"):
      decl.end += 1
    self.imports.append(decl)
    return decl.end + 1

  def _parse_specifiers(self, lo: int, hi: int) -> List[_ImportSpec]:
    specs: List[_ImportSpec] = []
    r = lo
    while r < hi:
      is_type = False
      if self._word(r, "type") and self._kind(r + 1, TokenKind.IDENTIFIER, TokenKind.STRING) and r + 1 < hi:
        if not self._punct(r + 1, ",") and not (self._word(r + 1, "as") and self._punct(r + 2, ",", "}")):
          is_type = True
          r += 1
      imported = self._t(r).text
      local = imported
      r += 1
      if self._word(r, "as") and r + 1 < hi:
        local = self._t(r + 1).text
        r += 2
      specs.append(_ImportSpec(imported=imported, local=local, is_type=is_type))
      if self._punct(r, ","):
        r += 1
    return specs

  def _export_specifiers(self, frame: _Frame, p: int) -> int:
    lo = p + 1
    hi = self.match[lo]
    r = lo + 1
    while r < hi:
      start = r
      while r < hi and not self._punct(r, ","):
        r += 1
      if self._word(start, "type") and r - start >= 2:
        end = r if r < hi else r - 1
        self._erase(start, end, trailing_ws=True)
      r += 1

    end = hi
    if self._word(hi + 1, "from") and self._kind(hi + 2, TokenKind.STRING):
      end = hi + 2
    if self._punct(end + 1, ";"):
      end += 1
    frame.item_start = True
    return end + 1

  def _value_identifiers(self) -> Set[str]:
    skip: Set[int] = set()
    for decl in self.imports:
      skip.update(range(self.sig[decl.start], self.sig[decl.end] + 1))

    used: Set[str] = set()
    prev: Optional[Token] = None
    for i, tok in enumerate(self.tokens):
      if self.erased[i] or i in skip or tok.is_trivia:
        continue
      if tok.kind == TokenKind.IDENTIFIER and not (prev is not None and prev.is_punct(".", "?.")):
        used.add(tok.text)
      elif tok.kind == TokenKind.TEMPLATE:
        for expr in _TEMPLATE_EXPR_RE.findall(tok.text):
          used.update(_WORD_RE.findall(expr))
      prev = tok
    for texts in self.inserts.values():
      for text in texts:
        used.update(_WORD_RE.findall(text))
    return used

  def _elide_imports(self) -> None:
    if not self.imports:
      return
    used = self._value_identifiers()

    for decl in self.imports:
      if decl.type_only:
        self._erase(decl.start, decl.end)
        continue

      keep_default = decl.default is not None and decl.default in used
      keep_namespace = decl.namespace is not None and decl.namespace in used
      kept = [s for s in decl.named if not s.is_type and s.local in used]

      unchanged = (
        (decl.default is None or keep_default)
        and (decl.namespace is None or keep_namespace)
        and len(kept) == len(decl.named)
      )
      if unchanged:
        continue
      if not (keep_default or keep_namespace or kept):
        self._erase(decl.start, decl.end)
        continue

      parts: List[str] = []
      if keep_default:
        parts.append(decl.default)
      if keep_namespace:
        parts.append(f"* as {decl.namespace}")
      if kept:
        names = [s.imported if s.imported == s.local else f"{s.imported} as {s.local}" for s in kept]
        parts.append("{ " + ", ".join(names) + " }")
      text = f"import {', '.join(parts)} from {decl.source}"
      if decl.attributes:
        text += f" {decl.attributes}"
      self.replacements[self.sig[decl.start]] = (self.sig[decl.end], text)

  # --- Enums ---

  def _enum(self, frame: _Frame, p: int, q: int) -> int:
    exported = self._word(p, "export")
    r = q + 1 if self._word(q, "const") else q
    name_tok = self._t(r + 1)
    if name_tok is None or name_tok.kind != TokenKind.IDENTIFIER or not self._punct(r + 2, "{"):
      tok = self._t(p)
      raise EraseError(f"Malformed enum declaration at {tok.line}:{tok.col}")
    name = name_tok.text
    lo = r + 2
    hi = self.match[lo]

    lines = [f"{'export ' if exported else ''}var {name};", f"(function ({name}) {{"]
    auto: Optional[float] = 0
    m = lo + 1
    while m < hi:
      key_tok = self._t(m)
      key = key_tok.text[1:-1] if key_tok.kind == TokenKind.STRING else key_tok.text
      m += 1
      init_text = None
      if self._punct(m, "="):
        init_start = m + 1
        m = init_start
        while m < hi and not self._punct(m, ","):
          m = self.match.get(m, m) + 1
        init_text = self._source_text(init_start, m - 1)

      is_string = False
      if init_text is None:
        if auto is None:
          raise EraseError(f"Enum member '{name}.{key}' must have an initializer")
        value = _format_number(auto)
        auto += 1
      else:
        value = init_text
        number = _parse_number(init_text)
        if number is not None:
          auto = number + 1
        else:
          auto = None
          is_string = init_text[:1] in ("'", '"', "`")

      if is_string:
        lines.append(f'    {name}["{key}"] = {value};')
      else:
        lines.append(f'    {name}[{name}["{key}"] = {value}] = "{key}";')

      if self._punct(m, ","):
        m += 1

    lines.append(f"}})({name} || ({name} = {{}}));")
    self.replacements[self.sig[p]] = (self.sig[hi], "\n".join(lines))
    frame.item_start = True
    return hi + 1

  def _source_text(self, p_from: int, p_to: int) -> str:
    a, b = self.sig[p_from], self.sig[p_to]
    return "".join(t.text for t in self.tokens[a : b + 1]).strip()

  # --- Output ---

  def _render(self) -> str:
    out: List[str] = []
    i = 0
    while i < len(self.tokens):
      if i in self.replacements:
        end, text = self.replacements[i]
        out.append(text)
        i = end + 1
        continue
      if not self.erased[i]:
        out.append(self.tokens[i].text)
      inserted = self.inserts.get(i)
      if inserted:
        out.extend(inserted)
        # Inserted statements end their line.
        if i + 1 < len(self.tokens) and self.tokens[i + 1].kind != TokenKind.NEWLINE:
          out.append("\n")
      i += 1
    return "".join(out)


def _parse_number(text: str) -> Optional[float]:
  sign = 1
  body = text.replace(" ", "")
  if body.startswith("-"):
    sign, body = -1, body[1:]
  try:
    return sign * int(body, 0)
  except ValueError:
    pass
  try:
    return sign * float(body)
  except ValueError:
    return None


def _format_number(value: float) -> str:
  if float(value).is_integer():
    return str(int(value))
  return repr(value)


def erase_types(code: str) -> str:
  """
  Downlevels a TypeScript snippet to JavaScript.

  Args:
      code (str): TypeScript source.

  Returns:
      str: JavaScript source.

  Raises:
      LexError: If the snippet cannot be tokenized or is unbalanced.
      EraseError: For constructs that cannot be lowered.
  """
  return TypeEraser(code).erase()
