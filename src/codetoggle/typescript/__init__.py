"""
TypeScript Toolkit.

A pure Python lexer, canonical printer and type eraser that let the engine
format and downlevel snippets without a Node.js toolchain.
"""

from codetoggle.typescript.eraser import EraseError, erase_types
from codetoggle.typescript.lexer import LexError, tokenize
from codetoggle.typescript.printer import print_canonical
from codetoggle.typescript.tokens import Token, TokenKind

__all__ = [
  "EraseError",
  "LexError",
  "Token",
  "TokenKind",
  "erase_types",
  "print_canonical",
  "tokenize",
]
