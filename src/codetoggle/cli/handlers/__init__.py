from .assemble import handle_assemble
from .backends import handle_backends
from .rewrite import handle_rewrite

__all__ = [
  "handle_assemble",
  "handle_backends",
  "handle_rewrite",
]
