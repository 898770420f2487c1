"""
CLI Command Handlers Facade.

Re-exports the handlers from `codetoggle.cli.handlers` so the dispatcher and
tests have a single module to import or patch.
"""

from codetoggle.cli.handlers.assemble import handle_assemble
from codetoggle.cli.handlers.backends import handle_backends
from codetoggle.cli.handlers.rewrite import handle_rewrite

__all__ = [
  "handle_assemble",
  "handle_backends",
  "handle_rewrite",
]
