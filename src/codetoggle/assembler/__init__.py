"""
Document Assembler Package.

Builds complete function pages around the block rewriter: function-name
linking, generated header and footer sections, and component injections.
"""

from codetoggle.assembler.assembler import DocumentAssembler
from codetoggle.assembler.metadata import FunctionEntry, FunctionRegistry, PackageEntry, PackageRegistry
from codetoggle.assembler.sections import FunctionMarkdown, build_function_markdown, replacer

__all__ = [
  "DocumentAssembler",
  "FunctionEntry",
  "FunctionMarkdown",
  "FunctionRegistry",
  "PackageEntry",
  "PackageRegistry",
  "build_function_markdown",
  "replacer",
]
