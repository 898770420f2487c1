"""
Core Package.

Contains the block synchronization engine:
- Formatter and Dialect Downleveler (backend facades)
- Annotation Stripper
- Equivalence Decider
- Block Rewriter and its diagnostics
"""
