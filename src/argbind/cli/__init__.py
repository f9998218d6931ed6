"""CLI layer — error boundary and the ``argbind`` console script.

This package is the outermost layer.  It may import from ``core``,
``infra`` and ``utils``, but no other layer may import from ``cli``.
"""
