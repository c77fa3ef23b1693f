"""
Language configurations.

- javascript.py: JavaScript (.js, .jsx, .mjs, .cjs)
- typescript.py: TypeScript (.ts, .mts, .cts) and TSX (.tsx)
"""

from .javascript import JAVASCRIPT_CONFIG
from .typescript import TSX_CONFIG, TYPESCRIPT_CONFIG, TYPESCRIPT_TYPE_CONTEXTS

__all__ = [
    'JAVASCRIPT_CONFIG',
    'TYPESCRIPT_CONFIG',
    'TSX_CONFIG',
    'TYPESCRIPT_TYPE_CONTEXTS',
]
