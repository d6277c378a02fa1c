"""codetree — snapshot a source tree into a single text report.

Walks a directory, prints an indented tree of everything that survives the
ignore list, then appends the contents of every file with an allowed
extension.

Public API:
- TreeConfig
- Reporter
- generate
"""

from .config import TreeConfig
from .reporter import Reporter, generate

__version__ = "0.1.0"

__all__ = ["TreeConfig", "Reporter", "generate", "__version__"]
