"""Release domain: typed branch names, versions and session state.

Nothing in this package performs I/O. Parsers validate at the boundary so
later stages work with already-checked values.
"""

from __future__ import annotations
