"""Top-level package for metasync.

This package persists retrieved metadata artifacts to a local directory tree
under OS-safe names, optionally beautifying code before it is written. The
main entry point is `ArtifactStore`.
"""

__version__ = "0.3.0"

from .io.storage import ArtifactStore
from .io.walker import DirectoryWalker

__all__ = ["ArtifactStore", "DirectoryWalker", "__version__"]
