"""Filesystem-facing components for metasync.

This package contains the path codec, the filesystem capability, the
directory walker, and the artifact store (`metasync.io.storage`).
"""

from .filesystem import FileSystem, LocalFileSystem
from .path_codec import decode_filename, encode_filename, encode_path, normalize_path
from .walker import DirectoryWalker

__all__ = [
    "DirectoryWalker",
    "FileSystem",
    "LocalFileSystem",
    "decode_filename",
    "encode_filename",
    "encode_path",
    "normalize_path",
]
