"""
Adapters for the routing rules component.
"""

from .file_lock import FcntlFileLock
from .yaml_stream import YamlDocumentStreamCodec, default_codec

__all__ = [
    "FcntlFileLock",
    "YamlDocumentStreamCodec",
    "default_codec",
]
