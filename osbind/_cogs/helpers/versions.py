"""
Detecting the library's own version.

The codebase does not contain the version directly: the releases depend
on tagging in the versioning system rather than on in-code version bumps.

The version is determined only once at startup when the code is loaded.
"""
import importlib.metadata
from typing import Optional

version: Optional[str] = None

try:
    name, *_ = __name__.split('.')  # usually "osbind", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass  # not installed, or installed from a source tree without metadata.
