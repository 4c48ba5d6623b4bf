"""Line deduplication package.

Avoid importing submodules at package import time so logger configuration
happens only when a module that logs is actually used.
"""

__all__: list[str] = []
