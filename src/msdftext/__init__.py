# -*- coding: utf-8 -*-
"""MSDF text labels for 3D scenes.

``msdftext.mesh`` builds the quad mesh for a string, ``msdftext.billboard``
places it facing the camera each frame and ``msdftext.label`` ties the two
together with a ``LabelStyle``.  The pyglet viewer lives in
``msdftext.viewer`` and is only importable with the ``viewer`` extra.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("msdfText")
except PackageNotFoundError:  # pragma: no cover - source checkout without install
    __version__ = "unknown"
