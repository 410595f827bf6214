"""
Interfaces module - host adapters for the probe tool core.

Provides the OpenCV-backed canvas, pixel access and drawing used to
drive the probe tool outside of a browser viewer.
"""

from .canvas import CanvasSurface, OpenCVHost
from .probe_adapter import OpenCVProbeAdapter, build_probe_tool
from .style import RenderStyle

__all__ = [
    'CanvasSurface',
    'OpenCVHost',
    'OpenCVProbeAdapter',
    'RenderStyle',
    'build_probe_tool',
]
