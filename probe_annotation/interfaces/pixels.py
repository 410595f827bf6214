"""
Pixel block access over numpy images.
"""

from typing import List

import numpy as np


def read_stored_pixels(
    pixels: np.ndarray, x: int, y: int, width: int, height: int
) -> List:
    """
    Read a block of stored (grayscale) values.

    Args:
        pixels: 2D array (rows, columns) of stored values
        x: Left column of the block
        y: Top row of the block
        width: Block width
        height: Block height

    Returns:
        Flat row-major list of values
    """
    if pixels.ndim != 2:
        raise ValueError(f"Stored pixels must be 2D, got shape {pixels.shape}")
    block = pixels[y : y + height, x : x + width]
    return block.ravel().tolist()


def read_rgb_pixels(
    pixels: np.ndarray,
    x: int,
    y: int,
    width: int,
    height: int,
    bgr: bool = True,
) -> List[int]:
    """
    Read a block of color pixels as flat RGBA values.

    Args:
        pixels: 3D array (rows, columns, 3|4)
        bgr: Whether the channels are stored in OpenCV's BGR order

    Returns:
        Flat list ``[r, g, b, a, r, g, b, a, ...]``
    """
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(f"Color pixels must be (H, W, 3|4), got shape {pixels.shape}")
    block = pixels[y : y + height, x : x + width, :3]
    if bgr:
        block = block[..., ::-1]
    alpha = np.full(block.shape[:2] + (1,), 255, dtype=block.dtype)
    rgba = np.concatenate([block, alpha], axis=2)
    return rgba.ravel().tolist()
