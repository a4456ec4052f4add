"""Perceptual hashes for near-duplicate image checks."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image

HASH_BITS = 64
DEFAULT_DUPLICATE_THRESHOLD = 15

ImageSource = str | Path | bytes


def _grayscale(source: ImageSource, size: tuple[int, int]) -> Image.Image:
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    with Image.open(handle) as image:
        return image.convert("L").resize(size, Image.Resampling.LANCZOS)


def _bits_to_int(bits: Any) -> int:
    value = 0
    for bit in bits:
        value = (value << 1) | int(bit)
    return value


def dhash(source: ImageSource) -> int:
    pixels = np.asarray(_grayscale(source, (9, 8)), dtype=np.int16)
    return _bits_to_int((pixels[:, :-1] > pixels[:, 1:]).flatten())


def _dct_matrix(n: int) -> np.ndarray:
    k = np.arange(n).reshape(-1, 1)
    i = np.arange(n).reshape(1, -1)
    matrix = np.cos(np.pi * (2 * i + 1) * k / (2 * n)) * np.sqrt(2.0 / n)
    matrix[0, :] = np.sqrt(1.0 / n)
    return matrix


_DCT32 = _dct_matrix(32)


def phash(source: ImageSource) -> int:
    pixels = np.asarray(_grayscale(source, (32, 32)), dtype=float)
    dct = _DCT32 @ pixels @ _DCT32.T
    low = dct[:8, :8]
    # DC term skews the median for flat images.
    median = np.median(low.flatten()[1:])
    return _bits_to_int((low > median).flatten())


def hamming(a: int, b: int) -> int:
    return bin(a ^ b).count("1")


def _score(a: int, b: int) -> float:
    return 1.0 - (hamming(a, b) / float(HASH_BITS))


def compare(
    reference: ImageSource,
    candidate: ImageSource,
    threshold: int = DEFAULT_DUPLICATE_THRESHOLD,
) -> dict[str, Any]:
    """Score two images; ``duplicate`` is true when the pHash distance is within ``threshold``."""
    dh_ref, dh_can = dhash(reference), dhash(candidate)
    ph_ref, ph_can = phash(reference), phash(candidate)
    dh_score = _score(dh_ref, dh_can)
    ph_score = _score(ph_ref, ph_can)
    distance = hamming(ph_ref, ph_can)
    return {
        "dhash": dh_score,
        "phash": ph_score,
        "distance": distance,
        "overall": (dh_score + ph_score) / 2.0,
        "duplicate": distance <= threshold,
    }
