"""Normalize image-metadata attributes for comparison."""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Mapping

from PIL import Image

_IMAGE_FIELD = re.compile(r"^Image: (.).*$")

ImageSource = str | Path | bytes


def normalize_attribute_keys(attributes: Mapping[str, str]) -> dict[str, str]:
    """Lower-case keys and values, folding ``Image: Width`` style keys to ``img:w``."""
    params: dict[str, str] = {}
    for key, value in attributes.items():
        params[_IMAGE_FIELD.sub(r"img:\1", str(key)).lower()] = str(value).lower()
    return params


def _open(source: ImageSource) -> Image.Image:
    if isinstance(source, bytes):
        return Image.open(io.BytesIO(source))
    return Image.open(source)


def describe_image(source: ImageSource) -> dict[str, str]:
    with _open(source) as image:
        width, height = image.size
        fmt = image.format or ""
    return normalize_attribute_keys(
        {
            "Image: Width": str(width),
            "Image: Height": str(height),
            "Format": fmt,
        }
    )


def format_mismatches(expected: Mapping[str, str], source: ImageSource) -> dict[str, tuple[str, str | None]]:
    wanted = normalize_attribute_keys(expected)
    actual = describe_image(source)
    mismatches: dict[str, tuple[str, str | None]] = {}
    for key, value in wanted.items():
        found = actual.get(key)
        if found != value:
            mismatches[key] = (value, found)
    return mismatches
