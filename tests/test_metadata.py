from __future__ import annotations

import io
from pathlib import Path

from PIL import Image

from refimage.metadata import describe_image, format_mismatches, normalize_attribute_keys


def test_normalize_image_fields_and_values() -> None:
    result = normalize_attribute_keys({"Image: Width": "640", "Format": "PNG"})
    assert result == {"img:w": "640", "format": "png"}


def test_normalize_is_idempotent() -> None:
    once = normalize_attribute_keys({"Image: Height": "480", "Colour Space": "sRGB", "Format": "JPEG"})
    assert normalize_attribute_keys(once) == once


def test_normalize_does_not_mutate_input() -> None:
    attributes = {"Image: Width": "640"}
    normalize_attribute_keys(attributes)
    assert attributes == {"Image: Width": "640"}


def test_normalize_requires_exact_image_prefix() -> None:
    assert normalize_attribute_keys({"image: Width": "1"}) == {"image: width": "1"}
    assert normalize_attribute_keys({"Image:Width": "1"}) == {"image:width": "1"}


def test_describe_image_from_path(tmp_path: Path) -> None:
    path = tmp_path / "ref.png"
    Image.new("RGB", (40, 30), (10, 20, 30)).save(path)
    assert describe_image(path) == {"img:w": "40", "img:h": "30", "format": "png"}


def test_describe_image_from_bytes() -> None:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 16), (255, 255, 255)).save(buffer, format="JPEG")
    assert describe_image(buffer.getvalue()) == {"img:w": "8", "img:h": "16", "format": "jpeg"}


def test_format_mismatches_reports_expected_and_actual(tmp_path: Path) -> None:
    path = tmp_path / "ref.png"
    Image.new("RGB", (40, 30)).save(path)
    mismatches = format_mismatches({"Image: Width": "40", "Image: Height": "20", "Format": "JPEG", "DPI": "72"}, path)
    assert mismatches == {"img:h": ("20", "30"), "format": ("jpeg", "png"), "dpi": ("72", None)}
