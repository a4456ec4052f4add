from __future__ import annotations

from pathlib import Path

import pytest

from refimage.alter.planner import GRAVITIES, TransformPlanner, build_transform_plan
from refimage.errors import UnhandledAttributes, UnknownGravity
from refimage.runs.events import EventWriter


def test_width_and_height_emit_single_resize() -> None:
    plan = build_transform_plan("/tmp/img", {"Width": "640", "Height": "480"})
    assert plan.fragments == (("-resize", "640x480"),)
    assert plan.argv() == ["mogrify", "-resize", "640x480", "/tmp/img"]


@pytest.mark.parametrize(
    "attributes, expected",
    [
        ({"Width": "640"}, "640x"),
        ({"Height": "480"}, "x480"),
    ],
)
def test_single_dimension_scales_proportionally(attributes: dict[str, str], expected: str) -> None:
    plan = build_transform_plan("img.png", attributes)
    assert plan.fragments == (("-resize", expected),)


def test_no_attributes_emits_nothing() -> None:
    plan = build_transform_plan("img.png", {})
    assert plan.fragments == ()
    assert plan.argv() == ["mogrify", "img.png"]


def test_crop_emits_thumbnail_extent_gravity() -> None:
    plan = build_transform_plan(
        "img.png",
        {"Width": "100", "Height": "50", "Resize Method": "Crop", "Gravity": "NE"},
    )
    assert plan.fragments == (
        ("-thumbnail", "100x50^", "-extent", "100x50", "-gravity", "NorthEast"),
    )


def test_crop_gravity_defaults_to_center() -> None:
    plan = build_transform_plan("img.png", {"Width": "10", "Height": "10", "Resize Method": "Crop"})
    assert plan.fragments[0][-1] == "Center"


def test_unknown_gravity_raises() -> None:
    with pytest.raises(UnknownGravity) as excinfo:
        build_transform_plan("img.png", {"Width": "10", "Resize Method": "Crop", "Gravity": "ne"})
    assert excinfo.value.code == "ne"


def test_gravity_table_is_fixed() -> None:
    assert len(GRAVITIES) == 9
    assert set(GRAVITIES.values()) == {
        "Center", "North", "South", "East", "West",
        "NorthEast", "NorthWest", "SouthEast", "SouthWest",
    }
    with pytest.raises(TypeError):
        GRAVITIES["X"] = "Nowhere"  # type: ignore[index]


def test_format_is_last_and_keeps_case() -> None:
    plan = build_transform_plan("img.png", {"Format": "PNG", "Width": "20"})
    assert plan.fragments == (("-resize", "20x"), ("-format", "PNG"))
    assert plan.argv()[-3:] == ["-format", "PNG", "img.png"]


def test_unrecognised_resize_method_is_a_noop_with_warning() -> None:
    plan = build_transform_plan("img.png", {"Width": "20", "Resize Method": "Fit"})
    assert plan.fragments == ()
    assert plan.warnings and "Fit" in plan.warnings[0]


def test_leftover_keys_raise_in_original_order() -> None:
    with pytest.raises(UnhandledAttributes) as excinfo:
        build_transform_plan("img.png", {"Quality": "80", "Width": "5", "Strip": "yes"})
    assert excinfo.value.keys == ["Quality", "Strip"]
    assert "Quality, Strip" in str(excinfo.value)


def test_gravity_without_crop_is_unhandled() -> None:
    with pytest.raises(UnhandledAttributes) as excinfo:
        build_transform_plan("img.png", {"Gravity": "N"})
    assert excinfo.value.keys == ["Gravity"]


def test_callers_map_is_not_mutated() -> None:
    attributes = {"Width": "640", "Resize Method": "Crop", "Gravity": "S", "Format": "jpg"}
    snapshot = dict(attributes)
    build_transform_plan("img.png", attributes)
    assert attributes == snapshot


def test_plan_str_is_shell_quoted() -> None:
    plan = build_transform_plan("my image.png", {"Width": "10", "Height": "10", "Resize Method": "Crop"})
    assert str(plan) == "mogrify -thumbnail '10x10^' -extent 10x10 -gravity Center 'my image.png'"


def test_planner_delegates_argv_and_emits_events(tmp_path: Path) -> None:
    calls: list[list[str]] = []
    events = EventWriter(tmp_path / "events.jsonl", "session-1")
    planner = TransformPlanner("convert-tool", runner=lambda argv: calls.append(list(argv)), events=events)

    plan = planner.alter_image(tmp_path / "a.png", {"Height": "32"})

    assert calls == [["convert-tool", "-resize", "x32", str(tmp_path / "a.png")]]
    assert plan.tool == "convert-tool"
    types = [event["type"] for event in events.read()]
    assert types == ["image_alter_planned", "image_altered"]


def test_planner_does_not_run_tool_on_planning_error() -> None:
    calls: list[list[str]] = []
    planner = TransformPlanner(runner=lambda argv: calls.append(list(argv)))
    with pytest.raises(UnhandledAttributes):
        planner.alter_image("img.png", {"Quality": "80"})
    assert calls == []


def test_planner_passes_timeout_to_run_tool(monkeypatch) -> None:
    seen: list[tuple[list[str], float | None]] = []
    monkeypatch.setattr(
        "refimage.alter.planner.run_tool",
        lambda argv, timeout_s=None: seen.append((list(argv), timeout_s)),
    )
    planner = TransformPlanner(timeout_s=7)
    planner.alter_image("img.png", {"Width": "10"})
    assert seen == [(["mogrify", "-resize", "10x", "img.png"], 7)]
