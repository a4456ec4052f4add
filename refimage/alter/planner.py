"""Translate declarative transform attributes into an image-tool command.

Attribute maps come straight from test-scenario tables, e.g.::

    {"Width": "640", "Resize Method": "Crop", "Gravity": "NE", "Format": "png"}

Every key must be understood; anything left over is a test-authoring mistake
and raises ``UnhandledAttributes``.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from ..errors import UnhandledAttributes, UnknownGravity
from ..runs.events import EventWriter
from .tools import run_tool

DEFAULT_TOOL = "mogrify"
DEFAULT_GRAVITY = "C"

GRAVITIES: Mapping[str, str] = MappingProxyType(
    {
        "C": "Center",
        "E": "East",
        "NE": "NorthEast",
        "N": "North",
        "NW": "NorthWest",
        "SE": "SouthEast",
        "S": "South",
        "SW": "SouthWest",
        "W": "West",
    }
)

Fragment = tuple[str, ...]
ToolRunner = Callable[[Sequence[str]], Any]


@dataclass(frozen=True)
class CommandPlan:
    tool: str
    fragments: tuple[Fragment, ...]
    path: str
    warnings: tuple[str, ...] = ()

    def argv(self) -> list[str]:
        cmd = [self.tool]
        for fragment in self.fragments:
            cmd.extend(fragment)
        cmd.append(self.path)
        return cmd

    def __str__(self) -> str:
        return shlex.join(self.argv())


def resolve_gravity(code: str) -> str:
    try:
        return GRAVITIES[code]
    except KeyError:
        raise UnknownGravity(code, tuple(GRAVITIES)) from None


def _dimensions(width: str | None, height: str | None) -> str:
    return f"{width or ''}x{height or ''}"


def _sizing_fragment(remaining: dict[str, str], warnings: list[str]) -> Fragment | None:
    width = remaining.pop("Width", None)
    height = remaining.pop("Height", None)
    resize_method = remaining.pop("Resize Method", None)

    if resize_method is None:
        if width is None and height is None:
            return None
        return ("-resize", _dimensions(width, height))
    if resize_method == "Crop":
        gravity = resolve_gravity(remaining.pop("Gravity", DEFAULT_GRAVITY))
        size = _dimensions(width, height)
        return ("-thumbnail", f"{size}^", "-extent", size, "-gravity", gravity)
    # TODO: confirm whether unknown resize methods should raise instead of skipping sizing.
    warnings.append(f"Resize Method {resize_method!r} is not recognised; no sizing applied")
    return None


def build_transform_plan(
    path: str | Path,
    attributes: Mapping[str, str] | None = None,
    *,
    tool: str = DEFAULT_TOOL,
) -> CommandPlan:
    remaining = dict(attributes or {})
    fragments: list[Fragment] = []
    warnings: list[str] = []

    sizing = _sizing_fragment(remaining, warnings)
    if sizing is not None:
        fragments.append(sizing)
    if "Format" in remaining:
        fragments.append(("-format", remaining.pop("Format")))

    if remaining:
        raise UnhandledAttributes(list(remaining))

    return CommandPlan(tool=tool, fragments=tuple(fragments), path=str(path), warnings=tuple(warnings))


class TransformPlanner:
    """Plans and applies in-place image alterations with an external tool.

    Pass an instance into each test step instead of reaching for global state;
    ``runner`` is swappable so steps can be exercised without ImageMagick.
    """

    def __init__(
        self,
        tool: str = DEFAULT_TOOL,
        *,
        runner: ToolRunner | None = None,
        events: EventWriter | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self.tool = tool
        self.events = events
        self.timeout_s = timeout_s
        self._runner = runner or self._run_with_timeout

    def _run_with_timeout(self, argv: Sequence[str]) -> Any:
        return run_tool(argv, timeout_s=self.timeout_s)

    def plan(self, path: str | Path, attributes: Mapping[str, str] | None = None) -> CommandPlan:
        return build_transform_plan(path, attributes, tool=self.tool)

    def alter_image(self, path: str | Path, attributes: Mapping[str, str] | None = None) -> CommandPlan:
        plan = self.plan(path, attributes)
        self._emit("image_alter_planned", path=plan.path, command=str(plan), warnings=list(plan.warnings))
        self._runner(plan.argv())
        self._emit("image_altered", path=plan.path, command=str(plan))
        return plan

    def _emit(self, event_type: str, **payload: Any) -> None:
        if self.events is not None:
            self.events.emit(event_type, **payload)
