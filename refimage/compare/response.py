"""Compare a captured response image against an altered reference image."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Any, Mapping

from ..alter.planner import TransformPlanner
from ..config import Settings
from ..errors import ComparisonPending, ImageMismatch
from ..runs.events import EventWriter
from ..utils import random_token
from .capture import ResponseCapture
from .similarity import compare


class ResponseImageComparator:
    def __init__(
        self,
        planner: TransformPlanner,
        capture: ResponseCapture,
        settings: Settings,
        events: EventWriter | None = None,
    ) -> None:
        self.planner = planner
        self.capture = capture
        self.settings = settings
        self.events = events

    def compare_response_image(
        self,
        *,
        local_path: str | None = None,
        image_data: bytes | None = None,
        alter_source: Mapping[str, str] | None = None,
        ensure_response_is_compressed: bool = False,
    ) -> dict[str, Any]:
        """Check the last captured response looks like the altered source image.

        The source is ``local_path`` (relative to the data directory) or the raw
        ``image_data``. Both files live in a scratch directory that is removed on
        exit; on mismatch they are first copied to the configured scratch dir.
        """
        if not self.settings.duplicate_check:
            raise ComparisonPending(
                "Perceptual image comparison is pending; set REFIMAGE_DUPLICATE_CHECK=1 to enable it."
            )
        if local_path is None and image_data is None:
            raise ValueError("compare_response_image needs local_path or image_data.")

        with tempfile.TemporaryDirectory(prefix="refimage-") as tmp:
            source_file = Path(tmp) / "source-image"
            received_file = Path(tmp) / "received-image"

            if local_path is not None:
                shutil.copyfile(self.settings.data_dir / local_path, source_file)
            else:
                source_file.write_bytes(image_data or b"")

            self.planner.alter_image(source_file, alter_source or {})
            received_file.write_bytes(self.capture.last().body)

            try:
                return self._check(source_file, received_file, ensure_response_is_compressed)
            except ImageMismatch as exc:
                token = random_token()
                scratch = self.settings.scratch_dir
                scratch.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source_file, scratch / f"{token}-source.bin")
                shutil.copyfile(received_file, scratch / f"{token}-received.bin")
                exc.add_note(f"Please check {scratch}/{token}-*.bin")
                self._emit("response_image_mismatch", error=str(exc), token=token, scratch_dir=scratch)
                raise

    def _check(self, source_file: Path, received_file: Path, ensure_response_is_compressed: bool) -> dict[str, Any]:
        metrics = compare(source_file, received_file, self.settings.duplicate_threshold)
        self._emit("response_image_compared", **metrics)
        if not metrics["duplicate"]:
            raise ImageMismatch("The received image is not similar enough to the source at the requested dimensions")
        if ensure_response_is_compressed:
            received_size = received_file.stat().st_size
            source_size = source_file.stat().st_size
            if received_size >= source_size:
                raise ImageMismatch(
                    f"The received image ({received_size} bytes) is not smaller than the source ({source_size} bytes)"
                )
        return metrics

    def _emit(self, event_type: str, **payload: Any) -> None:
        if self.events is not None:
            self.events.emit(event_type, **payload)
