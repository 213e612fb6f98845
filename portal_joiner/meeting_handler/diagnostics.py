"""
Best-effort diagnostics: step screenshots and text recognition.

Nothing in here may influence the join flow. Every failure is logged and
swallowed, and recognition runs as a fire-and-forget task whose only output
is a log line.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Optional, Set

import pytesseract
from PIL import Image

from portal_joiner.config import settings, get_logger, DiagnosticsSettings
from portal_joiner.core.exceptions import RecognitionFailure
from portal_joiner.utils import sanitize_filename, truncate_text


logger = get_logger("diagnostics")


def _recognize_sync(image_path: Path, language: str) -> str:
    with Image.open(image_path) as image:
        return pytesseract.image_to_string(image, lang=language)


async def recognize_text(image_path: Path, language: str = "eng") -> str:
    """
    Run OCR on an image.

    Args:
        image_path: Screenshot to read.
        language: Tesseract language code.

    Returns:
        Recognized text, stripped.

    Raises:
        RecognitionFailure: If the image cannot be read or Tesseract fails.
    """
    try:
        text = await asyncio.to_thread(_recognize_sync, image_path, language)
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
        raise RecognitionFailure(f"Text recognition failed: {e}", {"image": str(image_path)}) from e
    return text.strip()


class DiagnosticsRecorder:
    """Saves step screenshots and logs what OCR reads on them."""

    def __init__(self, diagnostics_settings: Optional[DiagnosticsSettings] = None) -> None:
        self._settings = diagnostics_settings or settings.diagnostics
        self._screenshot_dir = Path(self._settings.screenshot_dir)
        self._screenshot_counter = 0
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of recognition tasks still running."""
        return len(self._tasks)

    async def capture(self, page, step_name: str) -> Optional[Path]:
        """
        Save a screenshot of ``page`` for a specific step.

        Args:
            page: Playwright page to capture
            step_name: Descriptive name for this step (e.g., "portal_loaded")

        Returns:
            Path of the screenshot, or None if disabled or it failed.
        """
        if not self._settings.screenshots_enabled:
            return None

        try:
            self._screenshot_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self._screenshot_counter += 1
            path = self._screenshot_dir / (
                f"{timestamp}_{self._screenshot_counter:02d}_{sanitize_filename(step_name)}.png"
            )
            await page.screenshot(path=str(path))
            logger.debug(f"Screenshot saved: {path.name}")
            return path
        except Exception as e:
            logger.warning(f"Failed to save screenshot for {step_name}: {e}")
            return None

    def recognize_in_background(self, image_path: Optional[Path]) -> Optional[asyncio.Task]:
        """
        Start OCR on a screenshot without waiting for it.

        Returns:
            The task, or None when OCR is disabled or there is no image.
        """
        if image_path is None or not self._settings.ocr_enabled:
            return None

        task = asyncio.create_task(self._log_recognized_text(image_path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _log_recognized_text(self, image_path: Path) -> None:
        try:
            text = await recognize_text(image_path, self._settings.ocr_language)
        except RecognitionFailure as e:
            logger.warning(e.message)
            return
        except Exception as e:
            logger.warning(f"Text recognition failed on {image_path.name}: {e}")
            return
        logger.info(f"Recognized text on {image_path.name}: {truncate_text(' '.join(text.split()), 300)!r}")

    async def drain(self) -> None:
        """Cancel recognition tasks that are still running."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
