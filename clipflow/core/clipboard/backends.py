# clipflow/core/clipboard/backends.py
from __future__ import annotations
import base64
import io
from typing import Optional
import structlog
import pyperclip

log = structlog.get_logger()

def read_clipboard_text() -> Optional[str]:
    try:
        return pyperclip.paste()
    except pyperclip.PyperclipException as e:
        # No clipboard mechanism on this platform (e.g. headless Linux)
        log.debug("clipboard.read.error", err=str(e))
        return None

def read_clipboard_image() -> Optional[str]:
    """Clipboard image as a PNG data URI, or None when there is no image."""
    try:
        from PIL import Image, ImageGrab
        grabbed = ImageGrab.grabclipboard()
    except Exception as e:
        log.debug("clipboard.image.error", err=str(e))
        return None
    # grabclipboard returns a list of filenames when files were copied
    if not isinstance(grabbed, Image.Image):
        return None
    buf = io.BytesIO()
    grabbed.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

def write_clipboard_text(text: str) -> None:
    pyperclip.copy(text)
