# clipflow/app/analysis/platform_heuristic.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import List, Tuple

from clipflow.app.analysis.patterns import first_line

@dataclass(frozen=True)
class PlatformResult:
    platform: str
    confidence: int
    indicators: Tuple[str, ...] = ()

UNKNOWN = "Unknown"

SOURCE_EXT = re.compile(r"\.(ts|js|py|java|cpp|cs|php|rb|go|rs|tsx|jsx)")
EDITOR_FILE_OP = re.compile(r"^\s*⏺\s*Write\(.*\.(ts|js|py|java)")
TODO_COMMENT = re.compile(r"^\s*//.*TODO|^\s*//.*FIXME|^\s*#.*TODO")
PROMPT = re.compile(r"^(\$|>) ")
ANSI = re.compile(r"\x1b\[[0-9;]*m")
HTML_TAG = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
UNIX_PATH = re.compile(r"^/[a-zA-Z0-9_\-/.]+$")
WIN_PATH = re.compile(r"^[A-Z]:\\[a-zA-Z0-9_\-\\]+$")
SHORT_TEXT = 280

def detect_platform(content: str) -> PlatformResult:
    """
    Guess the originating app class from textual fingerprints.
    Definitive signals return immediately; weaker ones accumulate as
    indicators and only matter for the final editor boost. Never raises.
    """
    text = (content or "").strip()
    indicators: List[str] = []

    # editors
    if EDITOR_FILE_OP.search(text):
        return PlatformResult("VS Code", 90, ("VS Code file operation",))
    if "Write(" in text and SOURCE_EXT.search(text):
        return PlatformResult("VS Code", 85, ("VS Code Write command pattern",))
    if "src/" in text or "lib/" in text or "components/" in text:
        indicators.append("Project structure paths")
    if TODO_COMMENT.search(text):
        indicators.append("Code comments with TODO/FIXME")

    # terminals
    if PROMPT.search(text):
        return PlatformResult("Terminal", 80, ("Command prompt prefix",))
    if ANSI.search(text):
        return PlatformResult("Terminal", 85, ("ANSI color codes",))
    if "Error:" in text and "at " in text:
        indicators.append("Stack trace format")

    # browsers
    if "http://" in text or "https://" in text:
        indicators.append("Contains URLs")
    if HTML_TAG.search(text):
        return PlatformResult("Browser", 75, ("HTML tags",))
    if "window." in text or "document." in text:
        indicators.append("Browser DOM references")

    # social
    short = 0 < len(text) <= SHORT_TEXT and "\n" not in text
    if "@" in text and len(text) < SHORT_TEXT and ".com" not in text:
        indicators.append("Mention pattern (possible social media)")
    if short and "#" in text:
        indicators.append("Short text with hashtags")

    # file managers
    line = first_line(text)
    if UNIX_PATH.search(line):
        return PlatformResult("File Explorer", 70, ("Unix file path",))
    if WIN_PATH.search(line):
        return PlatformResult("File Explorer", 70, ("Windows file path",))

    # notes
    if "# " in text or "## " in text:
        indicators.append("Markdown headers")
    if "- [ ]" in text or "- [x]" in text:
        return PlatformResult("Notes App", 75, ("Markdown checkboxes",))

    if any("Code" in i or "Project" in i for i in indicators):
        return PlatformResult("VS Code", 70, tuple(indicators))

    return PlatformResult(UNKNOWN, 20, tuple(indicators))
