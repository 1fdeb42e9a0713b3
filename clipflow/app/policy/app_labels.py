from __future__ import annotations
from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import Dict, Optional, Tuple

import psutil

DEFAULT_LABEL = "System"

# Frontmost process names (as macOS reports them) -> display labels
APP_LABELS: Dict[str, str] = {
    # browsers
    "Google Chrome": "Chrome",
    "Google Chrome Canary": "Chrome Canary",
    "Microsoft Edge": "Edge",
    "Safari": "Safari",
    "Firefox": "Firefox",
    "Arc": "Arc",
    "Arc Browser": "Arc",
    "Brave Browser": "Brave",
    "Opera": "Opera",
    # editors / IDEs
    "Visual Studio Code": "VS Code",
    "Code": "VS Code",
    "Code - Insiders": "VS Code Insiders",
    "Cursor": "Cursor",
    "WebStorm": "WebStorm",
    "IntelliJ IDEA": "IntelliJ",
    "IntelliJ IDEA Community Edition": "IntelliJ",
    "IntelliJ IDEA Ultimate": "IntelliJ",
    "PyCharm": "PyCharm",
    "PhpStorm": "PhpStorm",
    "CLion": "CLion",
    "Xcode": "Xcode",
    "Sublime Text": "Sublime Text",
    "Android Studio": "Android Studio",
    "Zed": "Zed",
    "Nova": "Nova",
    "Fleet": "Fleet",
    "Vim": "Vim",
    "Neovim": "Neovim",
    # terminals
    "Terminal": "Terminal",
    "iTerm2": "iTerm",
    "iTerm": "iTerm",
    "Hyper": "Hyper",
    "Warp": "Warp",
    "Alacritty": "Alacritty",
    # communication
    "Slack": "Slack",
    "Discord": "Discord",
    "Telegram": "Telegram",
    "WhatsApp": "WhatsApp",
    "Microsoft Teams": "Teams",
    "Zoom": "Zoom",
    "Mail": "Mail",
    "Messages": "Messages",
    "Microsoft Outlook": "Outlook",
    # productivity
    "Notes": "Notes",
    "TextEdit": "TextEdit",
    "Notion": "Notion",
    "Obsidian": "Obsidian",
    "Bear": "Bear",
    "Evernote": "Evernote",
    "Microsoft Word": "Word",
    "Microsoft Excel": "Excel",
    "Microsoft PowerPoint": "PowerPoint",
    "Pages": "Pages",
    "Numbers": "Numbers",
    "Keynote": "Keynote",
    # design
    "Figma": "Figma",
    "Sketch": "Sketch",
    "Adobe Photoshop": "Photoshop",
    "Adobe Photoshop 2024": "Photoshop",
    "Adobe Illustrator": "Illustrator",
    "Adobe Illustrator 2024": "Illustrator",
    # media
    "Spotify": "Spotify",
    "Music": "Apple Music",
    "VLC media player": "VLC",
    "QuickTime Player": "QuickTime",
    "Photos": "Photos",
    # dev tools
    "Docker Desktop": "Docker",
    "Postman": "Postman",
    "GitHub Desktop": "GitHub Desktop",
    "SourceTree": "SourceTree",
    "TablePlus": "TablePlus",
    "Insomnia": "Insomnia",
    # system
    "Finder": "Finder",
    "Activity Monitor": "Activity Monitor",
    "System Preferences": "System Preferences",
    "System Settings": "System Settings",
}

def normalize_label(raw: Optional[str]) -> str:
    name = (raw or "").strip()
    if not name:
        return DEFAULT_LABEL
    return APP_LABELS.get(name, name)

def _self_process_name() -> Optional[str]:
    try:
        name = psutil.Process().name()
    except psutil.Error:
        return None
    return name.rsplit(".", 1)[0] if name.lower().endswith(".exe") else name

@dataclass(frozen=True)
class AppLabelPolicy:
    """
    Decides which foreground labels count as attribution evidence.
    Own labels are the manager itself; generic labels are desktop fallbacks
    that say nothing about where the content came from.
    """
    own: Tuple[str, ...] = ("clipflow*", "electron")
    generic: Tuple[str, ...] = ("system", "finder", "file explorer", "explorer")
    extra_own: Tuple[str, ...] = field(default_factory=tuple)

    def is_own(self, label: Optional[str]) -> bool:
        name = (label or "").lower()
        return any(fnmatch(name, pat.lower()) for pat in self.own + self.extra_own)

    def is_generic(self, label: Optional[str]) -> bool:
        name = (label or "").lower()
        return any(fnmatch(name, pat) for pat in self.generic)

    def is_evidence(self, label: Optional[str]) -> bool:
        return bool(label) and not self.is_own(label) and not self.is_generic(label)

def default_policy() -> AppLabelPolicy:
    me = _self_process_name()
    return AppLabelPolicy(extra_own=(me,) if me else ())
