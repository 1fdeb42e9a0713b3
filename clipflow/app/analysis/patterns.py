# clipflow/app/analysis/patterns.py
from __future__ import annotations
import re
import numpy as np

SYMBOLS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

def shannon_entropy(s: str) -> float:
    """Bits per character over the character distribution of s."""
    if not s:
        return 0.0
    _, counts = np.unique(np.array(list(s)), return_counts=True)
    p = counts.astype(float) / float(len(s))
    return float(-(p * np.log2(p)).sum())

def first_line(s: str) -> str:
    return s.split("\n", 1)[0]

def has_mixed_charsets(s: str) -> bool:
    """At least one uppercase, lowercase, digit and symbol."""
    return (
        re.search(r"[A-Z]", s) is not None
        and re.search(r"[a-z]", s) is not None
        and re.search(r"\d", s) is not None
        and SYMBOLS.search(s) is not None
    )
