# text_fit.py
"""Fitting text to a width: truncation with an ellipsis and word wrapping."""
from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import stringWidth

ELLIPSIS = "..."


def _longest_fit(text: str, font: str, size: float, max_width: float) -> int:
    """Length of the longest prefix of `text` that fits in max_width (at least 1)."""
    lo, hi = 1, len(text)
    fit = 1
    while lo <= hi:
        mid = (lo + hi) // 2
        if stringWidth(text[:mid], font, size) <= max_width:
            fit = mid
            lo = mid + 1
        else:
            hi = mid - 1
    return fit


def truncate_text(text, font: str, size: float, max_width: float) -> str:
    """Cut `text` to max_width, ending with an ellipsis when anything was dropped."""
    raw = " ".join(str(text or "").split())
    if not raw or stringWidth(raw, font, size) <= max_width:
        return raw
    room = max_width - stringWidth(ELLIPSIS, font, size)
    if room <= 0:
        return ELLIPSIS
    if stringWidth(raw[0], font, size) > room:
        return ELLIPSIS
    keep = _longest_fit(raw, font, size, room)
    return raw[:keep].rstrip() + ELLIPSIS


def wrap_text(text, font: str, size: float, max_width: float) -> list[str]:
    """Word-wrap to max_width; tokens wider than a line are split."""
    words = str(text or "").split()
    lines: list[str] = []
    current = ""

    def split_long_token(token: str):
        if stringWidth(token, font, size) <= max_width:
            return [token]
        chunks = []
        remaining = token
        while remaining:
            fit = _longest_fit(remaining, font, size, max_width)
            chunks.append(remaining[:fit])
            remaining = remaining[fit:]
        return chunks

    expanded_words = []
    for w in words:
        expanded_words.extend(split_long_token(w))

    for w in expanded_words:
        test = current + (" " if current else "") + w
        if stringWidth(test, font, size) <= max_width:
            current = test
        else:
            if current:
                lines.append(current)
            current = w
    if current:
        lines.append(current)
    return lines or [""]


def wrap_paragraphs(text, font: str, size: float, max_width: float) -> list[str]:
    """
    Wrap multi-line free text (terms, notes). Blank source lines become
    empty output lines so paragraph breaks survive.
    """
    raw = str(text or "").strip()
    if not raw:
        return []
    out: list[str] = []
    for ln in raw.splitlines():
        ln = ln.strip()
        if not ln:
            if out and out[-1] != "":
                out.append("")
            continue
        out.extend(wrap_text(ln, font, size, max_width))
    return out
