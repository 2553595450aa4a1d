import math
import re

# Tried in order; the first match wins.
_APOSTROPHE = re.compile(r"(\d+)\s*'\s*(\d+)?\s*(?:\"|in|inch|inches)?", re.IGNORECASE)
_FT_IN = re.compile(r"(\d+)\s*(?:ft|feet)\s*(\d+)?\s*(?:in|inch|inches)?", re.IGNORECASE)
_NUMBER = re.compile(r"\d+")


def parse_feet_inches(note):
    """
    Best-effort split of a free-text distance ("3' 7\"", "3 ft 7 in", "3 7",
    "3-7", "12") into (feet, inches) strings. A lone number is feet.
    """
    raw = (note or "").strip()
    if not raw:
        return "", ""

    m = _APOSTROPHE.search(raw)
    if m:
        return m.group(1) or "", m.group(2) or ""

    m = _FT_IN.search(raw)
    if m:
        return m.group(1) or "", m.group(2) or ""

    nums = _NUMBER.findall(raw)
    if len(nums) >= 2:
        return nums[0], nums[1]
    if len(nums) == 1:
        return nums[0], ""
    return "", ""


def _whole(raw: str):
    try:
        v = float(raw)
    except ValueError:
        return None
    if not math.isfinite(v):
        return None
    return max(0, math.floor(v))


def format_feet_inches(feet, inches) -> str:
    feet = (feet or "").strip()
    inches = (inches or "").strip()
    if not feet and not inches:
        return ""

    f = _whole(feet) if feet else 0
    i = _whole(inches) if inches else 0
    if f is None or i is None:
        return ""

    total = f * 12 + i
    return f"{total // 12}' {total % 12}\""
