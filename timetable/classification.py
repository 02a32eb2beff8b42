# timetable/classification.py
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import DEFAULT_CORE_KEYWORDS, DEFAULT_LIGHT_KEYWORDS
from .model import ClassOffering

LAB = "lab"
CORE = "core"
LIGHT = "light"
REGULAR = "regular"

# Scheduling passes, hardest to place first
PASS_ORDER = (LAB, CORE, LIGHT, REGULAR)

_ABBREV_STOPWORDS = {"and", "the", "for", "with"}


@dataclass
class OfferingPartition:
    labs: List[ClassOffering] = field(default_factory=list)
    core: List[ClassOffering] = field(default_factory=list)
    light: List[ClassOffering] = field(default_factory=list)
    regular: List[ClassOffering] = field(default_factory=list)

    def passes(self):
        groups = {LAB: self.labs, CORE: self.core, LIGHT: self.light, REGULAR: self.regular}
        return [(name, groups[name]) for name in PASS_ORDER]


def _matches(course_name: str, keywords: Sequence[str]) -> bool:
    name = (course_name or "").lower()
    return any(k.lower() in name for k in keywords)


def is_core_subject(course_name: str, keywords: Sequence[str] = DEFAULT_CORE_KEYWORDS) -> bool:
    return _matches(course_name, keywords)


def is_light_subject(course_name: str, keywords: Sequence[str] = DEFAULT_LIGHT_KEYWORDS) -> bool:
    return _matches(course_name, keywords)


def classify(
    offering: ClassOffering,
    core_keywords: Sequence[str] = DEFAULT_CORE_KEYWORDS,
    light_keywords: Sequence[str] = DEFAULT_LIGHT_KEYWORDS,
) -> str:
    if offering.is_lab:
        return LAB
    if is_core_subject(offering.course_name or "", core_keywords):
        return CORE
    if is_light_subject(offering.course_name or "", light_keywords):
        return LIGHT
    return REGULAR


def partition_offerings(
    offerings: Sequence[ClassOffering],
    core_keywords: Sequence[str] = DEFAULT_CORE_KEYWORDS,
    light_keywords: Sequence[str] = DEFAULT_LIGHT_KEYWORDS,
) -> OfferingPartition:
    """Split offerings into the four passes, keeping input order inside each."""
    part = OfferingPartition()
    buckets = {LAB: part.labs, CORE: part.core, LIGHT: part.light, REGULAR: part.regular}
    for off in offerings:
        buckets[classify(off, core_keywords, light_keywords)].append(off)
    return part


def abbreviation(name: Optional[str]) -> str:
    """Short subject label for timetable grids, e.g. "Data Structures" -> "DS"."""
    if not name:
        return "---"
    words = [w for w in name.split(" ") if len(w) > 2 and w.lower() not in _ABBREV_STOPWORDS]
    if not words:
        return name.strip()[:3].upper() or "---"
    if len(words) == 1:
        return words[0][:3].upper()
    return "".join(w[0] for w in words).upper()[:4]
