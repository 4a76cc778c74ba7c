"""
Regex patterns for note quality (NVQ) scoring.
"""

import re
from typing import Optional, Sequence

# =============================================================================
# Why / purpose
# =============================================================================

FIRST_PERSON = re.compile(
    r"I am keeping this because|I need this|This helps me|I'm keeping this|I want to remember",
    re.IGNORECASE,
)

ACTIONABLE = re.compile(
    r"will help|enables|allows|supports|crucial for|vital for|important for|"
    r"essential for|necessary for|so that I can|in order to|helps me",
    re.IGNORECASE,
)

# Anchored at the start of any line
PURPOSE_STARTERS = re.compile(
    r"^\s*(?:I am keeping this because|Purpose:|Why:|I need this|This is important because)",
    re.IGNORECASE | re.MULTILINE,
)

PURPOSE_SENTENCE = re.compile(r"I am keeping this because[^.]*\.", re.IGNORECASE)
PURPOSE_FIELD = re.compile(r"^\s*(?:Purpose|Why):\s*(.+)$", re.IGNORECASE | re.MULTILINE)

# =============================================================================
# Metadata
# =============================================================================

STATUS_VALUES = ("Seed", "Sapling", "Evergreen")
TYPE_VALUES = ("Logic", "Technical", "Reflection")
STAKEHOLDER_VALUES = ("Self", "Future Users", "AI Agent")

STATUS_FIELD = re.compile(r"^\s*(?:Status|Maturity):\s*(.+)$", re.IGNORECASE | re.MULTILINE)
TYPE_FIELD = re.compile(r"^\s*(?:Note[ -]?)?Type:\s*(.+)$", re.IGNORECASE | re.MULTILINE)
STAKEHOLDER_FIELD = re.compile(r"^\s*(?:Stakeholder|Audience):\s*(.+)$", re.IGNORECASE | re.MULTILINE)

PROJECT_WIKILINK = re.compile(r"\[\[Project[/:]([^\]]+)\]\]", re.IGNORECASE)
PROJECT_INLINE = re.compile(r"^\s*Project:\s*([^\n,]+)", re.IGNORECASE | re.MULTILINE)
PROJECT_REFERENCE = re.compile(r"\bfor (?:the |my )?([A-Z][a-zA-Z ]+?) [Pp]roject\b")

# =============================================================================
# Tags and links
# =============================================================================

DEFAULT_FUNCTIONAL_PREFIXES = (
    "task/", "decision/", "skill/", "insight/", "project/", "evolution/", "ui/",
)

WIKILINK = re.compile(r"\[\[([^\]]+)\]\]")
HIERARCHY_MARKER = re.compile(r"project/|\bmoc\b|map of content", re.IGNORECASE)

UPWARD_TYPES = frozenset({"parent", "part_of", "belongs_to", "upward"})
SIDEWAYS_TYPES = frozenset({"related", "extends", "supports"})

# =============================================================================
# Originality
# =============================================================================

SYNTHESIS_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"\bI (?:think|believe|realized|realised|discovered|noticed|found|learned)\b",
    r"\bmy (?:interpretation|understanding|take|takeaway|view|insight|conclusion)\b",
    r"\bthis (?:suggests|implies|means|tells me|indicates|reveals)\b",
    r"\bthe key (?:insight|takeaway|lesson|point) is\b",
    r"\bfor (?:my|our) (?:use case|project|context|situation)\b",
    r"\b(?:decision|lesson learned|takeaway|conclusion):",
    r"\bI (?:decided|chose|concluded|determined)\b",
    r"\bwhat this means for\b",
    r"\bin my experience\b",
    r"\bI've (?:noticed|observed|seen)\b",
))


def first_field(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def canonical_value(raw: Optional[str], allowed: Sequence[str]) -> Optional[str]:
    """Map a raw field value onto an allowed value, case-insensitively."""
    if not raw:
        return None
    raw_lower = raw.strip().lower()
    for value in allowed:
        if raw_lower == value.lower() or raw_lower.startswith(value.lower()):
            return value
    return None


def extract_project_name(text: str) -> Optional[str]:
    """Project from a [[Project/X]] link, a 'Project:' line or 'for the X project'."""
    for pattern in (PROJECT_WIKILINK, PROJECT_INLINE, PROJECT_REFERENCE):
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def extract_wikilinks(text: str) -> list[str]:
    return [m.strip() for m in WIKILINK.findall(text)]


def count_synthesis_matches(text: str) -> int:
    return sum(1 for pattern in SYNTHESIS_PATTERNS if pattern.search(text))
