"""
Tajweed markup module: Parses bracket-coded tajweed annotations.

The alquran.cloud ``quran-tajweed`` edition marks recitation rules inline,
for example ``[h:9421[ٱ]`` or ``[l[ل]``: a one-letter rule code, an optional
numeric id and the annotated letters. This module turns that text into
structured spans or into ``<tajweed>`` HTML elements for the reader.
"""

import logging
import re
from enum import Enum
from typing import List, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

# [code(:id)?[content]
TAJWEED_PATTERN = re.compile(r"\[([A-Za-z])(?::([0-9]+))?\[(.*?)\]")


class TajweedRule(Enum):
    """Known tajweed rules: (code, css class, type label, description)."""

    HAMZAT_WASL = ("h", "ham_wasl", "hamza-wasl", "Hamzat ul Wasl")
    SILENT = ("s", "slnt", "silent", "Silent")
    LAM_SHAMSIYYAH = ("l", "slnt", "lam-shamsiyyah", "Lam Shamsiyyah")
    MADDA_NORMAL = ("n", "madda_normal", "madda-normal", "Normal Prolongation: 2 Vowels")
    MADDA_PERMISSIBLE = ("p", "madda_permissible", "madda-permissible",
                         "Permissible Prolongation: 2, 4, 6 Vowels")
    MADDA_NECESSARY = ("m", "madda_necessary", "madda-necessary", "Necessary Prolongation: 6 Vowels")
    QALQALAH = ("q", "qlq", "qalqalah", "Qalqalah")
    MADDA_OBLIGATORY = ("o", "madda_obligatory", "madda-obligatory",
                        "Obligatory Prolongation: 4-5 Vowels")
    IKHAFA_SHAFAWI = ("c", "ikhf_shfw", "ikhafa-shafawi", "Ikhafa Shafawi - With Meem")
    IKHAFA = ("f", "ikhf", "ikhafa", "Ikhafa")
    IDGHAM_SHAFAWI = ("w", "idghm_shfw", "idgham-shafawi", "Idgham Shafawi - With Meem")
    IQLAB = ("i", "iqlb", "iqlab", "Iqlab")
    IDGHAM_WITH_GHUNNAH = ("a", "idgh_ghn", "idgham-with-ghunnah", "Idgham - With Ghunnah")
    IDGHAM_WITHOUT_GHUNNAH = ("u", "idgh_w_ghn", "idgham-without-ghunnah", "Idgham - Without Ghunnah")
    IDGHAM_MUTAJANISAYN = ("d", "idgh_mus", "idgham-mutajanisayn", "Idgham - Mutajanisayn")
    IDGHAM_MUTAQARIBAYN = ("b", "idgh_mut", "idgham-mutaqaribayn", "Idgham - Mutaqaribayn")
    GHUNNAH = ("g", "ghn", "ghunnah", "Ghunnah: 2 Vowels")

    def __init__(self, code: str, css_class: str, label: str, description: str):
        self.code = code
        self.css_class = css_class
        self.label = label
        self.description = description


class UnknownRule(NamedTuple):
    """A rule code that is not part of TajweedRule."""

    code: str


_RULES_BY_CODE = {rule.code: rule for rule in TajweedRule}


class TajweedSpan(NamedTuple):
    """One annotated run of text."""

    rule: Union[TajweedRule, UnknownRule]
    content: str
    tajweed_id: Optional[int] = None


Segment = Union[str, TajweedSpan]


def lookup_rule(code: str) -> Union[TajweedRule, UnknownRule]:
    """Resolve a one-letter code to its rule, or UnknownRule if unrecognised."""
    return _RULES_BY_CODE.get(code, UnknownRule(code))


def tokenize_tajweed(text: Optional[str]) -> List[Segment]:
    """
    Split annotated text into plain strings and TajweedSpan segments.

    Args:
        text: Text that may contain tajweed markup

    Returns:
        Segments in input order. Unterminated or malformed brackets stay in
        the plain string segments.
    """
    if not text:
        return []
    if "[" not in text:
        return [text]

    segments: List[Segment] = []
    pos = 0
    for match in TAJWEED_PATTERN.finditer(text):
        if match.start() > pos:
            segments.append(text[pos:match.start()])
        code, tajweed_id, content = match.groups()
        segments.append(TajweedSpan(
            rule=lookup_rule(code),
            content=content,
            tajweed_id=int(tajweed_id) if tajweed_id else None,
        ))
        pos = match.end()

    if pos < len(text):
        segments.append(text[pos:])
    return segments


def render_segment(segment: Segment) -> str:
    """Render one segment as HTML. Spans with unknown codes render as their content."""
    if isinstance(segment, str):
        return segment

    rule = segment.rule
    if isinstance(rule, UnknownRule):
        logger.warning(f"Unknown tajweed type: {rule.code}")
        return segment.content

    tajweed_attr = f":{segment.tajweed_id}" if segment.tajweed_id is not None else ""
    return (
        f'<tajweed class="{rule.css_class}" data-type="{rule.label}" '
        f'data-description="{rule.description}" data-tajweed="{tajweed_attr}">'
        f"{segment.content}</tajweed>"
    )


def parse_tajweed(text: Optional[str]) -> str:
    """
    Convert tajweed-annotated text to HTML markup.

    Text without any ``[`` is returned as is. The output never contains the
    ``[code[`` trigger, so parsing it again leaves it unchanged.

    Args:
        text: Text from the quran-tajweed edition

    Returns:
        HTML string
    """
    if not text:
        return ""
    if "[" not in text:
        return text
    return "".join(render_segment(segment) for segment in tokenize_tajweed(text))
