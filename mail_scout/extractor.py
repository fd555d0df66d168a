# mail_scout/extractor.py
"""
Email extraction from raw page markup.

The pipeline is a pure function of its input:

1. decode a fixed set of HTML entities;
2. run every :data:`TEXT_RULES` pattern and every :data:`ATTRIBUTE_RULES`
   pattern over the decoded text, pooling all candidates;
3. normalize each candidate (case, obfuscation tokens, whitespace);
4. keep only what :func:`is_valid_email` accepts;
5. return the unique addresses sorted ascending.

Rules are plain ``(pattern, normalizer)`` pairs so each one can be tested on
its own and new ones can be appended without touching :func:`extract_emails`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Pattern, Sequence, Tuple

__all__: Sequence[str] = (
    "ATTRIBUTE_RULES",
    "ExtractionRule",
    "TEXT_RULES",
    "decode_entities",
    "extract_emails",
    "is_valid_email",
    "normalize_candidate",
)

# --------------------------------------------------------------------------- #
# Entity decoding                                                             #
# --------------------------------------------------------------------------- #

# applied in order, "&amp;#64;" decodes to "@"
_ENTITIES: Tuple[Tuple[Pattern[str], str], ...] = tuple(
    (re.compile(re.escape(entity), re.IGNORECASE), replacement)
    for entity, replacement in (
        ("&amp;", "&"),
        ("&lt;", "<"),
        ("&gt;", ">"),
        ("&quot;", '"'),
        ("&#39;", "'"),
        ("&nbsp;", " "),
        ("&#x40;", "@"),
        ("&#64;", "@"),
    )
)


def decode_entities(text: str) -> str:
    """Resolve the supported entities one after another."""
    for pattern, replacement in _ENTITIES:
        text = pattern.sub(replacement, text)
    return text


# --------------------------------------------------------------------------- #
# Normalization                                                               #
# --------------------------------------------------------------------------- #

_SPACES_RE = re.compile(r"\s+")
_BRACKET_AT_RE = re.compile(r"\[at\]|\(at\)")
_BRACKET_DOT_RE = re.compile(r"\[dot\]|\(dot\)")
_WORD_AT_RE = re.compile(r" at ")
_WORD_DOT_RE = re.compile(r" dot ")
_TRAILING_DOT_RE = re.compile(r" dot$")


def normalize_candidate(raw: str) -> str:
    """Turn a raw (possibly obfuscated) match into a plain lower-case address.

    Order: lower-case and trim, collapse whitespace runs to one space,
    replace the bracketed tokens, replace the space-delimited ``at``/``dot``
    words, then drop every remaining space.
    """
    text = _SPACES_RE.sub(" ", raw.lower().strip())
    text = _BRACKET_AT_RE.sub("@", text)
    text = _BRACKET_DOT_RE.sub(".", text)
    text = _WORD_AT_RE.sub("@", text)
    text = _WORD_DOT_RE.sub(".", text)
    text = _TRAILING_DOT_RE.sub(".", text)
    return text.replace(" ", "")


# --------------------------------------------------------------------------- #
# Validation                                                                  #
# --------------------------------------------------------------------------- #

_VALID_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

_INVALID_EMAIL_PATTERNS: Tuple[Pattern[str], ...] = (
    # placeholder domains and their subdomains
    re.compile(r"[@.](?:example|test|dummy)\.com$", re.IGNORECASE),
    re.compile(r"@(?:placeholder|yoursite|yourdomain|samplesite)\.", re.IGNORECASE),
    # asset file names that look like addresses, e.g. logo@2x.png
    re.compile(r"\.(?:jpg|jpeg|png|gif|pdf|doc|docx|xls|xlsx|zip|rar)$", re.IGNORECASE),
    re.compile(r"^[0-9]+@"),
    re.compile(r"\.{2,}"),
    re.compile(r"@\."),
    re.compile(r"\.@"),
)

MIN_EMAIL_LENGTH = 5
MAX_EMAIL_LENGTH = 254


def is_valid_email(email: str) -> bool:
    """Return True if *email* looks like a real contact address."""
    if not MIN_EMAIL_LENGTH <= len(email) <= MAX_EMAIL_LENGTH:
        return False
    if not _VALID_EMAIL_RE.match(email):
        return False
    return not any(p.search(email) for p in _INVALID_EMAIL_PATTERNS)


# --------------------------------------------------------------------------- #
# Rules                                                                       #
# --------------------------------------------------------------------------- #

_STANDARD_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


def _embedded_address(raw: str) -> Optional[str]:
    match = _STANDARD_RE.search(raw)
    return match.group(0).lower() if match else None


@dataclass(frozen=True)
class ExtractionRule:
    """A named pattern plus the function that turns one match into a candidate."""

    name: str
    pattern: Pattern[str]
    normalizer: Callable[[str], Optional[str]] = normalize_candidate
    group: int = 0

    def candidates(self, text: str) -> Iterator[str]:
        for match in self.pattern.finditer(text):
            candidate = self.normalizer(match.group(self.group))
            if candidate:
                yield candidate


_LOCAL = r"[A-Za-z0-9._%+-]+"
_TOKEN_AT = r"(?:\[at\]|\(at\)|@)"
_LOCAL_OBFUSCATED = rf"{_LOCAL}(?:\s*(?:\[dot\]|\(dot\))\s*{_LOCAL})*"
_DOMAIN_OBFUSCATED = rf"[A-Za-z0-9-]+(?:(?:\s*(?:\[dot\]|\(dot\))\s*|\.)[A-Za-z0-9-]+)+"
# "a . b" and "a .b" join labels, "a. B" is a sentence end
_SPACED_DOT = r"(?:\s*\.|\s+\.\s+)"
_DOMAIN_SPACED = rf"[A-Za-z0-9-]+(?:{_SPACED_DOT}[A-Za-z0-9-]+)*{_SPACED_DOT}[A-Za-z]{{2,}}"
_DOMAIN_DOT_WORD = r"[A-Za-z0-9.-]+(?:\s+dot\s+[A-Za-z0-9-]+)*\s+dot\s+[A-Za-z]{2,}"

TEXT_RULES: Tuple[ExtractionRule, ...] = (
    ExtractionRule(
        "standard",
        re.compile(rf"\b{_LOCAL}@[A-Za-z0-9.-]+\.[A-Za-z]{{2,}}\b"),
    ),
    ExtractionRule(
        "spaced",
        re.compile(rf"\b{_LOCAL}\s*@\s*{_DOMAIN_SPACED}\b", re.IGNORECASE),
    ),
    ExtractionRule(
        "bracketed",
        re.compile(rf"\b{_LOCAL_OBFUSCATED}\s*{_TOKEN_AT}\s*{_DOMAIN_OBFUSCATED}\b", re.IGNORECASE),
    ),
    ExtractionRule(
        "dot-word",
        re.compile(rf"\b{_LOCAL}\s*@\s*{_DOMAIN_DOT_WORD}\b", re.IGNORECASE),
    ),
    ExtractionRule(
        "spelled-out",
        re.compile(rf"\b[A-Za-z0-9._%-]+\s+at\s+{_DOMAIN_DOT_WORD}\b", re.IGNORECASE),
    ),
)

ATTRIBUTE_RULES: Tuple[ExtractionRule, ...] = (
    ExtractionRule("mailto", re.compile(r"mailto:([^\"'\s>]+)", re.IGNORECASE), _embedded_address, 1),
    ExtractionRule("href-mailto", re.compile(r'href="mailto:([^"]+)"', re.IGNORECASE), _embedded_address, 1),
    ExtractionRule("data-email", re.compile(r'data-email="([^"]+)"', re.IGNORECASE), _embedded_address, 1),
    ExtractionRule("email-key", re.compile(r'email:\s*"([^"]+)"', re.IGNORECASE), _embedded_address, 1),
)


def extract_emails(markup: str, rules: Sequence[ExtractionRule] = TEXT_RULES + ATTRIBUTE_RULES) -> List[str]:
    """Return the unique, validated, lower-case addresses in *markup*, sorted."""
    if not markup:
        return []
    text = decode_entities(markup)
    found = set()
    for rule in rules:
        for candidate in rule.candidates(text):
            if is_valid_email(candidate):
                found.add(candidate)
    return sorted(found)
