"""Query tokenization and synonym expansion.

Tokens are produced by lowercasing the query and splitting on any run of
characters other than ASCII letters, digits and ``+`` (so ``c++`` survives as
one token while ``node.js`` becomes ``node`` and ``js``). Each token is then
expanded through a SynonymTable. Expansion is one hop only: synonyms of
synonyms are not followed.
"""

import re
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

TOKEN_SPLIT_PATTERN = re.compile(r"[^a-z0-9+]+")

# Built-in synonym table. Lookups are one-directional: "swe" expands to
# "software engineer" without "software" listing "swe". Values are matched as
# case-insensitive substrings, so very short values are avoided on purpose.
DEFAULT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    # Software and IT
    "software": ("developer", "programmer"),
    "engineer": ("engineering", "developer"),
    "engineering": ("engineer",),
    "developer": ("engineer", "programmer", "development"),
    "programmer": ("developer", "engineer"),
    "swe": ("software engineer", "software developer"),
    "frontend": ("front end", "front-end", "ui developer"),
    "backend": ("back end", "back-end", "server side"),
    "fullstack": ("full stack", "full-stack"),
    "devops": ("site reliability", "platform engineer", "infrastructure"),
    "sre": ("site reliability", "devops"),
    "qa": ("quality assurance", "test engineer", "tester"),
    "tester": ("quality assurance", "qa engineer"),
    "js": ("javascript",),
    "javascript": ("typescript", "node"),
    "typescript": ("javascript",),
    "golang": ("go developer", "go engineer"),
    "c++": ("cpp",),
    "ml": ("machine learning",),
    "ai": ("artificial intelligence", "machine learning"),
    "analyst": ("analytics", "analysis"),
    "scientist": ("science", "research"),
    "it": ("information technology", "help desk", "systems administrator"),
    "sysadmin": ("systems administrator", "system administrator"),
    # Healthcare
    "nurse": ("nursing", "registered nurse", "lpn"),
    "nursing": ("nurse",),
    "rn": ("registered nurse", "nurse"),
    "lpn": ("licensed practical nurse", "nurse"),
    "cna": ("nursing assistant", "nurse aide"),
    "doctor": ("physician", "medical doctor"),
    "physician": ("doctor", "medical doctor"),
    "caregiver": ("care giver", "home health aide", "caretaker"),
    "pharmacist": ("pharmacy",),
    "therapist": ("therapy",),
    "dental": ("dentist", "hygienist"),
    # Education
    "teacher": ("educator", "instructor", "tutor"),
    "tutor": ("teacher", "instructor"),
    "professor": ("lecturer", "faculty"),
    # Logistics and trades
    "driver": ("delivery", "chauffeur", "cdl"),
    "cdl": ("truck driver", "commercial driver"),
    "warehouse": ("fulfillment", "logistics", "picker", "packer"),
    "forklift": ("warehouse", "material handler"),
    "electrician": ("electrical",),
    "plumber": ("plumbing",),
    "mechanic": ("technician", "automotive"),
    "welder": ("welding", "fabricator"),
    "carpenter": ("carpentry", "woodworker"),
    # Retail and hospitality
    "cashier": ("retail", "sales associate", "clerk"),
    "retail": ("store", "sales associate"),
    "chef": ("cook", "culinary"),
    "cook": ("chef", "culinary", "line cook"),
    "waiter": ("server", "waitress"),
    "barista": ("coffee",),
    "housekeeper": ("housekeeping", "cleaner", "janitor"),
    "janitor": ("custodian", "cleaner"),
    # Business
    "sales": ("account executive", "business development", "salesperson"),
    "marketing": ("growth", "brand", "seo"),
    "hr": ("human resources", "recruiter", "talent acquisition"),
    "recruiter": ("talent acquisition", "sourcer"),
    "accountant": ("accounting", "bookkeeper", "cpa"),
    "bookkeeper": ("accounting", "accountant"),
    "finance": ("financial", "accounting"),
    "designer": ("design", "ux designer", "ui designer"),
    "ux": ("user experience", "ux designer"),
    "ui": ("user interface", "ui designer"),
    "pm": ("product manager", "project manager"),
    "manager": ("management", "supervisor", "lead"),
    "supervisor": ("manager", "lead"),
    "admin": ("administrative", "administrator", "assistant"),
    "receptionist": ("front desk", "administrative assistant"),
    "security": ("guard", "cybersecurity"),
    "support": ("customer service", "help desk"),
    # Locations and work arrangements
    "remote": ("work from home", "telecommute", "wfh"),
    "nyc": ("new york",),
    "sf": ("san francisco",),
    "la": ("los angeles",),
    "dc": ("washington",),
}


class SynonymTable:
    """Immutable token -> synonyms mapping.

    Built once at process start and shared by reference between concurrent
    searches. Keys and values are lowercased; each value list keeps its
    declared order and drops duplicates and self references.
    """

    def __init__(self, entries: Mapping[str, Iterable[str]]):
        normalized: Dict[str, Tuple[str, ...]] = {}
        for token, synonyms in entries.items():
            key = token.strip().lower()
            if not key:
                continue
            merged = list(normalized.get(key, ()))
            for synonym in synonyms:
                value = synonym.strip().lower()
                if value and value != key and value not in merged:
                    merged.append(value)
            normalized[key] = tuple(merged)
        self._entries = MappingProxyType(normalized)

    def lookup(self, token: str) -> Tuple[str, ...]:
        """Return the synonyms declared for a token (empty if none)."""
        return self._entries.get(token, ())

    def extended(self, entries: Mapping[str, Iterable[str]]) -> "SynonymTable":
        """Return a new table with extra entries appended after existing ones."""
        merged: Dict[str, list] = {key: list(values) for key, values in self._entries.items()}
        for token, synonyms in entries.items():
            merged.setdefault(token.strip().lower(), []).extend(synonyms)
        return SynonymTable(merged)

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def tokenize(text: Optional[str]) -> Tuple[str, ...]:
    """Split raw query text into lowercase base tokens.

    Duplicates are kept here; expand() collapses them.

    Example:
        >>> tokenize("Node.js / C++ developer")
        ('node', 'js', 'c++', 'developer')
    """
    if not text:
        return ()
    return tuple(part for part in TOKEN_SPLIT_PATTERN.split(text.lower()) if part.strip())


def expand(text: Optional[str], table: SynonymTable) -> Tuple[str, ...]:
    """Tokenize text and expand every token through the synonym table.

    The result is an ordered set: each base token is followed by its synonyms,
    and a token that already appeared (as a base token or as a synonym) is not
    repeated. The order depends only on the input and the table, so plans
    built from it are reproducible.

    Args:
        text: Raw query text (may be None or empty)
        table: Synonym table to expand with

    Returns:
        Tuple of unique tokens in first-seen order
    """
    return _unique(_with_synonyms(tokenize(text), table))


def _with_synonyms(tokens: Sequence[str], table: SynonymTable) -> Iterable[str]:
    for token in tokens:
        yield token
        yield from table.lookup(token)


def _unique(tokens: Iterable[str]) -> Tuple[str, ...]:
    seen = {}
    for token in tokens:
        seen.setdefault(token, None)
    return tuple(seen)


DEFAULT_SYNONYM_TABLE = SynonymTable(DEFAULT_SYNONYMS)
