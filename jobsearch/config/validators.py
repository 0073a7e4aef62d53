"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

LARGE_SYNONYM_SET = 25


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check a raw configuration dict for suspicious but valid settings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    vocabulary = config_dict.get("vocabulary") or {}
    if isinstance(vocabulary, dict):
        synonyms = vocabulary.get("extra_synonyms") or {}
        if isinstance(synonyms, dict):
            for token, values in synonyms.items():
                if not isinstance(values, list):
                    continue
                if len(values) > LARGE_SYNONYM_SET:
                    warning_messages.append(
                        f"Synonym '{token}' expands to {len(values)} tokens; every token adds "
                        "five clauses to each search"
                    )
                short = sorted(
                    v for v in values if isinstance(v, str) and 0 < len(v.strip()) < 3
                )
                if short:
                    warning_messages.append(
                        f"Synonym '{token}' includes very short tokens ({', '.join(short)}) "
                        "that will substring-match many titles"
                    )

    search = config_dict.get("search") or {}
    if isinstance(search, dict):
        timeout_ms = search.get("statement_timeout_ms")
        if isinstance(timeout_ms, int) and timeout_ms > 30000:
            warning_messages.append(
                f"statement_timeout_ms ({timeout_ms}) is above 30s; slow searches will hold "
                "connections for a long time"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
