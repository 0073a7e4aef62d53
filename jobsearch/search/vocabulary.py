"""Process-wide search vocabulary: synonym table and title catalogue."""

from dataclasses import dataclass, field
from typing import Optional

from jobsearch.config.models import VocabularyConfig

from .titles import DEFAULT_TITLE_CATALOGUE, TitleCatalogue
from .tokens import DEFAULT_SYNONYM_TABLE, SynonymTable


@dataclass(frozen=True)
class Vocabulary:
    """Immutable lookup tables handed to every search by reference."""

    synonyms: SynonymTable = field(default=DEFAULT_SYNONYM_TABLE)
    titles: TitleCatalogue = field(default=DEFAULT_TITLE_CATALOGUE)


def build_vocabulary(config: Optional[VocabularyConfig] = None) -> Vocabulary:
    """Build the vocabulary from the built-in tables plus configured additions.

    Args:
        config: Optional additions from the YAML configuration

    Returns:
        Vocabulary ready to be shared across requests

    Raises:
        ValueError: If a configured title mapping references an unknown title
    """
    if config is None:
        return Vocabulary()

    synonyms = DEFAULT_SYNONYM_TABLE
    if config.extra_synonyms:
        synonyms = synonyms.extended(config.extra_synonyms)

    titles = DEFAULT_TITLE_CATALOGUE
    if config.extra_titles or config.extra_title_mappings:
        titles = titles.extended(config.extra_titles, config.extra_title_mappings)

    return Vocabulary(synonyms=synonyms, titles=titles)
