"""Manages dictionary loading and query construction."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union
from urllib.parse import urlencode

from .constants import SweepConstants
from .exceptions import DictionaryLoadError


# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dictionary:
    """An ordered word list, optionally with a frequency count per word."""
    name: str
    words: Tuple[str, ...]
    frequencies: Optional[Tuple[int, ...]] = None

    def __len__(self) -> int:
        return len(self.words)

    def sorted_by_frequency(self) -> "Dictionary":
        """Return a copy with the most frequent words first. Ties keep file order."""
        if self.frequencies is None:
            return self
        order = sorted(range(len(self.words)), key=lambda i: -self.frequencies[i])
        return Dictionary(
            name=f"{self.name} (by frequency)",
            words=tuple(self.words[i] for i in order),
            frequencies=tuple(self.frequencies[i] for i in order),
        )


class DictionaryManager:
    """Manages dictionary loading and query construction."""

    @staticmethod
    def load(path: Union[Path, str]) -> Dictionary:
        """
        Load a dictionary file.

        Each non-blank line holds a word and, optionally, a frequency count
        separated by whitespace. Lines starting with ``#`` are ignored.

        Args:
            path: Path to the dictionary file.

        Returns:
            The loaded Dictionary, named after the file stem.

        Raises:
            DictionaryLoadError: If the file cannot be read, a frequency is
                not an integer, or no words are found.
        """
        path = Path(path)
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.error(f"Failed to read dictionary {path}: {e}")
            raise DictionaryLoadError(f"Unable to read dictionary {path}") from e

        words = []
        frequencies = []
        for lineno, line in enumerate(lines, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split()
            words.append(parts[0])
            if len(parts) > 1:
                try:
                    frequencies.append(int(parts[1]))
                except ValueError as e:
                    raise DictionaryLoadError(f"{path}:{lineno}: invalid frequency {parts[1]!r}") from e

        if not words:
            raise DictionaryLoadError(f"Dictionary {path} has no words")
        if frequencies and len(frequencies) != len(words):
            raise DictionaryLoadError(f"Dictionary {path} has frequencies for only some words")

        logger.info(f"Loaded {len(words)} words from {path}")
        return Dictionary(name=path.stem, words=tuple(words),
                          frequencies=tuple(frequencies) if frequencies else None)

    @staticmethod
    def from_words(words: Iterable[str], name: str = "default") -> Dictionary:
        """Build a dictionary from an in-memory word list."""
        words = tuple(w for w in words if w)
        if not words:
            raise DictionaryLoadError("Dictionary has no words")
        return Dictionary(name=name, words=words)

    @staticmethod
    def build_query(dictionary: Dictionary, query_length: int,
                    separator: str = SweepConstants.QUERY_SEPARATOR) -> str:
        """Join the first ``query_length`` words of the dictionary."""
        if query_length <= 0:
            raise ValueError(f"query_length must be positive, got {query_length}")
        if query_length > len(dictionary):
            raise ValueError(
                f"query_length {query_length} exceeds dictionary '{dictionary.name}' of {len(dictionary)} words")
        return separator.join(dictionary.words[:query_length])

    @staticmethod
    def build_url(base_url: str, query: str, path: str = SweepConstants.QUERY_PATH,
                  param: str = SweepConstants.QUERY_PARAM, separator: str = SweepConstants.QUERY_SEPARATOR) -> str:
        """Build the request URL, keeping the term separator unescaped."""
        encoded = urlencode({param: query}, safe=separator)
        return f"{base_url.rstrip('/')}/{path.lstrip('/')}?{encoded}"
