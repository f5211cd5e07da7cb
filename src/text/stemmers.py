# src/text/stemmers.py — v1
"""Tokenizer/stemmer registry backed by nltk.

A stemmer turns free text into a sequence of normalized stems:
lowercase, split on word characters, drop stop words, stem each token.
Names resolve as follows:

- ``porter`` (default): nltk PorterStemmer
- ``lancaster``: nltk LancasterStemmer
- ``snowball:<language>``: nltk SnowballStemmer, e.g. ``snowball:portuguese``

Every stemmer drops its language's stop words unless ``stop_words`` is
given explicitly (an empty list disables removal). English uses the
bundled ``ENGLISH_STOP_WORDS``; other snowball languages read nltk's
``stopwords`` corpus when it has been downloaded.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Callable, Iterable
from typing import Union

from nltk.stem import LancasterStemmer, PorterStemmer, SnowballStemmer
from nltk.stem.api import StemmerI
from nltk.tokenize import RegexpTokenizer

logger = logging.getLogger(__name__)

TokenizeAndStem = Callable[[str], list[str]]
StemmerSpec = Union[str, TokenizeAndStem]

DEFAULT_STEMMER = "porter"
_SNOWBALL_PREFIX = "snowball:"

ENGLISH_STOP_WORDS: frozenset[str] = frozenset(
    """
    about above after again all also am an and another any are as at be
    because been before being below between both but by came can cannot come
    could did do does doing during each few for from further get got has had
    he have her here him himself his how if in into is it its itself like
    make many me might more most much must my myself never now of on only or
    other our ours ourselves out over own said same see should since so some
    still such take than that the their theirs them themselves then there
    these they this those through to too under until up very was way we well
    were what where when which while who whom with would why you your yours
    yourself yourselves
    """.split()
) | frozenset(string.ascii_lowercase) | frozenset(string.digits) | {"_"}


class UnknownStemmerError(ValueError):
    """Raised when a stemmer name is not registered."""


class Stemmer:
    """Tokenize and stem text with an nltk stemmer."""

    def __init__(
        self,
        name: str,
        stemmer: StemmerI,
        stop_words: Iterable[str] = (),
    ) -> None:
        self.name = name
        self._stemmer = stemmer
        self._tokenizer = RegexpTokenizer(r"\w+")
        self.stop_words = frozenset(w.lower() for w in stop_words)

    def tokenize(self, text: str) -> list[str]:
        """Lowercased word tokens with stop words removed."""
        return [
            token
            for token in self._tokenizer.tokenize(text.lower())
            if token not in self.stop_words
        ]

    def tokenize_and_stem(self, text: str) -> list[str]:
        """Stems of every token, in text order (duplicates kept)."""
        return [self._stemmer.stem(token) for token in self.tokenize(text)]

    def __call__(self, text: str) -> list[str]:
        return self.tokenize_and_stem(text)

    def __repr__(self) -> str:
        return f"Stemmer({self.name!r})"


def default_stop_words(language: str = "english") -> frozenset[str]:
    """Stop words removed by default for ``language``.

    Non-English lists come from nltk's ``stopwords`` corpus; without it the
    set is empty and a warning is logged.
    """
    if language == "english":
        return ENGLISH_STOP_WORDS
    from nltk.corpus import stopwords

    try:
        return frozenset(stopwords.words(language))
    except (LookupError, OSError):
        logger.warning(
            "No nltk stopwords corpus for %s; stop words are kept. "
            "Run nltk.download('stopwords') to enable removal.", language,
        )
        return frozenset()


def get_stemmer(
    name: str = DEFAULT_STEMMER, stop_words: Iterable[str] | None = None
) -> Stemmer:
    """Resolve a stemmer by name.

    ``stop_words=None`` selects the language default; any iterable replaces it.

    Raises:
        UnknownStemmerError: If the name or snowball language is unknown.
    """
    key = name.strip().lower()
    if key == "porter":
        stemmer: StemmerI = PorterStemmer()
        language = "english"
    elif key == "lancaster":
        stemmer = LancasterStemmer()
        language = "english"
    elif key.startswith(_SNOWBALL_PREFIX):
        language = key[len(_SNOWBALL_PREFIX):]
        if language not in SnowballStemmer.languages:
            raise UnknownStemmerError(
                f"Unsupported snowball language: {language!r}. "
                f"Available: {', '.join(SnowballStemmer.languages)}"
            )
        stemmer = SnowballStemmer(language)
    else:
        raise UnknownStemmerError(
            f"Unknown stemmer: {name!r}. "
            f"Available: porter, lancaster, snowball:<language>"
        )
    if stop_words is None:
        stop_words = default_stop_words(language)
    return Stemmer(key, stemmer, stop_words)


def resolve_stemmer(
    spec: StemmerSpec, stop_words: Iterable[str] | None = None
) -> TokenizeAndStem:
    """Accept either a registered name or a ready tokenize-and-stem callable."""
    if callable(spec):
        return spec
    return get_stemmer(spec, stop_words)
