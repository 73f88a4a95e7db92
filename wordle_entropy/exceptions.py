"""Exceptions raised by the solver engine."""


class WordleEntropyError(Exception):
    """Base class for all solver errors."""


class CacheUnavailableError(WordleEntropyError, RuntimeError):
    """A job that needs the pattern cache was started without one."""


class CorruptCacheError(WordleEntropyError, ValueError):
    """A persisted cache file is truncated or malformed."""


class EmptyCorpusError(WordleEntropyError, ValueError):
    """A word list that must not be empty was empty."""


class InvalidWordListError(WordleEntropyError, ValueError):
    """A word-list file holds words that are not 5 letters a-z, or is not UTF-8."""


class InvalidGuessError(WordleEntropyError, ValueError):
    """A guess is empty, has the wrong length, or is not alphabetic."""


class SessionResolvedError(WordleEntropyError, RuntimeError):
    """Feedback was sent to a session that has already been won."""
