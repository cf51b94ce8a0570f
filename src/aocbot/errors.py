from __future__ import annotations


class AocBotError(Exception):
    """Base class for errors raised by aocbot."""


class ConfigError(AocBotError):
    """Required configuration is missing or invalid."""


class FetchError(AocBotError):
    """The leaderboard document could not be downloaded."""


class ParseError(AocBotError):
    """A leaderboard document is not well-formed or has the wrong shape."""


class NotifyError(AocBotError):
    """A notification could not be delivered to the webhook."""


class IncompleteCompletionError(AocBotError, LookupError):
    """A rank was requested for a completion that is not on record."""
