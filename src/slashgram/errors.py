"""Configuration and runtime error taxonomy.

Configuration errors surface synchronously while commands are being
declared and are fatal to startup. Runtime errors are raised while an
invocation is being dispatched and never leave the router.
"""

from __future__ import annotations


class ConfigError(RuntimeError):
    pass


class GrammarError(ConfigError):
    def __init__(self, message: str, syntax: str) -> None:
        super().__init__(
            f"{message}\nFailed to parse the following argument syntax:\n\n\t{syntax}"
        )
        self.syntax = syntax


class MissingValueError(ConfigError):
    pass


class BadTypeError(ConfigError):
    pass


class DuplicateError(ConfigError):
    pass


class ExclusiveError(ConfigError):
    pass


class RangeError(ConfigError):
    pass


class PredicateError(ConfigError):
    pass


class NameFormatError(ConfigError):
    pass


class NotDeclaredError(ConfigError):
    pass


class UnknownTypeError(ConfigError):
    pass


class SealedError(ConfigError):
    pass


class AutocompleteResultError(RuntimeError):
    pass
