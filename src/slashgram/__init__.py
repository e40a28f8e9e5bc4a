"""Declarative slash commands compiled from a compact argument grammar."""

from .builder import CommandBuilder, command
from .errors import (
    AutocompleteResultError,
    BadTypeError,
    ConfigError,
    DuplicateError,
    ExclusiveError,
    GrammarError,
    MissingValueError,
    NameFormatError,
    NotDeclaredError,
    PredicateError,
    RangeError,
    SealedError,
    UnknownTypeError,
)
from .events import AutocompleteRequest, CommandInvocation, Suggestion
from .model import DEFAULT, ROOT, ArgumentSpec, CommandPath, CommandSpec
from .registry import CommandRegistry, RegistryState, Scope, default_registry
from .router import CommandRouter, DispatchOutcome, arguments_of
from .settings import SlashgramSettings, load_settings
from .types import ArgType

__version__ = "0.1.0"

__all__ = [
    "DEFAULT",
    "ROOT",
    "ArgType",
    "ArgumentSpec",
    "AutocompleteRequest",
    "AutocompleteResultError",
    "BadTypeError",
    "CommandBuilder",
    "CommandInvocation",
    "CommandPath",
    "CommandRegistry",
    "CommandRouter",
    "CommandSpec",
    "ConfigError",
    "DispatchOutcome",
    "DuplicateError",
    "ExclusiveError",
    "GrammarError",
    "MissingValueError",
    "NameFormatError",
    "NotDeclaredError",
    "PredicateError",
    "RangeError",
    "RegistryState",
    "Scope",
    "SealedError",
    "SlashgramSettings",
    "Suggestion",
    "UnknownTypeError",
    "__version__",
    "arguments_of",
    "command",
    "default_registry",
    "load_settings",
]
