from .interactions import (
    AutocompleteResponder,
    InteractionResponder,
    autocomplete_from,
    invocation_from,
    split_options,
)
from .transport import DiscordCommandTransport, attach

__all__ = [
    "AutocompleteResponder",
    "DiscordCommandTransport",
    "InteractionResponder",
    "attach",
    "autocomplete_from",
    "invocation_from",
    "split_options",
]
