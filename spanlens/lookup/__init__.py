"""
Lookup Module

Span explanations: the popover data model, the dictionary / encyclopedia /
assistant sources, the cascading resolver and the debounced controller.
"""

from .controller import PopoverController
from .models import (
    DictionaryEntry,
    EncyclopediaSummary,
    LookupRequest,
    PopoverState,
    Position,
    SourceState,
)
from .resolver import CascadingResolver, initial_source

__all__ = [
    "CascadingResolver",
    "PopoverController",
    "initial_source",
    "LookupRequest",
    "Position",
    "SourceState",
    "PopoverState",
    "DictionaryEntry",
    "EncyclopediaSummary",
]
