"""
Popover Controller

Turns raw selection events into lookups. Selections arrive in bursts while
the user drags; only the last one after a quiet period reaches the resolver.
Dismissing the popover drops any selection still waiting.
"""

from spanlens.core.config.constants import LookupSource, Stage
from spanlens.core.config.settings import get_settings
from spanlens.core.exceptions import InvalidInputError
from spanlens.core.logging import get_logger
from spanlens.lookup.models import Position
from spanlens.lookup.resolver import CascadingResolver
from spanlens.streaming.debounce import Debouncer

logger = get_logger(__name__)

DISMISS_KEY = "Escape"


class PopoverController:
    """
    Debounced front door to a CascadingResolver.

    Args:
        resolver: The resolver that owns the popover state
        debounce_seconds: Quiet period before a selection is looked up
    """

    def __init__(self, resolver: CascadingResolver, debounce_seconds: float | None = None):
        if debounce_seconds is None:
            debounce_seconds = get_settings().lookup.SELECTION_DEBOUNCE_SECONDS
        self.resolver = resolver
        self._debouncer = Debouncer(debounce_seconds, self._show)

    @property
    def pending(self) -> bool:
        """True while a selection is waiting out the quiet period."""
        return self._debouncer.pending

    @property
    def state(self):
        return self.resolver.state

    def select(self, span_text: str, context: str = "", position: Position | dict | None = None) -> None:
        """Record a selection; blank selections drop the pending one."""
        if not span_text or not span_text.strip():
            self._debouncer.cancel()
            return
        self._debouncer.trigger(span_text, context, position)

    def switch_tab(self, source: LookupSource | str) -> bool:
        return self.resolver.switch_tab(source)

    def dismiss(self) -> None:
        self._debouncer.cancel()
        self.resolver.hide()

    def key_pressed(self, key: str) -> None:
        if key == DISMISS_KEY and self.resolver.state.visible:
            self.dismiss()

    def _show(self, span_text: str, context: str, position) -> None:
        try:
            self.resolver.show(span_text, context, position)
        except InvalidInputError as e:
            logger.info("Selection ignored", stage=Stage.CASCADE.value, reason=e.message)
