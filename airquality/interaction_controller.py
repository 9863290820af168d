"""
Interaction controller module for the Air Quality Map.

This module contains the InteractionController class which owns the
selection/popup state of a map session. Overlay clicks arrive as explicit
events carrying the clicked OverlayPoint, so a handler never depends on a
per-render closure that may be stale after the overlay set is rebuilt.
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from .overlay_point import OverlayPoint
from .quality_band import QualityBand


@dataclass
class InteractionState:
    """
    Selection state consumed by the detail popup.

    Attributes:
        selected_band: Band of the most recently clicked overlay point
        popup_open: Whether the detail popup is showing
    """

    selected_band: QualityBand = QualityBand.MODERATE
    popup_open: bool = False


@dataclass(frozen=True)
class OverlayClickEvent:
    point: OverlayPoint


StateListener = Callable[[InteractionState], None]


class InteractionController:
    """
    Two-field state machine driven by overlay clicks and popup closes.

    Transitions are synchronous and total. The state object is owned by the
    controller and may be shared by reference with the consumer that created
    it; listeners receive a snapshot after every transition.
    """

    def __init__(self, state: Optional[InteractionState] = None) -> None:
        self._state = state if state is not None else InteractionState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> InteractionState:
        """Read-only copy of the current state."""
        return self.snapshot()

    def snapshot(self) -> InteractionState:
        return replace(self._state)

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def on_overlay_click(self, event: Union[OverlayClickEvent, OverlayPoint]) -> InteractionState:
        """
        Selects the clicked point's band and opens the popup.

        Args:
            event: Click event, or the clicked OverlayPoint itself

        Returns:
            Snapshot of the new state
        """
        point = event.point if isinstance(event, OverlayClickEvent) else event
        self._state.selected_band = point.band
        self._state.popup_open = True
        return self._notify()

    def on_popup_close(self) -> InteractionState:
        """Closes the popup. The selected band is kept."""
        self._state.popup_open = False
        return self._notify()

    def _notify(self) -> InteractionState:
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)
        return snapshot
