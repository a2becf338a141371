"""
Zone trigger timing.

Decides, once per display tick, whether the zone under the scanner should
fire its role. A change of zone fires after a short cooldown; dwelling in
the same zone re-fires at a slower repeat interval.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from pintura_sonora.config import TriggerConfig
from pintura_sonora.mapping.painting_pack import Zone, ZoneRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerState:
    """
    Last fired zone and fire time.
    """

    last_zone_id: Optional[str] = None
    "Zone of the most recent fire, None when the scanner left every zone."
    last_fire_ms: Optional[float] = None
    "Time of the most recent fire, None if nothing fired yet."


def decide_trigger(state: TriggerState, zone: Optional[Zone], now_ms: float,
                   cooldown_ms: float = TriggerConfig.COOLDOWN_MS,
                   repeat_ms: float = TriggerConfig.REPEAT_MS) -> Tuple[TriggerState, Optional[ZoneRole]]:
    """
    Compute the next trigger state and the role to fire, if any.

    With no zone the last zone is forgotten (the fire time is kept), so
    re-entering a zone only waits for the cooldown instead of the repeat interval.
    """
    if zone is None:
        if state.last_zone_id is None:
            return state, None
        return TriggerState(None, state.last_fire_ms), None

    elapsed = None if state.last_fire_ms is None else now_ms - state.last_fire_ms

    if zone.id != state.last_zone_id:
        fire = elapsed is None or elapsed >= cooldown_ms
    else:
        fire = elapsed is None or elapsed >= repeat_ms

    if not fire:
        return state, None
    return TriggerState(zone.id, now_ms), zone.role


class TriggerController:
    """
    Stateful wrapper around `decide_trigger` that dispatches fired roles to a callback.
    """

    def __init__(self, on_trigger: Optional[Callable[[ZoneRole], None]] = None,
                 cooldown_ms: float = TriggerConfig.COOLDOWN_MS,
                 repeat_ms: float = TriggerConfig.REPEAT_MS) -> None:
        """
        Initialize the controller.

        Args:
            on_trigger (callable): Called with the role of every fired zone
            cooldown_ms (float): Minimum time before a different zone fires
            repeat_ms (float): Re-fire interval while staying in one zone
        """
        self.on_trigger = on_trigger
        self.cooldown_ms = cooldown_ms
        self.repeat_ms = repeat_ms
        self._state = TriggerState()

    @property
    def state(self) -> TriggerState:
        return self._state

    def reset(self) -> None:
        self._state = TriggerState()

    def update(self, zone: Optional[Zone], now_ms: float) -> Optional[ZoneRole]:
        """
        Feed the zone under the scanner (None when unlocked or outside every zone).

        Returns:
            ZoneRole or None: The fired role, if any
        """
        self._state, role = decide_trigger(self._state, zone, now_ms, self.cooldown_ms, self.repeat_ms)
        if role is None:
            return None

        logger.debug(f"Zone {zone.id} fired ({role.value})")
        if self.on_trigger is not None:
            self.on_trigger(role)
        return role
