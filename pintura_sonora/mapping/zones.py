from typing import Optional, Sequence

from pintura_sonora.mapping.painting_pack import Zone


def find_zone(zones: Sequence[Zone], x: float, y: float) -> Optional[Zone]:
    """
    Return the first zone containing the reference-normalized point (x, y), or None.

    Zones may overlap: the first one in list order wins, so the result is
    deterministic but depends on the order of `zones`.
    """
    for zone in zones:
        if zone.contains(x, y):
            return zone
    return None
