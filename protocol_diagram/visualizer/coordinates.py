"""Mapping of place names and times to diagram coordinates.

Both maps are built during one rendering pass and thrown away afterwards.
"""

import math

DEFAULT_PLACES = {
    "client": 0.0,
    "line": 300.0,
    "server": 600.0,
}


class PlaceSlots:
    """Horizontal offset per place name.

    Well-known places are pre-seeded; any other name is given the next slot,
    `spacing * number_of_known_places`, the first time it is seen.
    """

    def __init__(self, spacing: float = 300, seed: dict[str, float] | None = None):
        self.spacing: float = spacing
        self.slots: dict[str, float] = dict(DEFAULT_PLACES if seed is None else seed)

    def __call__(self, name: str) -> float:
        x = self.slots.get(name)
        if x is None:
            x = self.spacing * len(self.slots)
            # a custom seed may already occupy this multiple
            while x in self.slots.values():
                x += self.spacing
            self.slots[name] = x
        return x


class TimeSlots:
    """Vertical offset per time value on a logarithmic axis.

    Each newly seen time is placed `log(t - previous_t) * scale` below the
    previously seen one, so offsets follow first-seen order rather than
    numeric order. Repeated times return their memoized offset. The step is
    never smaller than `min_gap`, which also covers zero and negative gaps.
    """

    def __init__(self, scale: float = 3, min_gap: float = 1):
        self.scale: float = scale
        self.min_gap: float = min_gap
        self.slots: dict[float, float] = {}
        self.last_t: float = 0
        self.last_y: float = 0

    def __call__(self, t: float) -> float:
        y = self.slots.get(t)
        if y is None:
            gap = t - self.last_t
            dy = math.log(gap) * self.scale if gap > 0 else self.min_gap
            y = self.last_y + max(dy, self.min_gap)
            self.slots[t] = y
            self.last_t = t
            self.last_y = y
        return y

    def scan(self, times: list[float]) -> None:
        for t in times:
            _ = self(t)
