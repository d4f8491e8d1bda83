from dataclasses import dataclass


@dataclass(frozen=True)
class CanvasConfig:
    name: str
    width: int
    height: int
    origin_x: float
    origin_y: float
    place_spacing: float = 300
    time_scale: float = 3
    min_time_gap: float = 1


TIMELINE = CanvasConfig(name="timeline", width=1200, height=20000, origin_x=200, origin_y=100)
COMPACT = CanvasConfig(name="compact", width=700, height=700, origin_x=20, origin_y=20)

CANVASES: dict[str, CanvasConfig] = {c.name: c for c in (TIMELINE, COMPACT)}


def get_canvas(name: str) -> CanvasConfig:
    try:
        return CANVASES[name]
    except KeyError:
        raise ValueError(
            f"unknown canvas '{name}', expected one of: {', '.join(sorted(CANVASES))}"
        ) from None
