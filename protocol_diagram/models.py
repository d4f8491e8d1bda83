from dataclasses import dataclass, field


@dataclass
class Interval:
    state: str
    start: float
    end: float

    def get_color(self) -> str:
        from protocol_diagram.visualizer.style import color_of_state

        return color_of_state(self.state)


@dataclass
class Place:
    name: str
    intervals: list[Interval] = field(default_factory=list)


@dataclass
class CheckIn:
    place: str
    time: float
    sub: str = ""
    type: str = ""
    comment: str = ""
    seqno: int = 0
    ackno: int = 0
    state: str | None = None

    @property
    def seconds(self) -> float:
        return self.time / 1e9


@dataclass
class TripPoint:
    place: str
    time: float


@dataclass
class Trip:
    path: list[TripPoint]


@dataclass
class DiagramData:
    places: list[Place]
    check_ins: list[CheckIn]
    trips: list[Trip] = field(default_factory=list)
