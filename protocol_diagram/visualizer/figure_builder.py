import logging
from dataclasses import dataclass, field

import plotly.graph_objects as go  # pyright: ignore[reportMissingTypeStubs]

from protocol_diagram.models import CheckIn, DiagramData, Interval
from protocol_diagram.visualizer import style
from protocol_diagram.visualizer.canvas import TIMELINE, CanvasConfig
from protocol_diagram.visualizer.coordinates import PlaceSlots, TimeSlots

logger = logging.getLogger(__name__)


def format_seconds(t_ns: float) -> str:
    return f"{t_ns / 1e9:.9f}".rstrip("0").rstrip(".")


@dataclass
class Band:
    place: str
    interval: Interval
    x: float
    y0: float
    y1: float
    color: str
    opacity: float = style.BAND_OPACITY


@dataclass
class Label:
    text: str
    dx: float
    dy: float
    anchor: str
    color: str
    size: int


@dataclass
class Marker:
    check_in: CheckIn
    x: float
    y: float
    labels: list[Label] = field(default_factory=list)


@dataclass
class TripLine:
    points: list[tuple[float, float]]


@dataclass
class Diagram:
    bands: list[Band]
    trips: list[TripLine]
    markers: list[Marker]
    places: dict[str, float]


def _label(text: str, placement: tuple[int, int, str, str, int]) -> Label:
    dx, dy, anchor, color, size = placement
    return Label(text=text, dx=dx, dy=dy, anchor=anchor, color=color, size=size)


class DiagramLayout:
    """Places every band, trip and check-in of a dataset in diagram coordinates.

    Coordinates are relative to the diagram origin: x grows with the place
    slot, y grows downwards with time. Each call to build() starts from
    fresh place and time maps.
    """

    def __init__(self, canvas: CanvasConfig = TIMELINE):
        self.canvas: CanvasConfig = canvas

    def build(self, data: DiagramData, show_trips: bool = True) -> Diagram:
        x_of = PlaceSlots(spacing=self.canvas.place_spacing)
        y_of = TimeSlots(scale=self.canvas.time_scale, min_gap=self.canvas.min_time_gap)

        # check-in order fixes the vertical order of the whole diagram
        y_of.scan([c.time for c in data.check_ins])

        bands = [
            self._band(place.name, iv, x_of, y_of)
            for place in data.places
            for iv in place.intervals
        ]

        trips: list[TripLine] = []
        if show_trips:
            for trip in data.trips:
                if len(trip.path) < 2:
                    continue
                trips.append(TripLine(points=[(x_of(p.place), y_of(p.time)) for p in trip.path]))

        markers = [self._marker(c, x_of, y_of) for c in data.check_ins]

        logger.debug(
            "Laid out %d bands, %d trips, %d markers over %d places",
            len(bands), len(trips), len(markers), len(x_of.slots),
        )
        return Diagram(bands=bands, trips=trips, markers=markers, places=dict(x_of.slots))

    @staticmethod
    def _band(place: str, iv: Interval, x_of: PlaceSlots, y_of: TimeSlots) -> Band:
        y0 = y_of(iv.start)
        y1 = y_of(iv.end)
        return Band(place=place, interval=iv, x=x_of(place), y0=y0, y1=y1, color=iv.get_color())

    @staticmethod
    def _marker(c: CheckIn, x_of: PlaceSlots, y_of: TimeSlots) -> Marker:
        return Marker(
            check_in=c,
            x=x_of(c.place),
            y=y_of(c.time),
            labels=[
                _label(format_seconds(c.time), style.TIME_LABEL),
                _label(f"{c.sub}/{c.type}: {c.comment}", style.MESSAGE_LABEL),
                _label(f"SeqNo: {c.seqno}, AckNo:{c.ackno}", style.SEQACK_LABEL),
            ],
        )


class DiagramFigureBuilder:
    def __init__(self, canvas: CanvasConfig = TIMELINE, smooth_trips: bool = True):
        self.canvas: CanvasConfig = canvas
        self.smooth_trips: bool = smooth_trips

    def build(self, diagram: Diagram) -> go.Figure:
        fig = go.Figure()
        self._add_bands(fig, diagram.bands)
        self._add_trips(fig, diagram.trips)
        self._add_markers(fig, diagram.markers)
        self._configure_layout(fig)
        return fig

    def _x(self, x: float) -> float:
        return self.canvas.origin_x + x

    def _y(self, y: float) -> float:
        return self.canvas.origin_y + y

    def _add_bands(self, fig: go.Figure, bands: list[Band]) -> None:
        for b in bands:
            x0 = self._x(b.x + style.BAND_OFFSET)
            _ = fig.add_shape(  # pyright: ignore[reportUnknownMemberType]
                type="rect",
                x0=x0,
                x1=x0 + style.BAND_WIDTH,
                y0=self._y(b.y0),
                y1=self._y(b.y1),
                fillcolor=b.color,
                opacity=b.opacity,
                line_width=0,
                layer="below",
            )

        bands_by_state: dict[str, list[Band]] = {}
        for b in bands:
            bands_by_state.setdefault(b.interval.state, []).append(b)

        # invisible points at band centres carry the hover text
        for state in sorted(bands_by_state.keys()):
            state_bands = bands_by_state[state]
            fig = fig.add_trace(  # pyright: ignore[reportUnknownMemberType]
                go.Scatter(
                    x=[self._x(b.x) for b in state_bands],
                    y=[self._y((b.y0 + b.y1) / 2) for b in state_bands],
                    mode="markers",
                    marker=dict(size=style.BAND_WIDTH, opacity=0),
                    name=state,
                    showlegend=False,
                    customdata=[
                        [b.place, format_seconds(b.interval.start), format_seconds(b.interval.end)]
                        for b in state_bands
                    ],
                    hovertemplate=f"place=%{{customdata[0]}}<br>state={state}<br>start=%{{customdata[1]}}s<br>end=%{{customdata[2]}}s<extra></extra>",
                )
            )

    def _add_trips(self, fig: go.Figure, trips: list[TripLine]) -> None:
        if not trips:
            return
        xs: list[float | None] = []
        ys: list[float | None] = []
        for trip in trips:
            xs.extend(self._x(x) for x, _ in trip.points)
            ys.extend(self._y(y) for _, y in trip.points)
            xs.append(None)
            ys.append(None)

        fig = fig.add_trace(  # pyright: ignore[reportUnknownMemberType]
            go.Scatter(
                x=xs,
                y=ys,
                mode="lines",
                line=dict(
                    color=style.TRIP_COLOR,
                    width=style.TRIP_WIDTH,
                    shape="spline" if self.smooth_trips else "linear",
                ),
                connectgaps=False,
                name="trips",
                showlegend=False,
                hoverinfo="skip",
            )
        )

    def _add_markers(self, fig: go.Figure, markers: list[Marker]) -> None:
        if not markers:
            return
        fig = fig.add_trace(  # pyright: ignore[reportUnknownMemberType]
            go.Scatter(
                x=[self._x(m.x) for m in markers],
                y=[self._y(m.y) for m in markers],
                mode="markers",
                marker=dict(
                    size=2 * style.MARKER_RADIUS,
                    color=style.MARKER_FILL,
                    line=dict(color=style.MARKER_STROKE, width=style.MARKER_STROKE_WIDTH),
                ),
                name="check_ins",
                showlegend=False,
                customdata=[
                    [
                        m.check_in.place,
                        format_seconds(m.check_in.time),
                        m.check_in.state or "-",
                        m.check_in.seqno,
                        m.check_in.ackno,
                    ]
                    for m in markers
                ],
                hovertemplate="place=%{customdata[0]}<br>t=%{customdata[1]}s<br>state=%{customdata[2]}<br>seqno=%{customdata[3]} ackno=%{customdata[4]}<extra></extra>",
            )
        )

        for i in range(len(markers[0].labels)):
            first = markers[0].labels[i]
            fig = fig.add_trace(  # pyright: ignore[reportUnknownMemberType]
                go.Scatter(
                    x=[self._x(m.x + m.labels[i].dx) for m in markers],
                    y=[self._y(m.y + m.labels[i].dy) for m in markers],
                    mode="text",
                    text=[m.labels[i].text for m in markers],
                    textposition="middle left" if first.anchor == "right" else "middle right",
                    textfont=dict(family=style.FONT_FAMILY, size=first.size, color=first.color),
                    showlegend=False,
                    hoverinfo="skip",
                )
            )

    def _configure_layout(self, fig: go.Figure) -> None:
        _ = fig.update_layout(  # pyright: ignore[reportUnknownMemberType]
            width=self.canvas.width,
            height=self.canvas.height,
            margin=dict(l=0, r=0, t=0, b=0),
            plot_bgcolor="#fff",
            paper_bgcolor="#fff",
            showlegend=False,
            hovermode="closest",
            xaxis=dict(range=[0, self.canvas.width], visible=False),
            # SVG convention: y grows downwards
            yaxis=dict(range=[self.canvas.height, 0], visible=False),
            dragmode="pan",
        )


def render(
    data: DiagramData,
    canvas: CanvasConfig = TIMELINE,
    show_trips: bool = True,
    smooth_trips: bool = True,
) -> go.Figure:
    diagram = DiagramLayout(canvas).build(data, show_trips=show_trips)
    return DiagramFigureBuilder(canvas, smooth_trips=smooth_trips).build(diagram)
