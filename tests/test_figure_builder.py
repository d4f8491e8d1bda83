import pytest

from protocol_diagram.models import CheckIn, DiagramData, Interval, Place, Trip, TripPoint
from protocol_diagram.visualizer.canvas import COMPACT, TIMELINE
from protocol_diagram.visualizer.coordinates import TimeSlots
from protocol_diagram.visualizer.figure_builder import DiagramLayout, format_seconds, render


def _client_server(intervals: list[Interval] | None = None, trips: list[Trip] | None = None) -> DiagramData:
    return DiagramData(
        places=[Place(name="client", intervals=intervals or []), Place(name="server")],
        check_ins=[
            CheckIn(place="client", time=1_000_000_000, sub="conn", type="Write",
                    comment="Request", seqno=3, ackno=4),
            CheckIn(place="server", time=2_000_000_000, sub="conn", type="Read",
                    comment="Request", seqno=3, ackno=4),
        ],
        trips=trips or [],
    )


def _trace(fig, name):
    return next(t for t in fig.data if t.name == name)


def test_markers_at_place_and_time():
    diagram = DiagramLayout().build(_client_server())
    client, server = diagram.markers
    assert client.x == 0
    assert server.x == 600
    assert server.y > client.y


def test_marker_labels():
    diagram = DiagramLayout().build(_client_server())
    texts = [label.text for label in diagram.markers[0].labels]
    assert texts == ["1", "conn/Write: Request", "SeqNo: 3, AckNo:4"]


def test_format_seconds():
    assert format_seconds(0) == "0"
    assert format_seconds(1_500_000_000) == "1.5"
    assert format_seconds(10_000_000_000) == "10"
    assert format_seconds(1_000_000_001) == "1.000000001"


def test_open_band():
    data = _client_server(intervals=[Interval(state="OPEN", start=0, end=1_000_000_000)])
    expected = TimeSlots()
    expected.scan([1_000_000_000, 2_000_000_000])

    band = DiagramLayout().build(data).bands[0]
    assert band.x == 0
    assert band.color == "#080"
    assert band.opacity == 0.3
    assert band.y0 == pytest.approx(expected(0))
    assert band.y1 == pytest.approx(expected(1_000_000_000))

    shape = render(data).layout.shapes[0]
    assert shape.type == "rect"
    assert shape.fillcolor == "#080"
    assert shape.opacity == 0.3
    assert shape.y0 == pytest.approx(TIMELINE.origin_y + band.y0)
    assert shape.y1 == pytest.approx(TIMELINE.origin_y + band.y1)
    assert shape.x0 == pytest.approx(TIMELINE.origin_x - 3)
    assert shape.x1 == pytest.approx(TIMELINE.origin_x + 4)


def test_unknown_state_band_uses_fallback():
    data = _client_server(intervals=[Interval(state="FOO", start=0, end=1_000_000_000)])
    assert DiagramLayout().build(data).bands[0].color == "#ccc"
    assert render(data).layout.shapes[0].fillcolor == "#ccc"


def test_check_ins_fix_vertical_order():
    # interval times are first seen after every check-in, so they land below them
    data = _client_server(intervals=[Interval(state="OPEN", start=5_000_000_000, end=6_000_000_000)])
    diagram = DiagramLayout().build(data)
    band = diagram.bands[0]
    assert band.y0 > diagram.markers[1].y
    assert band.y1 > band.y0


def test_marker_trace_translated_by_origin():
    fig = render(_client_server(), canvas=COMPACT)
    markers = _trace(fig, "check_ins")
    assert list(markers.x) == [COMPACT.origin_x, COMPACT.origin_x + 600]
    assert markers.marker.size == 14
    assert markers.marker.color == "#000"
    assert markers.marker.line.color == "#bbb"


def test_trips_drawn_below_markers():
    trip = Trip(path=[TripPoint(place="client", time=1_000_000_000),
                      TripPoint(place="relay", time=1_500_000_000),
                      TripPoint(place="server", time=2_000_000_000)])
    data = _client_server(trips=[trip])

    diagram = DiagramLayout().build(data)
    assert [x for x, _ in diagram.trips[0].points] == [0, 900, 600]

    fig = render(data)
    names = [t.name for t in fig.data]
    assert names.index("trips") < names.index("check_ins")
    trips = _trace(fig, "trips")
    assert trips.line.shape == "spline"
    assert list(trips.x) == [200, 1100, 800, None]


def test_trips_optional():
    trip = Trip(path=[TripPoint(place="client", time=1_000_000_000),
                      TripPoint(place="server", time=2_000_000_000)])
    data = _client_server(trips=[trip])

    assert "trips" not in [t.name for t in render(data, show_trips=False).data]
    assert _trace(render(data, smooth_trips=False), "trips").line.shape == "linear"


def test_single_point_trip_skipped():
    data = _client_server(trips=[Trip(path=[TripPoint(place="client", time=1)])])
    assert DiagramLayout().build(data).trips == []


def test_canvas_size():
    fig = render(_client_server())
    assert fig.layout.width == 1200
    assert fig.layout.height == 20000
    assert tuple(fig.layout.yaxis.range) == (20000, 0)

    fig = render(_client_server(), canvas=COMPACT)
    assert fig.layout.width == 700
    assert fig.layout.height == 700


def test_empty_dataset():
    fig = render(DiagramData(places=[], check_ins=[]))
    assert len(fig.data) == 0
    assert fig.layout.width == 1200


def test_each_build_starts_fresh():
    layout = DiagramLayout()
    data = DiagramData(places=[Place(name="relay")],
                       check_ins=[CheckIn(place="relay", time=10)])
    first = layout.build(data)
    second = layout.build(data)
    assert first.markers[0].x == second.markers[0].x == 900
    assert first.markers[0].y == second.markers[0].y
