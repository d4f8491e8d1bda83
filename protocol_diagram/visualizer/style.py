STATE_COLORS = {
    "LISTEN": "#0ff",
    "REQUEST": "#f0f",
    "RESPOND": "#ff0",
    "PARTOPEN": "#0f0",
    "OPEN": "#080",
    "CLOSEREQ": "#f00",
    "CLOSING": "#800",
    "CLOSED": "#400",
    "TIMEWAIT": "#f8f",
}

FALLBACK_COLOR = "#ccc"

BAND_OPACITY = 0.3
BAND_OFFSET = -3
BAND_WIDTH = 7

MARKER_RADIUS = 7
MARKER_FILL = "#000"
MARKER_STROKE = "#bbb"
MARKER_STROKE_WIDTH = 2

TRIP_COLOR = "#c88"
TRIP_WIDTH = 1.5

FONT_FAMILY = "Verdana"

# (dx, dy, anchor, color, size) relative to the marker centre, y pointing down
TIME_LABEL = (-12, 4, "right", "#444", 10)
MESSAGE_LABEL = (12, -4, "left", "#bbb", 12)
SEQACK_LABEL = (12, 11, "left", "#c55", 12)


def color_of_state(state: str) -> str:
    return STATE_COLORS.get(state, FALLBACK_COLOR)
