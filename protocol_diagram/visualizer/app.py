import logging

import plotly.graph_objects as go  # pyright: ignore[reportMissingTypeStubs]
from dash import Dash, Input, Output, dcc, html

from protocol_diagram.models import DiagramData
from protocol_diagram.visualizer.canvas import CANVASES, TIMELINE, get_canvas
from protocol_diagram.visualizer.figure_builder import render

logger = logging.getLogger(__name__)


class DashApp:
    def __init__(self, data: DiagramData, title: str = "Protocol diagram"):
        self.data: DiagramData = data
        self.app: Dash = Dash(__name__, title=title)
        self.app.layout = self._build_layout(title)
        self._register_callbacks()

    def _build_layout(self, title: str) -> html.Div:
        has_trips = bool(self.data.trips)
        return html.Div(
            [
                html.H3(title),
                html.Div(
                    [
                        html.Label("Canvas"),
                        dcc.Dropdown(
                            id="canvas",
                            options=[{"label": name, "value": name} for name in sorted(CANVASES)],
                            value=TIMELINE.name,
                            clearable=False,
                            style={"width": "200px"},
                        ),
                        dcc.Checklist(
                            id="trip-options",
                            options=[
                                {"label": "trips", "value": "show", "disabled": not has_trips},
                                {"label": "smooth", "value": "smooth", "disabled": not has_trips},
                            ],
                            value=["show", "smooth"] if has_trips else [],
                            inline=True,
                        ),
                    ],
                    style={"display": "flex", "gap": "16px", "alignItems": "center"},
                ),
                html.Div(
                    f"{len(self.data.places)} places, {len(self.data.check_ins)} check-ins, "
                    f"{len(self.data.trips)} trips",
                    id="summary",
                ),
                dcc.Graph(id="diagram", config={"scrollZoom": True}),
            ],
            style={"fontFamily": "Verdana"},
        )

    def update_figure(self, canvas_name: str, trip_options: list[str] | None) -> go.Figure:
        trip_options = trip_options or []
        canvas = get_canvas(canvas_name)
        logger.debug("Rendering %s canvas with trip options %s", canvas.name, trip_options)
        return render(
            self.data,
            canvas=canvas,
            show_trips="show" in trip_options,
            smooth_trips="smooth" in trip_options,
        )

    def _register_callbacks(self) -> None:
        _ = self.app.callback(
            Output("diagram", "figure"),
            Input("canvas", "value"),
            Input("trip-options", "value"),
        )(self.update_figure)

    def run(self, host: str = "127.0.0.1", port: int = 8050, debug: bool = False) -> None:
        logger.info("Serving diagram on http://%s:%d/", host, port)
        self.app.run(host=host, port=port, debug=debug)
