from protocol_diagram.visualizer.app import DashApp
from protocol_diagram.visualizer.figure_builder import render

__all__ = ["DashApp", "render"]
