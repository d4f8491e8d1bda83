import json
import logging
import math
import re
from pathlib import Path
from typing import Any, final, override

from protocol_diagram.errors import DatasetError
from protocol_diagram.models import CheckIn, DiagramData, Interval, Place, Trip, TripPoint
from protocol_diagram.parser.parser_base import Parser

logger = logging.getLogger(__name__)

# The exporter writes the dataset as a script assignment: `data = {...};`
JS_ASSIGNMENT = re.compile(r"^\s*(?:var\s+)?data\s*=\s*(.*?);?\s*$", re.DOTALL)


def _require(obj: dict[str, Any], key: str, path: str) -> Any:
    if key not in obj:
        raise DatasetError(path, f"missing required field '{key}'")
    return obj[key]


def _as_object(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DatasetError(path, "expected an object")
    return value


def _as_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise DatasetError(path, "expected a list")
    return value


def _as_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise DatasetError(path, "expected a string")
    return value


def _as_time(value: Any, path: str) -> float:
    # bool is an int subclass; json.loads turns NaN, Infinity and 1e400 into non-finite floats
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value < 0
    ):
        raise DatasetError(path, "expected a finite non-negative number")
    return value


def _as_int(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DatasetError(path, "expected an integer")
    return value


@final
class ParserJson(Parser):
    """Reads a diagram dataset from a JSON document.

    Accepts either a plain JSON object or the exporter's script form
    (`data = {...};`). Every record is validated; the first problem found is
    raised as a DatasetError naming the offending field.
    """

    def __init__(self, path: Path | None = None, text: str | None = None):
        if (path is None) == (text is None):
            raise ValueError("exactly one of path or text must be given")
        self.path = path
        self.text = text

    def _read(self) -> str:
        if self.text is not None:
            return self.text
        assert self.path is not None
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DatasetError(str(self.path), f"cannot read dataset ({exc.strerror})") from exc
        except UnicodeDecodeError as exc:
            raise DatasetError(
                str(self.path), f"not valid UTF-8 (byte {exc.start}: {exc.reason})"
            ) from exc

    @staticmethod
    def _decode(text: str) -> Any:
        match = JS_ASSIGNMENT.match(text)
        if match:
            text = match.group(1)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DatasetError("", f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}") from exc

    @staticmethod
    def _parse_interval(raw: Any, path: str) -> Interval:
        obj = _as_object(raw, path)
        return Interval(
            state=_as_str(_require(obj, "state", path), f"{path}.state"),
            start=_as_time(_require(obj, "start", path), f"{path}.start"),
            end=_as_time(_require(obj, "end", path), f"{path}.end"),
        )

    def _parse_place(self, raw: Any, path: str) -> Place:
        obj = _as_object(raw, path)
        name = _as_str(_require(obj, "name", path), f"{path}.name")
        intervals = _as_list(obj.get("intervals", []), f"{path}.intervals")
        return Place(
            name=name,
            intervals=[
                self._parse_interval(iv, f"{path}.intervals[{i}]")
                for i, iv in enumerate(intervals)
            ],
        )

    @staticmethod
    def _parse_check_in(raw: Any, path: str) -> CheckIn:
        obj = _as_object(raw, path)
        state = obj.get("state")
        return CheckIn(
            place=_as_str(_require(obj, "place", path), f"{path}.place"),
            time=_as_time(_require(obj, "time", path), f"{path}.time"),
            sub=_as_str(obj.get("sub", ""), f"{path}.sub"),
            type=_as_str(obj.get("type", ""), f"{path}.type"),
            comment=_as_str(obj.get("comment", ""), f"{path}.comment"),
            seqno=_as_int(obj.get("seqno", 0), f"{path}.seqno"),
            ackno=_as_int(obj.get("ackno", 0), f"{path}.ackno"),
            state=None if state is None else _as_str(state, f"{path}.state"),
        )

    @staticmethod
    def _parse_trip(raw: Any, path: str) -> Trip:
        obj = _as_object(raw, path)
        points = _as_list(_require(obj, "path", path), f"{path}.path")
        result: list[TripPoint] = []
        for i, p in enumerate(points):
            point_path = f"{path}.path[{i}]"
            point = _as_object(p, point_path)
            result.append(
                TripPoint(
                    place=_as_str(_require(point, "place", point_path), f"{point_path}.place"),
                    time=_as_time(_require(point, "time", point_path), f"{point_path}.time"),
                )
            )
        return Trip(path=result)

    def parse_document(self, doc: Any) -> DiagramData:
        root = _as_object(doc, "")
        places = _as_list(_require(root, "places", ""), "places")
        check_ins = _as_list(_require(root, "check_ins", ""), "check_ins")
        trips = _as_list([] if root.get("trips") is None else root["trips"], "trips")

        return DiagramData(
            places=[self._parse_place(p, f"places[{i}]") for i, p in enumerate(places)],
            check_ins=[self._parse_check_in(c, f"check_ins[{i}]") for i, c in enumerate(check_ins)],
            trips=[self._parse_trip(t, f"trips[{i}]") for i, t in enumerate(trips)],
        )

    @override
    def parse(self) -> DiagramData:
        data = self.parse_document(self._decode(self._read()))
        logger.info(
            "Read %d places, %d check-ins, %d trips from %s",
            len(data.places),
            len(data.check_ins),
            len(data.trips),
            self.path or "<text>",
        )
        return data
