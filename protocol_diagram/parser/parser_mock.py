from typing import final, override

from protocol_diagram.models import CheckIn, DiagramData, Interval, Place, Trip, TripPoint
from protocol_diagram.parser.parser_base import Parser

NS_PER_MS = 1_000_000


@final
class ParserMock(Parser):
    """Synthesizes one client/server connection carried over a lossy line.

    The client opens the connection, sends `n_data` DataAck packets which the
    server acknowledges, then closes; every `drop_every`-th data packet is
    dropped on the line and never reaches the server.
    """

    def __init__(
        self,
        n_data: int = 8,
        start_ns: int = 1_000_000_000,
        latency_ms: float = 40,
        send_gap_ms: float = 15,
        timewait_ms: float = 400,
        drop_every: int = 5,
    ):
        self.n_data = n_data
        self.start_ns = start_ns
        self.latency_ns = int(latency_ms * NS_PER_MS)
        self.send_gap_ns = int(send_gap_ms * NS_PER_MS)
        self.timewait_ns = int(timewait_ms * NS_PER_MS)
        self.drop_every = drop_every

        self.check_ins: list[CheckIn] = []
        self.trips: list[Trip] = []
        self.intervals: dict[str, list[Interval]] = {}
        self.current: dict[str, tuple[str, int]] = {}

    def _enter(self, place: str, state: str, t_ns: int) -> None:
        if place in self.current:
            prev_state, prev_start = self.current[place]
            self.intervals.setdefault(place, []).append(
                Interval(state=prev_state, start=prev_start, end=t_ns)
            )
        self.current[place] = (state, t_ns)

    def _close_all(self, t_ns: int) -> None:
        for place in list(self.current):
            state, start = self.current.pop(place)
            self.intervals.setdefault(place, []).append(
                Interval(state=state, start=start, end=t_ns)
            )

    def _check_in(
        self, place: str, t_ns: int, type_: str, comment: str, seqno: int, ackno: int
    ) -> None:
        state = self.current.get(place, ("", 0))[0] or None
        self.check_ins.append(
            CheckIn(
                place=place,
                time=t_ns,
                sub="conn",
                type=type_,
                comment=comment,
                seqno=seqno,
                ackno=ackno,
                state=state,
            )
        )

    def _send(
        self, src: str, dst: str, t_ns: int, kind: str, seqno: int, ackno: int, drop: bool = False
    ) -> int | None:
        line_ns = t_ns + self.latency_ns // 2
        self._check_in(src, t_ns, "Write", kind, seqno, ackno)
        path = [TripPoint(place=src, time=t_ns), TripPoint(place="line", time=line_ns)]
        if drop:
            self.check_ins.append(
                CheckIn(place="line", time=line_ns, sub="line", type="Drop",
                        comment=kind, seqno=seqno, ackno=ackno)
            )
            self.trips.append(Trip(path=path))
            return None

        arrival = t_ns + self.latency_ns
        self._check_in(dst, arrival, "Read", kind, seqno, ackno)
        path.append(TripPoint(place=dst, time=arrival))
        self.trips.append(Trip(path=path))
        return arrival

    @override
    def parse(self) -> DiagramData:
        self.check_ins, self.trips = [], []
        self.intervals, self.current = {}, {}

        t = self.start_ns
        client_seq, server_seq = 100, 500

        self._enter("server", "LISTEN", t)
        self._enter("client", "REQUEST", t)
        arrival = self._send("client", "server", t, "Request", client_seq, 0)
        assert arrival is not None

        self._enter("server", "RESPOND", arrival)
        t = self._send("server", "client", arrival, "Response", server_seq, client_seq)
        assert t is not None

        self._enter("client", "PARTOPEN", t)
        client_seq += 1
        arrival = self._send("client", "server", t, "Ack", client_seq, server_seq)
        assert arrival is not None
        self._enter("server", "OPEN", arrival)
        t = self._send("server", "client", arrival, "Ack", server_seq + 1, client_seq)
        assert t is not None
        server_seq += 1
        self._enter("client", "OPEN", t)

        last_ack = t
        for i in range(1, self.n_data + 1):
            t += self.send_gap_ns
            client_seq += 1
            drop = self.drop_every > 0 and i % self.drop_every == 0
            arrival = self._send("client", "server", t, "DataAck", client_seq, server_seq, drop=drop)
            if arrival is None:
                continue
            server_seq += 1
            ack = self._send("server", "client", arrival, "Ack", server_seq, client_seq)
            assert ack is not None
            last_ack = max(last_ack, ack)

        t = last_ack + self.send_gap_ns
        self._enter("client", "CLOSING", t)
        client_seq += 1
        arrival = self._send("client", "server", t, "Close", client_seq, server_seq)
        assert arrival is not None

        self._enter("server", "CLOSED", arrival)
        server_seq += 1
        t = self._send("server", "client", arrival, "Reset", server_seq, client_seq)
        assert t is not None

        self._enter("client", "TIMEWAIT", t)
        t += self.timewait_ns
        self._enter("client", "CLOSED", t)
        self._check_in("client", t, "Event", "Closed", client_seq, server_seq)
        self._close_all(t + self.send_gap_ns)

        places = [
            Place(name=name, intervals=self.intervals.get(name, []))
            for name in ("client", "line", "server")
        ]
        self.check_ins.sort(key=lambda c: c.time)
        return DiagramData(places=places, check_ins=self.check_ins, trips=self.trips)
