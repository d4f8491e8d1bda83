from abc import ABC, abstractmethod
from protocol_diagram.models import DiagramData


class Parser(ABC):
    @abstractmethod
    def parse(self) -> DiagramData:
        pass
