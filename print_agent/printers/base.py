from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from print_agent.models import DispatchResult, PrinterInfo, PrinterRef


class PrinterProvider(ABC):

    @abstractmethod
    def list_printers(self) -> List[PrinterInfo]:
        pass

    @abstractmethod
    def print_file(self, path: Path, printer: str) -> DispatchResult:
        pass

    def find_printer(self, name: str) -> PrinterRef:
        # always a fresh query, printers come and go between jobs
        names = {p.name for p in self.list_printers()}
        return PrinterRef(name=name, exists=name in names)
