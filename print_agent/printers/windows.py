import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from print_agent.env import PDF_TO_PRINTER, PRINT_TIMEOUT
from print_agent.models import DispatchResult, PrinterInfo
from print_agent.printers.base import PrinterProvider

logger = logging.getLogger(__name__)


def _state_from_status(status: int) -> str:
    import win32print
    if status & win32print.PRINTER_STATUS_PAUSED:
        return "Paused"
    if status & win32print.PRINTER_STATUS_PRINTING:
        return "Printing"
    if status == 0:
        return "Ready"
    return "Unknown"


class WindowsPrinterProvider(PrinterProvider):
    """
    Spooler printers via win32print; printing goes through the bundled
    PDFtoPrinter.exe since the spooler does not rasterize PDF itself.
    """

    def __init__(self, pdf_to_printer: str = PDF_TO_PRINTER, timeout: float = PRINT_TIMEOUT):
        self._pdf_to_printer = pdf_to_printer
        self._timeout = timeout

    def list_printers(self) -> List[PrinterInfo]:
        import pywintypes
        import win32print
        flags = win32print.PRINTER_ENUM_LOCAL | win32print.PRINTER_ENUM_CONNECTIONS
        try:
            default = win32print.GetDefaultPrinter()
        except pywintypes.error:
            default = None

        printers = []
        for p in win32print.EnumPrinters(flags, None, 2):
            printers.append(PrinterInfo(
                name=p["pPrinterName"],
                system_name=p.get("pShareName") or p["pPrinterName"],
                is_default=p["pPrinterName"] == default,
                state=_state_from_status(p.get("Status", 0)),
            ))
        return printers

    def _executable(self) -> Optional[str]:
        # the copy shipped in print_agent/bin first, then PATH
        if Path(self._pdf_to_printer).is_file():
            return self._pdf_to_printer
        return shutil.which(Path(self._pdf_to_printer).name)

    def print_file(self, path: Path, printer: str) -> DispatchResult:
        exe = self._executable()
        if exe is None:
            return DispatchResult(succeeded=False, diagnostic=f"'{self._pdf_to_printer}' not found")

        cmd = [exe, str(path), printer]
        logger.info("Printing file %s to printer %s", path, printer)
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout)
        except FileNotFoundError:
            return DispatchResult(succeeded=False, diagnostic=f"'{exe}' not found")
        except subprocess.TimeoutExpired:
            return DispatchResult(succeeded=False, diagnostic=f"{self._pdf_to_printer} timed out after {self._timeout}s")

        if proc.returncode != 0:
            out = ((proc.stderr or "") + (proc.stdout or "")).strip()
            return DispatchResult(succeeded=False, diagnostic=f"PDFtoPrinter failed (rc={proc.returncode}): {out}")
        return DispatchResult(succeeded=True)
