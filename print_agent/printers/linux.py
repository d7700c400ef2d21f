import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

from print_agent.env import LPR_COMMAND, PRINT_TIMEOUT
from print_agent.models import DispatchResult, PrinterInfo
from print_agent.printers.base import PrinterProvider

logger = logging.getLogger(__name__)


def _c_locale() -> dict:
    # lpstat messages are translated; the parsing below expects the untranslated ones
    return {**os.environ, "LC_ALL": "C"}


def _state_from_lpstat(line: str) -> str:
    # "printer Office is idle.  enabled since ..."
    # "printer Office now printing Office-12.  enabled since ..."
    # "printer Office disabled since ..."
    if " disabled" in line:
        return "Paused"
    if "now printing" in line:
        return "Printing"
    if " is idle" in line:
        return "Ready"
    return "Unknown"


def _default_printer() -> Optional[str]:
    try:
        out = subprocess.run(["lpstat", "-d"], capture_output=True, text=True, timeout=5, env=_c_locale())
    except (OSError, subprocess.TimeoutExpired):
        return None
    # "system default destination: Office"
    _, _, name = out.stdout.partition(":")
    return name.strip() or None


class LinuxPrinterProvider(PrinterProvider):
    """
    CUPS printers, used on Linux and macOS.

    Listing goes through `lpstat -p`, printing through `lpr -P <printer> <file>`.
    """

    def __init__(self, lpr_path: str = LPR_COMMAND, timeout: float = PRINT_TIMEOUT):
        self._lpr_path = lpr_path
        self._timeout = timeout

    def list_printers(self) -> List[PrinterInfo]:
        try:
            out = subprocess.run(["lpstat", "-p"], capture_output=True, text=True, timeout=5, env=_c_locale())
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("lpstat unavailable: %s", e)
            return []

        default = _default_printer()
        printers = []
        for line in out.stdout.splitlines():
            if not line.startswith("printer "):
                continue
            name = line.split()[1]
            printers.append(PrinterInfo(
                name=name,
                system_name=name,
                is_default=name == default,
                state=_state_from_lpstat(line),
            ))
        return printers

    def print_file(self, path: Path, printer: str) -> DispatchResult:
        cmd = [self._lpr_path, "-P", printer, str(path)]
        logger.info("Printing file %s to printer %s", path, printer)
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout)
        except FileNotFoundError:
            return DispatchResult(succeeded=False, diagnostic=f"'{self._lpr_path}' not found in PATH")
        except subprocess.TimeoutExpired:
            return DispatchResult(succeeded=False, diagnostic=f"{self._lpr_path} timed out after {self._timeout}s")

        if proc.returncode != 0:
            out = ((proc.stderr or "") + (proc.stdout or "")).strip()
            return DispatchResult(succeeded=False, diagnostic=f"lpr failed (rc={proc.returncode}): {out}")
        return DispatchResult(succeeded=True)
