import platform

from print_agent.printers.base import PrinterProvider

OS = platform.system()


def get_printer_provider() -> PrinterProvider:
    if OS == "Windows":
        from print_agent.printers.windows import WindowsPrinterProvider as Provider
    elif OS in ("Linux", "Darwin"):
        from print_agent.printers.linux import LinuxPrinterProvider as Provider
    else:
        raise RuntimeError(f"Unsupported operating system: {OS}")
    return Provider()
