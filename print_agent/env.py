import os
import tempfile
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()  # reads .env from the cwd

AGENT_HOST = os.getenv("AGENT_HOST", "127.0.0.1")
AGENT_PORT = int(os.getenv("AGENT_PORT", "1829"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")  # the service has no console

ARTIFACT_DIR = os.getenv("ARTIFACT_DIR", os.path.join(tempfile.gettempdir(), "print_agent"))

BIN_DIR = Path(__file__).resolve().parent / "bin"

PDF_TO_PRINTER = os.getenv("PDF_TO_PRINTER", str(BIN_DIR / "PDFtoPrinter.exe"))
LPR_COMMAND = os.getenv("LPR_COMMAND", "lpr")
PRINT_TIMEOUT = float(os.getenv("PRINT_TIMEOUT", "120"))
RENDER_TIMEOUT = float(os.getenv("RENDER_TIMEOUT", "60"))

SERVICE_NAME = os.getenv("SERVICE_NAME", "PrintAgentService")
SERVICE_STOP_CODE = int(os.getenv("SERVICE_STOP_CODE", "130"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
