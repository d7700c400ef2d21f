import time
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class JobFormat(str, Enum):
    html = "html"
    url = "url"
    pdf = "pdf"


class PrintJobIn(BaseModel):
    model_config = ConfigDict(frozen=True)

    printer_name: str
    content: str
    format: JobFormat
    auth_token: Optional[str] = None  # only used when format is url


class PrinterInfo(BaseModel):
    name: str
    system_name: Optional[str] = None
    is_default: bool = False
    state: Optional[str] = None  # Ready|Printing|Paused|Unknown


class PrinterRef(BaseModel):
    name: str
    exists: bool


class DispatchResult(BaseModel):
    succeeded: bool
    diagnostic: Optional[str] = None


class TemporaryFile(BaseModel):
    path: Path
    created_at: float = Field(default_factory=lambda: time.time())


class Message(BaseModel):
    message: str


class Health(BaseModel):
    status: str = "ok"
    version: str
