import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from print_agent import __version__
from print_agent.artifacts import purge_stale_artifacts
from print_agent.env import CORS_ORIGINS
from print_agent.errors import JobFailed
from print_agent.models import Health, Message, PrinterInfo, PrintJobIn
from print_agent.pipeline import PrintPipeline
from print_agent.printers import get_printer_provider

logger = logging.getLogger(__name__)


def create_app(pipeline: Optional[PrintPipeline] = None) -> FastAPI:
    if pipeline is None:
        pipeline = PrintPipeline(get_printer_provider())

    app = FastAPI(title="Print Agent", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.pipeline = pipeline

    @app.on_event("startup")
    def _startup():
        purge_stale_artifacts(pipeline.artifact_dir)
        logger.info("Print agent %s starting", __version__)

    @app.get("/health", response_model=Health)
    def health():
        return Health(version=__version__)

    @app.get("/printers", response_model=List[PrinterInfo])
    def list_printers():
        return pipeline.provider.list_printers()

    @app.post("/print", response_model=Message)
    async def print_job(payload: PrintJobIn):
        try:
            await pipeline.submit(payload)
        except JobFailed as e:
            raise HTTPException(status_code=e.status_code, detail=str(e))
        return Message(message="Printing")

    return app
