"""
Print job pipeline.

RECEIVED -> PRINTER_RESOLVED -> RENDERED -> STAGED -> DISPATCHED -> SUCCEEDED | FAILED

Each stage runs once; a failure ends the job with a JobFailed subclass and
nothing is retried. The printer lookup and the print command run in the
threadpool so other requests keep being served; writing and removing the
artifact happen on the event loop.
"""
import logging
import uuid
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from fastapi.concurrency import run_in_threadpool

from print_agent.artifacts import temporary_artifact
from print_agent.errors import (
    ArtifactError,
    DispatchFailed,
    JobFailed,
    PrinterNotFound,
    RenderFailure,
    RenderingFailed,
    StagingFailed,
)
from print_agent.models import DispatchResult, PrintJobIn
from print_agent.printers.base import PrinterProvider
from print_agent.renderer import Renderer

logger = logging.getLogger(__name__)


class JobStage(str, Enum):
    RECEIVED = "received"
    PRINTER_RESOLVED = "printer_resolved"
    RENDERED = "rendered"
    STAGED = "staged"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PrintPipeline:

    def __init__(
        self,
        provider: PrinterProvider,
        renderer: Optional[Renderer] = None,
        artifact_dir: Optional[Union[str, Path]] = None,
    ):
        self.provider = provider
        self.renderer = renderer or Renderer()
        self.artifact_dir = artifact_dir

    async def submit(self, job: PrintJobIn) -> DispatchResult:
        job_id = uuid.uuid4().hex[:8]
        try:
            result = await self._run(job_id, job)
        except JobFailed as e:
            logger.error("Job %s -> %s: %s", job_id, JobStage.FAILED.value, e)
            raise
        logger.info("Job %s -> %s", job_id, JobStage.SUCCEEDED.value)
        return result

    async def _run(self, job_id: str, job: PrintJobIn) -> DispatchResult:
        logger.info("Job %s -> %s (printer=%s format=%s)",
                    job_id, JobStage.RECEIVED.value, job.printer_name, job.format.value)

        printer = await run_in_threadpool(self.provider.find_printer, job.printer_name)
        if not printer.exists:
            raise PrinterNotFound(job.printer_name)
        logger.info("Job %s -> %s", job_id, JobStage.PRINTER_RESOLVED.value)

        try:
            data = await self.renderer.render(job.format, job.content, job.auth_token)
        except RenderFailure as e:
            raise RenderingFailed(e) from e
        logger.info("Job %s -> %s (%d bytes)", job_id, JobStage.RENDERED.value, len(data))

        # the artifact is removed on leaving the block, before the outcome is judged
        try:
            with temporary_artifact(data, self.artifact_dir) as staged:
                logger.info("Job %s -> %s (%s)", job_id, JobStage.STAGED.value, staged.path)
                result = await run_in_threadpool(self.provider.print_file, staged.path, job.printer_name)
                logger.info("Job %s -> %s", job_id, JobStage.DISPATCHED.value)
        except ArtifactError as e:
            raise StagingFailed(e) from e

        if not result.succeeded:
            raise DispatchFailed(result.diagnostic)
        return result
