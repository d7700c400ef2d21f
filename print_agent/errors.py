"""
Job-scoped failures.

Renderer and artifact store raise their own errors; the pipeline wraps them
into a JobFailed subclass carrying the HTTP status the API answers with.
"""
from typing import Optional


# -----------------------------
# Renderer
# -----------------------------
class RenderFailure(Exception):
    pass


class InvalidEncoding(RenderFailure):
    pass


class RenderEngineError(RenderFailure):
    pass


class HeaderInjectionError(RenderFailure):
    pass


# -----------------------------
# Artifact store
# -----------------------------
class ArtifactError(Exception):
    pass


class WriteFailed(ArtifactError):
    pass


# -----------------------------
# Pipeline outcomes
# -----------------------------
class JobFailed(Exception):
    status_code = 500


class PrinterNotFound(JobFailed):
    status_code = 404

    def __init__(self, printer_name: str):
        super().__init__(f"Printer '{printer_name}' not found")
        self.printer_name = printer_name


class RenderingFailed(JobFailed):
    def __init__(self, cause: RenderFailure):
        super().__init__(f"Rendering failed: {cause}")
        self.cause = cause


class StagingFailed(JobFailed):
    def __init__(self, cause: ArtifactError):
        super().__init__(f"Staging failed: {cause}")
        self.cause = cause


class DispatchFailed(JobFailed):
    def __init__(self, diagnostic: Optional[str]):
        super().__init__(f"Failed to print: {diagnostic or 'no output'}")
        self.diagnostic = diagnostic
