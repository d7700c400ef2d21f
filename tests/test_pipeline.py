# tests/test_pipeline.py

import asyncio
import base64

import pytest

from print_agent.errors import (
    DispatchFailed,
    InvalidEncoding,
    PrinterNotFound,
    RenderEngineError,
    RenderingFailed,
    StagingFailed,
)
from print_agent.models import PrintJobIn
from print_agent.pipeline import PrintPipeline
from print_agent.renderer import Renderer
from tests.fakes.fake_browser import FakeBrowserFactory
from tests.fakes.fake_printers import FakePrinterProvider, FakeRenderer

PDF = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj<<>>endobj\n%%EOF"


def _pdf_job(printer="Office", data=PDF):
    return PrintJobIn(printer_name=printer, content=base64.b64encode(data).decode(), format="pdf")


def _pipeline(tmp_path, provider=None, renderer=None):
    return PrintPipeline(
        provider or FakePrinterProvider(),
        renderer=renderer or Renderer(browser_factory=FakeBrowserFactory()),
        artifact_dir=tmp_path,
    )


def test_pdf_bytes_reach_the_printer_unchanged(tmp_path):
    provider = FakePrinterProvider()

    result = asyncio.run(_pipeline(tmp_path, provider).submit(_pdf_job()))

    assert result.succeeded is True
    assert len(provider.invocations) == 1
    path, printer, data = provider.invocations[0]
    assert printer == "Office"
    assert data == PDF
    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_unknown_printer_skips_render_and_dispatch(tmp_path):
    provider = FakePrinterProvider(printers=["Office"])
    renderer = FakeRenderer()

    with pytest.raises(PrinterNotFound) as exc:
        asyncio.run(_pipeline(tmp_path, provider, renderer).submit(_pdf_job("Ghost")))

    assert exc.value.status_code == 404
    assert renderer.calls == []
    assert provider.invocations == []
    assert provider.lookups == ["Ghost"]


def test_printer_is_looked_up_on_every_job(tmp_path):
    provider = FakePrinterProvider()
    pipeline = _pipeline(tmp_path, provider)

    asyncio.run(pipeline.submit(_pdf_job()))
    provider.printers = []
    with pytest.raises(PrinterNotFound):
        asyncio.run(pipeline.submit(_pdf_job()))

    assert provider.lookups == ["Office", "Office"]


def test_dispatch_failure_reports_diagnostic_and_cleans_up(tmp_path):
    provider = FakePrinterProvider(returncode=1, stderr="offline")

    with pytest.raises(DispatchFailed) as exc:
        asyncio.run(_pipeline(tmp_path, provider).submit(_pdf_job()))

    assert "offline" in exc.value.diagnostic
    assert exc.value.status_code == 500
    path, _, _ = provider.invocations[0]
    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_invalid_base64_is_a_rendering_failure(tmp_path):
    provider = FakePrinterProvider()
    job = PrintJobIn(printer_name="Office", content="%%% not base64", format="pdf")

    with pytest.raises(RenderingFailed) as exc:
        asyncio.run(_pipeline(tmp_path, provider).submit(job))

    assert isinstance(exc.value.cause, InvalidEncoding)
    assert provider.invocations == []
    assert list(tmp_path.iterdir()) == []


def test_engine_failure_skips_dispatch(tmp_path):
    provider = FakePrinterProvider()
    renderer = FakeRenderer(error=RenderEngineError("chromium crashed"))
    job = PrintJobIn(printer_name="Office", content="<p>hi</p>", format="html")

    with pytest.raises(RenderingFailed, match="chromium crashed"):
        asyncio.run(_pipeline(tmp_path, provider, renderer).submit(job))

    assert provider.invocations == []


def test_html_job_dispatches_rendered_document(tmp_path):
    provider = FakePrinterProvider()
    renderer = FakeRenderer(output=b"%PDF from html")
    job = PrintJobIn(printer_name="Office", content="<p>hi</p>", format="html")

    asyncio.run(_pipeline(tmp_path, provider, renderer).submit(job))

    assert renderer.calls[0][1] == "<p>hi</p>"
    assert provider.invocations[0][2] == b"%PDF from html"


def test_url_job_passes_token_to_renderer(tmp_path):
    renderer = FakeRenderer()
    job = PrintJobIn(printer_name="Office", content="https://example.test", format="url", auth_token="tok")

    asyncio.run(_pipeline(tmp_path, renderer=renderer).submit(job))

    assert renderer.calls[0][2] == "tok"


def test_staging_failure_skips_dispatch(tmp_path):
    provider = FakePrinterProvider()
    occupied = tmp_path / "occupied"
    occupied.write_text("not a directory")
    pipeline = PrintPipeline(provider, renderer=FakeRenderer(), artifact_dir=occupied)

    with pytest.raises(StagingFailed):
        asyncio.run(pipeline.submit(_pdf_job()))

    assert provider.invocations == []


def test_artifact_removed_even_if_provider_raises(tmp_path):
    class ExplodingProvider(FakePrinterProvider):
        def print_file(self, path, printer):
            self.invocations.append((path, printer, path.read_bytes()))
            raise RuntimeError("spooler crashed")

    provider = ExplodingProvider()

    with pytest.raises(RuntimeError, match="spooler crashed"):
        asyncio.run(_pipeline(tmp_path, provider).submit(_pdf_job()))

    assert list(tmp_path.iterdir()) == []
