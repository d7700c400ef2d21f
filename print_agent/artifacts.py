"""
Scoped temporary files for rendered documents.

Every job gets its own output_<random>.pdf inside ARTIFACT_DIR. The file is
created with exclusive mode, so two jobs can never share a path, and it is
removed when the `with` block exits, whatever happened inside it.
"""
import logging
import secrets
import string
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from print_agent.env import ARTIFACT_DIR
from print_agent.errors import WriteFailed
from print_agent.models import TemporaryFile

logger = logging.getLogger(__name__)

SUFFIX_ALPHABET = string.ascii_letters + string.digits
SUFFIX_LENGTH = 7
PREFIX = "output_"


def random_string(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def _write_new(directory: Path, data: bytes) -> Path:
    while True:
        path = directory / f"{PREFIX}{random_string()}.pdf"
        try:
            f = open(path, "xb")
        except FileExistsError:
            continue
        try:
            with f:
                f.write(data)
        except OSError:
            _release(path)
            raise
        return path


def _release(path: Path):
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove temporary file %s: %s", path, e)


@contextmanager
def temporary_artifact(data: bytes, directory: Optional[Union[str, Path]] = None) -> Iterator[TemporaryFile]:
    directory = Path(directory or ARTIFACT_DIR)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path = _write_new(directory, data)
    except OSError as e:
        raise WriteFailed(f"could not write artifact in {directory}: {e}") from e

    try:
        yield TemporaryFile(path=path)
    finally:
        _release(path)


def purge_stale_artifacts(directory: Optional[Union[str, Path]] = None) -> int:
    """Remove artifacts left behind by a process that died mid-job."""
    directory = Path(directory or ARTIFACT_DIR)
    if not directory.is_dir():
        return 0
    removed = 0
    for path in directory.glob(f"{PREFIX}*.pdf"):
        _release(path)
        removed += 1
    if removed:
        logger.info("Removed %d stale artifacts from %s", removed, directory)
    return removed
