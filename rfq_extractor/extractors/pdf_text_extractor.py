"""
PDF text acquisition using a cascade of extraction backends.

Backends are tried in order and the first one whose trimmed output is
longer than ``config.min_text_length`` wins:

1. pdftotext (poppler) in -layout mode, -raw mode, then -layout to stdout
2. pdfplumber
3. an external interpreter running a small pdfminer.six script
4. a raw content-stream scan (see stream_fallback)
"""
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

import pdfplumber

from rfq_extractor.config import ExtractionConfig, DEFAULT_CONFIG
from rfq_extractor.exceptions import BackendError, BackendUnavailable
from rfq_extractor.models import AcquisitionFailure, ExtractedText
from rfq_extractor.utils.helpers import combine_pages_text

from .stream_fallback import extract_text_from_streams

logger = logging.getLogger(__name__)


Document = Union[str, os.PathLike, bytes, bytearray]
Backend = Callable[[Path, ExtractionConfig], Optional[str]]

EXTRACTION_FAILED_MESSAGE = (
    "Could not extract text from PDF. Install pdftotext (poppler-utils) for better "
    "extraction. The document may be image-based and require OCR."
)

# Page-text script for the interpreter backend. Paths arrive as argv.
PAGE_TEXT_SCRIPT = '''\
import sys

from pdfminer.high_level import extract_text

with open(sys.argv[2], "w", encoding="utf-8") as out:
    out.write(extract_text(sys.argv[1]) or "")
'''


def find_pdftotext(config: ExtractionConfig) -> Optional[str]:
    """First executable pdftotext among the configured candidates."""
    for candidate in config.pdftotext_paths:
        found = shutil.which(candidate)
        if found:
            return found
    return None


def _run(cmd: List[str], config: ExtractionConfig) -> subprocess.CompletedProcess:
    """Run an extraction command with the configured timeout; non-zero exit raises BackendError."""
    logger.debug("Running %s", ' '.join(cmd))
    completed = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        encoding='utf-8',
        errors='replace',
        timeout=config.subprocess_timeout,
    )
    if completed.returncode != 0:
        stderr = (completed.stderr or '').strip()
        raise BackendError(f"exit code {completed.returncode}: {stderr[:200]}")
    return completed


def _read_output(path: Path) -> Optional[str]:
    if not path.exists():
        return None
    return path.read_text(encoding='utf-8', errors='replace')


def _pdftotext_to_file(pdf_path: Path, config: ExtractionConfig, mode: str) -> Optional[str]:
    executable = find_pdftotext(config)
    if not executable:
        raise BackendUnavailable("pdftotext not found")

    with tempfile.TemporaryDirectory(prefix='rfqx-') as tmp_dir:
        output_path = Path(tmp_dir) / 'output.txt'
        _run([executable, mode, '-enc', 'UTF-8', '-nopgbrk', str(pdf_path), str(output_path)], config)
        return _read_output(output_path)


def pdftotext_layout(pdf_path: Path, config: ExtractionConfig) -> Optional[str]:
    """pdftotext preserving the physical layout."""
    return _pdftotext_to_file(pdf_path, config, '-layout')


def pdftotext_raw(pdf_path: Path, config: ExtractionConfig) -> Optional[str]:
    """pdftotext in content-stream order."""
    return _pdftotext_to_file(pdf_path, config, '-raw')


def pdftotext_stdout(pdf_path: Path, config: ExtractionConfig) -> Optional[str]:
    """pdftotext writing straight to stdout."""
    executable = find_pdftotext(config)
    if not executable:
        raise BackendUnavailable("pdftotext not found")
    completed = _run([executable, '-layout', '-enc', 'UTF-8', '-nopgbrk', str(pdf_path), '-'], config)
    return completed.stdout


def pdfplumber_text(pdf_path: Path, config: ExtractionConfig) -> Optional[str]:
    """Text of every page via pdfplumber."""
    try:
        with pdfplumber.open(pdf_path) as pdf:
            pages = [page.extract_text() for page in pdf.pages]
    except Exception as e:
        # pdfplumber surfaces pdfminer parse errors under several exception types
        raise BackendError(f"pdfplumber could not read the document: {e}") from e
    return combine_pages_text(pages)


def script_text(pdf_path: Path, config: ExtractionConfig) -> Optional[str]:
    """Run PAGE_TEXT_SCRIPT under the configured external interpreter."""
    interpreter = shutil.which(config.script_interpreter)
    if not interpreter:
        raise BackendUnavailable(f"{config.script_interpreter} not found")

    with tempfile.TemporaryDirectory(prefix='rfqx-') as tmp_dir:
        script_path = Path(tmp_dir) / 'page_text.py'
        output_path = Path(tmp_dir) / 'output.txt'
        script_path.write_text(PAGE_TEXT_SCRIPT, encoding='utf-8')
        _run([interpreter, str(script_path), str(pdf_path), str(output_path)], config)
        return _read_output(output_path)


def stream_scan_text(pdf_path: Path, config: ExtractionConfig) -> Optional[str]:
    """Scan the raw PDF bytes for text-showing operators."""
    return extract_text_from_streams(pdf_path.read_bytes(), config.tj_space_threshold)


DEFAULT_BACKENDS: List[Tuple[str, Backend]] = [
    ('pdftotext-layout', pdftotext_layout),
    ('pdftotext-raw', pdftotext_raw),
    ('pdftotext-stdout', pdftotext_stdout),
    ('pdfplumber', pdfplumber_text),
    ('script', script_text),
    ('stream-scan', stream_scan_text),
]


class PDFTextExtractor:
    """Extract text from PDF documents by trying acquisition backends in order."""

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        backends: Optional[List[Tuple[str, Backend]]] = None
    ):
        """
        Initialize the PDF extractor.

        Args:
            config: Thresholds and tool locations (defaults to DEFAULT_CONFIG)
            backends: Ordered (name, callable) pairs; defaults to DEFAULT_BACKENDS
        """
        self.config = config or DEFAULT_CONFIG
        self.backends = list(backends) if backends is not None else list(DEFAULT_BACKENDS)

    def acquire(self, document: Document) -> Union[ExtractedText, AcquisitionFailure]:
        """
        Extract text from a PDF given as a path or as raw bytes.

        Byte buffers are written to a temporary file that is removed before
        returning.

        Args:
            document: Filesystem path or PDF bytes

        Returns:
            ExtractedText from the first usable backend, or AcquisitionFailure
        """
        if isinstance(document, (bytes, bytearray)):
            with tempfile.TemporaryDirectory(prefix='rfqx-') as tmp_dir:
                pdf_path = Path(tmp_dir) / 'document.pdf'
                pdf_path.write_bytes(bytes(document))
                return self._acquire_path(pdf_path)

        if isinstance(document, (str, os.PathLike)):
            pdf_path = Path(document)
            if not pdf_path.is_file():
                logger.warning("PDF file not found: %s", pdf_path)
                return AcquisitionFailure(
                    reason='file_not_found',
                    message=f"PDF file not found: {pdf_path}",
                )
            return self._acquire_path(pdf_path)

        raise TypeError(f"document must be a path or bytes, not {type(document).__name__}")

    def _acquire_path(self, pdf_path: Path) -> Union[ExtractedText, AcquisitionFailure]:
        attempts = []
        for name, backend in self.backends:
            try:
                text = backend(pdf_path, self.config)
            except BackendUnavailable as e:
                logger.debug("Backend %s unavailable: %s", name, e)
                attempts.append(f"{name}: unavailable ({e})")
                continue
            except subprocess.TimeoutExpired:
                logger.warning("Backend %s timed out after %ss", name, self.config.subprocess_timeout)
                attempts.append(f"{name}: timed out after {self.config.subprocess_timeout}s")
                continue
            except (BackendError, subprocess.SubprocessError, OSError, ValueError) as e:
                logger.warning("Backend %s failed: %s", name, e)
                attempts.append(f"{name}: failed ({e})")
                continue

            length = len(text.strip()) if text else 0
            if length > self.config.min_text_length:
                logger.info("Extracted %d characters using %s", length, name)
                return ExtractedText(text=text, backend=name)

            logger.debug("Backend %s returned too little text (%d chars)", name, length)
            attempts.append(f"{name}: text too short ({length} chars)")

        logger.warning("All %d extraction backends failed for %s", len(self.backends), pdf_path.name)
        return AcquisitionFailure(
            reason='extraction_failed',
            message=EXTRACTION_FAILED_MESSAGE,
            attempts=attempts,
        )


def acquire(
    document: Document,
    config: Optional[ExtractionConfig] = None
) -> Union[ExtractedText, AcquisitionFailure]:
    """Module-level shortcut for PDFTextExtractor(config).acquire(document)."""
    return PDFTextExtractor(config).acquire(document)
