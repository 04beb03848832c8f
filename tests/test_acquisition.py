"""
Tests for PDF text acquisition

Tests the backend cascade, temp-file handling, the pdftotext / pdfplumber /
script backends (with the external tools mocked) and the raw stream scan.
"""

import subprocess
import sys
import zlib
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rfq_extractor.config import ExtractionConfig
from rfq_extractor.exceptions import BackendError, BackendUnavailable
from rfq_extractor.extractors import pdf_text_extractor
from rfq_extractor.extractors.pdf_text_extractor import (
    DEFAULT_BACKENDS, PAGE_TEXT_SCRIPT, PDFTextExtractor, acquire,
    pdfplumber_text, pdftotext_layout, pdftotext_raw, pdftotext_stdout,
    script_text, stream_scan_text
)
from rfq_extractor.extractors.stream_fallback import (
    decode_pdf_string, extract_stream_fragments, extract_text_from_streams, inflate,
    read_literal
)
from rfq_extractor.models import AcquisitionFailure, ExtractedText


LONG_TEXT = "Item 1: Product Name: Oak Table Length (in): 24 Depth (in): 30 Quantity: 2"

CONTENT_STREAM = (
    b"BT /F1 12 Tf 72 720 Td (Product Name: Oak Table) Tj T* "
    b"[(Length) -250 (\\(in\\): 24)] TJ T* "
    b"(Primary Material: Oak Finishes: Matte) ' ET"
)


def make_pdf(content: bytes, compress: bool = True) -> bytes:
    """Minimal single-stream PDF body, enough for the stream scanner."""
    body = zlib.compress(content) if compress else content
    filter_entry = b" /Filter /FlateDecode" if compress else b""
    return (
        b"%PDF-1.4\n4 0 obj\n<< /Length " + str(len(body)).encode() + filter_entry + b" >>\n"
        b"stream\n" + body + b"\nendstream\nendobj\n%%EOF\n"
    )


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "rfq.pdf"
    path.write_bytes(make_pdf(CONTENT_STREAM))
    return path


@pytest.fixture
def fake_tools(monkeypatch):
    """Pretend pdftotext and python3 are installed."""
    def which(name):
        return f"/usr/bin/{Path(name).name}"
    monkeypatch.setattr(pdf_text_extractor.shutil, 'which', which)


class TestCascade:
    """Tests for trying backends in order."""

    def test_first_usable_backend_wins(self, pdf_file):
        extractor = PDFTextExtractor(backends=[
            ('short', lambda path, config: "too short"),
            ('good', lambda path, config: LONG_TEXT),
            ('unused', lambda path, config: pytest.fail("cascade should have stopped")),
        ])
        result = extractor.acquire(pdf_file)
        assert isinstance(result, ExtractedText)
        assert result.ok
        assert result.backend == 'good'
        assert result.text == LONG_TEXT

    def test_all_backends_short(self, pdf_file):
        extractor = PDFTextExtractor(backends=[
            ('empty', lambda path, config: None),
            ('short', lambda path, config: "x" * 50),
        ])
        result = extractor.acquire(pdf_file)
        assert isinstance(result, AcquisitionFailure)
        assert not result.ok
        assert result.reason == 'extraction_failed'
        assert "pdftotext" in result.message
        assert result.attempts == [
            "empty: text too short (0 chars)",
            "short: text too short (50 chars)",
        ]

    def test_failures_are_recorded_and_skipped(self, pdf_file):
        def unavailable(path, config):
            raise BackendUnavailable("pdftotext not found")

        def broken(path, config):
            raise BackendError("exit code 1: Syntax Error")

        def timed_out(path, config):
            raise subprocess.TimeoutExpired(['pdftotext'], config.subprocess_timeout)

        def unreadable(path, config):
            raise OSError("permission denied")

        extractor = PDFTextExtractor(
            config=ExtractionConfig(subprocess_timeout=5.0),
            backends=[
                ('a', unavailable), ('b', broken), ('c', timed_out), ('d', unreadable),
                ('e', lambda path, config: LONG_TEXT),
            ]
        )
        assert extractor.acquire(pdf_file).backend == 'e'

        extractor.backends.pop()
        result = extractor.acquire(pdf_file)
        assert result.attempts == [
            "a: unavailable (pdftotext not found)",
            "b: failed (exit code 1: Syntax Error)",
            "c: timed out after 5.0s",
            "d: failed (permission denied)",
        ]

    def test_min_text_length_is_configurable(self, pdf_file):
        extractor = PDFTextExtractor(
            config=ExtractionConfig(min_text_length=5),
            backends=[('short', lambda path, config: "Oak Table")],
        )
        assert extractor.acquire(pdf_file).ok

    def test_default_backend_order(self):
        assert [name for name, _ in DEFAULT_BACKENDS] == [
            'pdftotext-layout', 'pdftotext-raw', 'pdftotext-stdout',
            'pdfplumber', 'script', 'stream-scan',
        ]

    def test_module_level_acquire(self, monkeypatch, pdf_file):
        monkeypatch.setattr(
            pdf_text_extractor, 'DEFAULT_BACKENDS', [('fake', lambda path, config: LONG_TEXT)]
        )
        assert acquire(pdf_file).backend == 'fake'


class TestDocumentInput:
    """Tests for path and byte inputs."""

    def test_missing_file(self, tmp_path):
        result = PDFTextExtractor().acquire(tmp_path / "missing.pdf")
        assert isinstance(result, AcquisitionFailure)
        assert result.reason == 'file_not_found'
        assert result.attempts == []

    def test_bytes_written_to_temp_file_and_removed(self):
        seen = []

        def backend(path, config):
            seen.append(path)
            assert path.read_bytes() == b"%PDF-1.4 fake"
            return LONG_TEXT

        result = PDFTextExtractor(backends=[('fake', backend)]).acquire(b"%PDF-1.4 fake")
        assert result.ok
        assert seen and not seen[0].exists()

    def test_temp_file_removed_on_failure(self):
        seen = []

        def backend(path, config):
            seen.append(path)
            raise BackendError("broken")

        result = PDFTextExtractor(backends=[('fake', backend)]).acquire(bytearray(b"%PDF"))
        assert not result.ok
        assert not seen[0].exists()

    def test_unsupported_input(self):
        with pytest.raises(TypeError):
            PDFTextExtractor().acquire(42)


class TestPdftotext:
    """Tests for the pdftotext backends with subprocess mocked."""

    def test_layout_mode_writes_to_temp_file(self, monkeypatch, fake_tools, pdf_file):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append((cmd, kwargs))
            Path(cmd[-1]).write_text(LONG_TEXT, encoding='utf-8')
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(pdf_text_extractor.subprocess, 'run', fake_run)
        config = ExtractionConfig(subprocess_timeout=7.5)

        assert pdftotext_layout(pdf_file, config) == LONG_TEXT
        cmd, kwargs = calls[0]
        assert cmd[:6] == ['/usr/bin/pdftotext', '-layout', '-enc', 'UTF-8', '-nopgbrk', str(pdf_file)]
        assert kwargs['timeout'] == 7.5
        assert not Path(cmd[-1]).parent.exists()

    def test_raw_mode(self, monkeypatch, fake_tools, pdf_file):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            Path(cmd[-1]).write_text(LONG_TEXT, encoding='utf-8')
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(pdf_text_extractor.subprocess, 'run', fake_run)
        assert pdftotext_raw(pdf_file, ExtractionConfig()) == LONG_TEXT
        assert calls[0][1] == '-raw'

    def test_stdout_mode(self, monkeypatch, fake_tools, pdf_file):
        def fake_run(cmd, **kwargs):
            assert cmd[-1] == '-'
            return subprocess.CompletedProcess(cmd, 0, stdout=LONG_TEXT, stderr="")

        monkeypatch.setattr(pdf_text_extractor.subprocess, 'run', fake_run)
        assert pdftotext_stdout(pdf_file, ExtractionConfig()) == LONG_TEXT

    def test_non_zero_exit(self, monkeypatch, fake_tools, pdf_file):
        outputs = []

        def fake_run(cmd, **kwargs):
            outputs.append(Path(cmd[-1]))
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="Syntax Error")

        monkeypatch.setattr(pdf_text_extractor.subprocess, 'run', fake_run)
        with pytest.raises(BackendError, match="exit code 1"):
            pdftotext_layout(pdf_file, ExtractionConfig())
        assert not outputs[0].parent.exists()

    def test_not_installed(self, monkeypatch, pdf_file):
        monkeypatch.setattr(pdf_text_extractor.shutil, 'which', lambda name: None)
        with pytest.raises(BackendUnavailable):
            pdftotext_layout(pdf_file, ExtractionConfig())

    def test_timeout_recorded_by_cascade(self, monkeypatch, fake_tools, pdf_file):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs['timeout'])

        monkeypatch.setattr(pdf_text_extractor.subprocess, 'run', fake_run)
        extractor = PDFTextExtractor(
            config=ExtractionConfig(subprocess_timeout=2.0),
            backends=[('pdftotext-layout', pdftotext_layout)],
        )
        result = extractor.acquire(pdf_file)
        assert result.attempts == ["pdftotext-layout: timed out after 2.0s"]


class TestPdfplumber:
    """Tests for the pdfplumber backend with pdfplumber.open mocked."""

    def test_pages_combined(self, monkeypatch, pdf_file):
        pdf = MagicMock()
        pdf.__enter__.return_value = pdf
        pdf.pages = [
            MagicMock(**{'extract_text.return_value': "Page one"}),
            MagicMock(**{'extract_text.return_value': None}),
            MagicMock(**{'extract_text.return_value': "Page three"}),
        ]
        monkeypatch.setattr(pdf_text_extractor.pdfplumber, 'open', lambda path: pdf)
        assert pdfplumber_text(pdf_file, ExtractionConfig()) == "Page one\n\n\n\nPage three"

    def test_parse_error_becomes_backend_error(self, monkeypatch, pdf_file):
        def broken_open(path):
            raise ValueError("No /Root object")

        monkeypatch.setattr(pdf_text_extractor.pdfplumber, 'open', broken_open)
        with pytest.raises(BackendError, match="No /Root object"):
            pdfplumber_text(pdf_file, ExtractionConfig())


class TestScriptBackend:
    """Tests for the external interpreter backend."""

    def test_runs_page_text_script(self, monkeypatch, fake_tools, pdf_file):
        def fake_run(cmd, **kwargs):
            interpreter, script, pdf, output = cmd
            assert interpreter == '/usr/bin/python3'
            assert Path(script).read_text(encoding='utf-8') == PAGE_TEXT_SCRIPT
            assert pdf == str(pdf_file)
            Path(output).write_text(LONG_TEXT, encoding='utf-8')
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(pdf_text_extractor.subprocess, 'run', fake_run)
        assert script_text(pdf_file, ExtractionConfig()) == LONG_TEXT

    def test_interpreter_missing(self, monkeypatch, pdf_file):
        monkeypatch.setattr(pdf_text_extractor.shutil, 'which', lambda name: None)
        with pytest.raises(BackendUnavailable, match="python3"):
            script_text(pdf_file, ExtractionConfig())


class TestStreamScan:
    """Tests for the raw content-stream fallback."""

    def test_text_operators(self):
        assert extract_stream_fragments(CONTENT_STREAM) == [
            "Product Name: Oak Table",
            "Length (in): 24",
            "Primary Material: Oak Finishes: Matte",
        ]

    def test_small_kerning_is_not_a_space(self):
        assert extract_stream_fragments(b"[(Oa) -20 (k)] TJ") == ["Oak"]

    def test_space_threshold(self):
        assert extract_stream_fragments(b"[(Oak) -150 (Table)] TJ", space_threshold=100) == [
            "Oak Table"
        ]

    def test_escapes(self):
        assert decode_pdf_string(b"Oak \\(FSC\\) \\101\\\nend") == "Oak (FSC) Aend"

    def test_balanced_parentheses_inside_strings(self):
        """Nested parentheses need no escaping in a literal string."""
        content = b"BT (Length (in): 24) Tj [(Depth) -250 ((in): 30)] TJ ET"
        assert extract_stream_fragments(content) == ["Length (in): 24", "Depth (in): 30"]

    def test_escaped_parenthesis_does_not_nest(self):
        assert extract_stream_fragments(b"(Oak \\( FSC) Tj") == ["Oak ( FSC"]

    def test_strings_without_show_operator_ignored(self):
        assert extract_stream_fragments(b"(Helvetica) Tf (Oak) Tj [(x)] d0") == ["Oak"]

    def test_read_literal(self):
        content = b"((a (b) c)) Tj"
        assert read_literal(content, 0) == (b"(a (b) c)", 11)
        assert read_literal(b"(open", 0) == (b"open", 5)

    def test_compressed_stream(self):
        text = extract_text_from_streams(make_pdf(CONTENT_STREAM))
        assert text == "Product Name: Oak Table\nLength (in): 24\nPrimary Material: Oak Finishes: Matte"

    def test_uncompressed_stream(self):
        text = extract_text_from_streams(make_pdf(CONTENT_STREAM, compress=False))
        assert text.startswith("Product Name: Oak Table")

    def test_inflate_leaves_plain_bytes(self):
        assert inflate(b"BT (Oak) Tj ET") == b"BT (Oak) Tj ET"

    def test_no_streams(self):
        assert extract_text_from_streams(b"%PDF-1.4\n%%EOF") == ""

    def test_stream_scan_backend(self, pdf_file):
        text = stream_scan_text(pdf_file, ExtractionConfig())
        assert "Primary Material: Oak" in text
        result = PDFTextExtractor(backends=[('stream-scan', stream_scan_text)]).acquire(pdf_file)
        assert result.backend == 'stream-scan'
