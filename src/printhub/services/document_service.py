"""
Document Service - Upload validation and page counting.

Page counts feed the pricing engine as total_pages:
- PDF: number of pages reported by pdfminer
- DOCX: about 250 words per page, at least 1
- PPTX: one page per slide
- Images: 1
A document that cannot be read counts as a single page.
"""
import io
import logging
import math
import re
import zipfile
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable

from pdfminer.pdfpage import PDFPage

from ..utils.formatters import format_file_size
from .catalog_service import ValidationResult

logger = logging.getLogger(__name__)

WORDS_PER_PAGE = 250
IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png')

_SLIDE_RE = re.compile(r"^ppt/slides/slide\d+\.xml$")
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class DocumentInfo:
    name: str
    extension: str
    size: int
    pages: int

    @property
    def size_text(self) -> str:
        return format_file_size(self.size)


def file_extension(filename: str) -> str:
    return PurePath(filename or "").suffix.lstrip('.').lower()


def validate_upload(filename: str, size: int, max_bytes: int, extensions: Iterable[str]) -> ValidationResult:
    """Check an upload's size and extension before it is stored or counted."""
    result = ValidationResult(valid=True)
    extensions = tuple(extensions)

    if not filename:
        result.add_error("No file selected")
        return result

    if size > max_bytes:
        result.add_error(f"File too large. Maximum size is {format_file_size(max_bytes)}.")

    if file_extension(filename) not in extensions:
        supported = ", ".join(e.upper() for e in extensions if e != 'jpeg')
        result.add_error(f"Unsupported format. Supported: {supported}")

    return result


def _pdf_page_count(content: bytes) -> int:
    return sum(1 for _ in PDFPage.get_pages(io.BytesIO(content), check_extractable=False))


def _docx_page_count(content: bytes) -> int:
    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        xml = archive.read('word/document.xml').decode('utf-8', errors='replace')
    words = len(_TAG_RE.sub(' ', xml).split())
    return max(1, math.ceil(words / WORDS_PER_PAGE))


def _pptx_page_count(content: bytes) -> int:
    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        slides = [n for n in archive.namelist() if _SLIDE_RE.match(n)]
    return max(1, len(slides))


_COUNTERS = {
    'pdf': _pdf_page_count,
    'docx': _docx_page_count,
    'pptx': _pptx_page_count,
}


def detect_page_count(filename: str, content: bytes) -> int:
    """Count (or estimate) the printable pages of a document."""
    ext = file_extension(filename)
    counter = _COUNTERS.get(ext)
    if counter is None:
        return 1

    try:
        pages = counter(content)
    except Exception as e:
        # Unreadable uploads count as one page
        logger.warning("Could not read %s (%s): %s", filename, ext, e)
        return 1

    return pages if pages > 0 else 1


def inspect_document(filename: str, content: bytes) -> DocumentInfo:
    return DocumentInfo(
        name=filename,
        extension=file_extension(filename),
        size=len(content),
        pages=detect_page_count(filename, content),
    )
