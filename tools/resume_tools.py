"""
Resume Tools
Handles uploaded resume files: validation, data URI encoding, and plain-text extraction.
Text extraction is delegated to pdfplumber (PDF) and python-docx (DOCX).
"""

import base64
import binascii
import re
from io import BytesIO
from pathlib import Path
from typing import Tuple
from urllib.parse import quote

import pdfplumber
from docx import Document

MAX_RESUME_SIZE = 5 * 1024 * 1024  # 5MB

RESUME_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
MIME_EXTENSIONS = {mime: ext.lstrip(".") for ext, mime in RESUME_MIME_TYPES.items()}

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w-]+=[^;,]*)*;base64,(?P<data>.*)$", re.DOTALL)


class ResumeFileError(ValueError):
    """Raised for uploads that cannot be accepted as a resume."""


class ResumeFileTooLargeError(ResumeFileError):
    """Raised when an upload exceeds the 5MB limit."""


def validate_resume_upload(filename: str, content: bytes) -> str:
    """
    Check an uploaded resume and return its MIME type.

    Args:
        filename: Original filename as sent by the browser
        content: Raw file bytes

    Returns:
        str: MIME type derived from the file extension

    Raises:
        ResumeFileError: If the file type is not PDF, DOC or DOCX, or the file is empty
        ResumeFileTooLargeError: If the file exceeds 5MB
    """
    extension = Path(filename or "").suffix.lower()
    if extension not in RESUME_MIME_TYPES:
        raise ResumeFileError("File must be .pdf, .doc, or .docx format")
    if not content:
        raise ResumeFileError("Uploaded file is empty")
    if len(content) > MAX_RESUME_SIZE:
        raise ResumeFileTooLargeError("File size cannot exceed 5MB.")
    return RESUME_MIME_TYPES[extension]


def encode_data_uri(content: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """Split a base64 data URI into (mime_type, raw bytes)."""
    match = DATA_URI_PATTERN.match(data_uri or "")
    if not match:
        raise ResumeFileError("Expected a base64 data URI: 'data:<mimetype>;base64,<encoded_data>'")
    try:
        content = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ResumeFileError(f"Invalid base64 payload: {e}")
    return match.group("mime") or "application/octet-stream", content


def _extract_text_from_pdf(content: bytes) -> str:
    with pdfplumber.open(BytesIO(content)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


def _extract_text_from_word(content: bytes) -> str:
    """Paragraphs first, then tables flattened row by row."""
    doc = Document(BytesIO(content))
    lines = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            row_text = " ".join(cell.text.strip() for cell in row.cells if cell.text.strip())
            if row_text:
                lines.append(row_text)
    return "\n".join(lines)


def extract_text_from_resume(mime_type: str, content: bytes) -> str:
    """
    Extract the text of a resume file, keeping its line breaks.

    Returns:
        str: Extracted text, empty string if the file type has no text extractor or is unreadable
    """
    try:
        if mime_type == RESUME_MIME_TYPES[".pdf"]:
            text = _extract_text_from_pdf(content)
        elif mime_type == RESUME_MIME_TYPES[".docx"]:
            text = _extract_text_from_word(content)
        else:
            print(f"[extract_text_from_resume] No text extractor for {mime_type}")
            return ""
    except Exception as e:
        print(f"[extract_text_from_resume] Could not read {mime_type} file: {e}")
        return ""

    print(f"[extract_text_from_resume] Extracted {len(text)} characters from {mime_type} file")
    return text


def resume_download_name(candidate_name: str, data_uri: str) -> str:
    """Filename offered when downloading a candidate's original resume."""
    mime_type = data_uri.split(";", 1)[0].removeprefix("data:")
    extension = MIME_EXTENSIONS.get(mime_type) or mime_type.split("/")[-1] or "bin"
    safe_name = re.sub(r"\s+", "_", candidate_name.strip())
    return f"resume-{safe_name}.{extension}"


def attachment_header(filename: str) -> str:
    """
    Content-Disposition value for a download: an ASCII-only filename fallback
    plus the UTF-8 name as filename* (RFC 5987).
    """
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
