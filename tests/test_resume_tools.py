from io import BytesIO

import pytest
from docx import Document

from tools.resume_tools import (
    MAX_RESUME_SIZE,
    RESUME_MIME_TYPES,
    ResumeFileError,
    ResumeFileTooLargeError,
    validate_resume_upload,
    encode_data_uri,
    decode_data_uri,
    extract_text_from_resume,
    resume_download_name,
    attachment_header,
)


@pytest.mark.parametrize("filename", ["cv.pdf", "CV.DOCX", "old resume.doc"])
def test_accepts_supported_resume_types(filename):
    mime_type = validate_resume_upload(filename, b"%PDF-1.4 content")
    assert mime_type in RESUME_MIME_TYPES.values()


def test_rejects_unsupported_type():
    with pytest.raises(ResumeFileError, match="pdf"):
        validate_resume_upload("resume.txt", b"plain text")


def test_rejects_file_over_5mb():
    with pytest.raises(ResumeFileTooLargeError):
        validate_resume_upload("resume.pdf", b"x" * (MAX_RESUME_SIZE + 1))


def test_data_uri_keeps_mime_type_and_bytes():
    content = b"\x00\x01binary\xff"
    mime_type, decoded = decode_data_uri(encode_data_uri(content, RESUME_MIME_TYPES[".pdf"]))

    assert mime_type == "application/pdf"
    assert decoded == content


def test_rejects_data_uri_without_base64_payload():
    with pytest.raises(ResumeFileError):
        decode_data_uri("data:application/pdf,plain")


def test_docx_text_is_returned_verbatim():
    doc = Document()
    for line in ["", "Jane Doe", "Python developer", ""]:
        doc.add_paragraph(line)
    buffer = BytesIO()
    doc.save(buffer)

    text = extract_text_from_resume(RESUME_MIME_TYPES[".docx"], buffer.getvalue())

    assert text == "\nJane Doe\nPython developer\n"


def test_unreadable_pdf_yields_empty_text():
    assert extract_text_from_resume(RESUME_MIME_TYPES[".pdf"], b"not really a pdf") == ""


def test_download_name_uses_candidate_name_and_file_type():
    docx_uri = encode_data_uri(b"abc", RESUME_MIME_TYPES[".docx"])
    pdf_uri = encode_data_uri(b"abc", RESUME_MIME_TYPES[".pdf"])

    assert resume_download_name("Jane  Mary Doe", docx_uri) == "resume-Jane_Mary_Doe.docx"
    assert resume_download_name("Jane", pdf_uri) == "resume-Jane.pdf"


def test_attachment_header_is_ascii_with_utf8_name():
    header = attachment_header('resume-Zoë_"JD".pdf')

    header.encode("latin-1")
    assert 'filename="resume-Zo___JD_.pdf"' in header
    assert "filename*=UTF-8''resume-Zo%C3%AB_%22JD%22.pdf" in header
