from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from tools.llm_tools import get_llm
from tools.resume_tools import decode_data_uri, extract_text_from_resume

NOT_SPECIFIED = "Not specified"


class ExtractResumeInfoInput(BaseModel):
    fileDataUri: str = Field(
        ...,
        description="A resume file (PDF, DOC, DOCX), as a data URI that must include a MIME type and use Base64 encoding. "
                    "Expected format: 'data:<mimetype>;base64,<encoded_data>'.",
    )


class ExtractResumeInfoOutput(BaseModel):
    name: str = Field(..., description="The full name of the candidate, 'Not specified' if not found.")
    email: str = Field(..., description="The email address of the candidate, 'Not specified' if not found.")
    phone: str = Field(..., description="The phone number of the candidate, 'Not specified' if not found.")
    resumeText: str = Field(..., description="The full text of the resume with its original line breaks; empty if the file is not a readable resume.")


class ResumeContactDetails(BaseModel):
    isResume: bool = Field(..., description="True if the text is a resume or CV, false for any other kind of document.")
    name: str = Field(..., description="The full name of the candidate. Use 'Not specified' if not found.")
    email: str = Field(..., description="The email address of the candidate. Use 'Not specified' if not found.")
    phone: str = Field(..., description="The phone number of the candidate. Use 'Not specified' if not found.")


EXTRACT_RESUME_PROMPT = ChatPromptTemplate.from_template(
    """You are an expert resume parser. Extract the candidate's full name, email address and phone number from the resume text below.

If a field is not present in the resume, return 'Not specified' for that field.
If the text does not appear to be a resume (for example an invoice, a letter or an article), set isResume to false and return 'Not specified' for all fields. Do not invent values.

{format_instructions}

Resume Text:
---
{resume_text}
---"""
)


def _not_specified_output(resume_text: str = "") -> ExtractResumeInfoOutput:
    return ExtractResumeInfoOutput(
        name=NOT_SPECIFIED,
        email=NOT_SPECIFIED,
        phone=NOT_SPECIFIED,
        resumeText=resume_text,
    )


async def extract_resume_info(input_data: ExtractResumeInfoInput) -> ExtractResumeInfoOutput:
    """
    Flow: read a resume data URI and return the candidate's contact details and resume text.
    Unreadable files or non-resumes come back as 'Not specified' fields with empty text.
    """
    mime_type, content = decode_data_uri(input_data.fileDataUri)
    print(f"[Agent1] Extracting resume info from {mime_type} file ({len(content)} bytes)")

    resume_text = extract_text_from_resume(mime_type, content)
    if not resume_text.strip():
        print("[Agent1] No readable text in resume file")
        return _not_specified_output()

    parser = PydanticOutputParser(pydantic_object=ResumeContactDetails)
    llm = get_llm(temperature=0.0, max_tokens=512)
    chain = EXTRACT_RESUME_PROMPT.partial(format_instructions=parser.get_format_instructions()) | llm | parser

    details = await chain.ainvoke({"resume_text": resume_text[:12000]})
    if not details.isResume:
        print("[Agent1] File does not appear to be a resume")
        return _not_specified_output()

    result = ExtractResumeInfoOutput(
        name=details.name.strip() or NOT_SPECIFIED,
        email=details.email.strip() or NOT_SPECIFIED,
        phone=details.phone.strip() or NOT_SPECIFIED,
        resumeText=resume_text,
    )
    print(f"[Agent1] Extracted resume info for {result.name}")
    return result
