"""
LLM Tools
Shared access to the hosted chat model used by every interview flow.
Reads the Groq credentials and model name from the environment (.env supported).
"""

import os
from dotenv import load_dotenv
from langchain_groq import ChatGroq

# Load environment variables
load_dotenv()
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("ASSESS_AI_MODEL", "llama-3.3-70b-versatile")

if not GROQ_API_KEY:
    print("[llm_tools Error] GROQ_API_KEY not found")


def get_llm(temperature: float = 0.2, max_tokens: int = 2048) -> ChatGroq:
    """
    Build the chat model for a single flow invocation.

    Args:
        temperature: Sampling temperature for the flow
        max_tokens: Upper bound on the completion length

    Returns:
        ChatGroq: Configured chat model

    Raises:
        Exception: If the client cannot be initialized (e.g. missing API key)
    """
    return ChatGroq(
        model=GROQ_MODEL,
        api_key=GROQ_API_KEY,
        temperature=temperature,
        max_tokens=max_tokens,
    )
