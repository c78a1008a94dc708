from pydantic import BaseModel, Field
from typing import Optional

class ChatRequest(BaseModel):
    session_id: str = Field(..., min_length=1, description="Unique identifier for the chat session")
    message: str = Field(..., min_length=1, description="User's message to the chatbot")
    user_email: Optional[str] = Field(default=None, description="Email the session was opened with")
