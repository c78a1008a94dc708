from pydantic import BaseModel, Field
from typing import List


class ChatAction(BaseModel):
    type: str
    label: str
    url: str


class ChatResponse(BaseModel):
    session_id : str = Field(..., description="Unique identifier for the chat session")
    reply: str = Field(..., description="Chatbot's reply to the user's message")
    category: str = Field(default="general", description="Category the user's message fell into")
    actions: List[ChatAction] = Field(default_factory=list)
