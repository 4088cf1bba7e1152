from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    role: Literal["user", "assistant", "model"]
    content: str


class CustomChatIn(BaseModel):
    user_message: str = Field(min_length=1)
    chat_history: List[ChatTurn] = []
    context: Optional[str] = None


class ChatSource(BaseModel):
    fiche_id: int
    fiche_title: str
    section: str
    score: float


class CustomChatOut(BaseModel):
    response: str
    sources: List[ChatSource] = []
