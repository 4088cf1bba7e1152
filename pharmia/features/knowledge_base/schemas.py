from pydantic import BaseModel


class KnowledgeBaseUpdateOut(BaseModel):
    processed: int
    chunks: int
