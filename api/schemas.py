from typing import List

from pydantic import BaseModel


class RecognizeRequest(BaseModel):
    image_urls: List[str] = []


class ErrorResponse(BaseModel):
    reason: str
