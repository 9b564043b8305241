# app/models.py
from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, Field

class ChatRequest(BaseModel):
    # roles and content are not validated here, the history sanitizer
    # drops malformed entries and a non-list counts as empty
    messages: Any = None

class ChatReply(BaseModel):
    reply: str

class ConversationTurn(BaseModel):
    text: str

class Profile(BaseModel):
    name: str
    age: Union[int, float, str]
    height: Union[int, float, str]
    weight: Union[int, float, str]

class SettingsUpdate(BaseModel):
    theme: Optional[Literal["light", "dark"]] = None
    fontSize: Optional[int] = Field(default=None, ge=12, le=24)

class DateFilter(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None

class MetricSummary(BaseModel):
    average: Optional[float] = None
    latest: Optional[float] = None
    status: str = "normal"
    status_text: str = "normal"
