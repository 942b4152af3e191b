# sketchverse/schemas/message.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

MessageType = Literal["guess", "system", "hint", "correct"]


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    text: str
    type: MessageType
    created_at: datetime


class HintOut(BaseModel):
    applied: bool
    message: Optional[MessageOut] = None
