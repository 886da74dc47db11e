"""
Coach schemas - parent conversations about one linked child.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class CoachChatRequest(BaseModel):
    child_id: uuid.UUID
    message: str = Field(..., min_length=1, max_length=4000)
    session_id: Optional[uuid.UUID] = None
