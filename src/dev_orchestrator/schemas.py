from typing import Dict, Any
from pydantic import BaseModel

class CreateTaskRequest(BaseModel):
    payload: Dict[str, Any] = {}
