from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict

TaskId = Union[int, str]

class TaskStatus(str, Enum):
    PENDING = "pending"
    CLAIMED = "claimed"
    COMPLETED = "completed"
    FAILED = "failed"

class Task(BaseModel):
    """Read-only snapshot of an orchestrator task. Unknown fields are kept but unused."""
    model_config = ConfigDict(extra="allow", frozen=True)

    id: TaskId
    status: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == TaskStatus.PENDING.value

class StatusUpdate(BaseModel):
    status: TaskStatus

class FetchOutcome(str, Enum):
    OK = "ok"
    MALFORMED = "malformed"
    ERROR = "error"

class TaskListing(BaseModel):
    tasks: List[Task] = []
    outcome: FetchOutcome = FetchOutcome.OK
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is FetchOutcome.OK

class ClaimOutcome(str, Enum):
    CLAIMED = "claimed"
    # 404/409: someone else won or the listing was stale
    CONTENDED = "contended"
    REJECTED = "rejected"
    ERROR = "error"
