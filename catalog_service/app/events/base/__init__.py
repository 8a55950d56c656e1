"""
Catalog Service event envelope and publisher interface.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseEvent(BaseModel):
    """Envelope shared by every event the service emits"""

    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    event_type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = "1.0"
    source_service: str = "catalog-service"
    correlation_id: Optional[str] = None
    data: Dict[str, Any] = {}

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class EventPublisher(ABC):
    """Abstract base class for event publishers"""

    @abstractmethod
    async def publish(self, event: BaseEvent, topic: str) -> None:
        """Publish an event to a topic"""
        pass
