"""Transport abstraction — base class for chat transports.

Transports are "dumb pipes": they parse commands, call the analytics
layer and send back the rendered text. No calculation happens here.
"""

import logging
from abc import ABC, abstractmethod

log = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract base class for message transports."""

    @abstractmethod
    async def start(self) -> None:
        """Start the transport (connect, listen for messages)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Gracefully stop the transport."""
        ...

    @abstractmethod
    async def send_message(self, user_id: int, text: str) -> None:
        """Send a text message to a user."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport identifier (e.g., 'telegram')."""
        ...
