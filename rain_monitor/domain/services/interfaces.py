from abc import ABC, abstractmethod


class INotificationChannel(ABC):
    """
    Interface for an outbound notification channel (Telegram, email).
    Implementations never raise on delivery failure - they log and return False.
    """
    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    async def send(self, subject: str, text: str, html: str) -> bool:
        """Deliver one message. Channels pick the body format they support."""
        pass
