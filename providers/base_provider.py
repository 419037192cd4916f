"""
Provider interfaces.
Defines the contract text providers follow and the token supplier they are given.
"""
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Optional, Protocol, Tuple, Union

from codex_compat.models import TextRequest


class TokenSupplier(Protocol):
    """Anything that can hand out a currently valid bearer token"""

    async def get_auth_credentials(self) -> Tuple[Optional[str], Optional[str]]:
        """Return (access_token, account_id); access_token is None when not logged in"""
        ...


class BaseProvider(ABC):
    """Abstract base class for text providers"""

    @abstractmethod
    async def text(
        self,
        request: TextRequest,
        request_id: Optional[str] = None,
    ) -> Union[Dict[str, Any], str]:
        """Send a request and return the single completed response

        Args:
            request: Generic text request
            request_id: Request ID for logging

        Returns:
            The provider's response object
        """

    @abstractmethod
    def stream(
        self,
        request: TextRequest,
        request_id: Optional[str] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """Send a request and yield provider events as they arrive

        Args:
            request: Generic text request
            request_id: Request ID for logging

        Yields:
            Decoded provider events
        """
