"""Exceptions raised by the Codex OAuth and provider layers"""

from typing import Optional


class CodexAuthError(RuntimeError):
    """Base class for Codex authentication failures"""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationRequired(CodexAuthError):
    """No usable token is stored; the user has to log in"""


class AuthExchangeFailed(CodexAuthError):
    """The issuer rejected an authorization code exchange"""


class RefreshFailed(CodexAuthError):
    """The issuer rejected a refresh token grant"""


class DeviceAuthError(CodexAuthError):
    """Device authorization could not be started or was rejected"""


class ProviderRequestError(RuntimeError):
    """Non-2xx response from the upstream Codex endpoint"""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_type: Optional[str] = None,
        provider: str = "Codex",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.provider = provider

    def __str__(self) -> str:
        return f"{self.provider} request failed ({self.status_code}): {self.args[0]}"
