import pytest

from codex_oauth import CodexOAuthManager, CodexTokenStore, TokenCipher
from tests.helpers import mock_client, no_network


@pytest.fixture
def cipher() -> TokenCipher:
    return TokenCipher.from_secret("test-secret")


@pytest.fixture
def token_file(tmp_path):
    return tmp_path / "codex" / "tokens.json"


@pytest.fixture
def store(token_file, cipher) -> CodexTokenStore:
    return CodexTokenStore(token_file=token_file, cipher=cipher)


@pytest.fixture
def make_manager(store):
    def _make(handler=None, **kwargs) -> CodexOAuthManager:
        return CodexOAuthManager(storage=store, client=mock_client(handler or no_network), **kwargs)

    return _make
