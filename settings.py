from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "info")

# Codex API base URL (the adapter appends /responses)
CODEX_URL = config.get("CODEX_URL", "https://chatgpt.com/backend-api/codex")

# OAuth callback port for the browser PKCE flow (CLI login)
CODEX_OAUTH_PORT = config.get("CODEX_OAUTH_PORT", 9876)

# OAuth callback route for the web-based login
CODEX_CALLBACK_ROUTE = config.get("CODEX_CALLBACK_ROUTE", "/auth/codex/callback")

# Token storage
CODEX_TOKEN_FILE = config.get("CODEX_TOKEN_FILE", str(Path.home() / ".codex-oauth-bridge" / "tokens.json"))
CODEX_KEY_FILE = config.get("CODEX_KEY_FILE", str(Path.home() / ".codex-oauth-bridge" / "token.key"))
# Optional passphrase; when set the encryption key is derived from it instead of CODEX_KEY_FILE
CODEX_TOKEN_SECRET = config.get("CODEX_TOKEN_SECRET", "")

# Timeout configuration
# Token and device-auth calls to auth.openai.com
OAUTH_TIMEOUT = config.get("OAUTH_TIMEOUT", 30.0)
# Connection timeout for the upstream Codex endpoint
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
# Total timeout for the (always streaming) upstream Codex request
STREAM_TIMEOUT = config.get("STREAM_TIMEOUT", 300.0)
# How long the CLI waits for the browser redirect
CALLBACK_TIMEOUT = config.get("CALLBACK_TIMEOUT", 120)
# Wall-clock budget for device authorization polling
DEVICE_AUTH_TIMEOUT = config.get("DEVICE_AUTH_TIMEOUT", 300)

# Web server (hosts the redirect/callback login routes)
PORT = config.get("PORT", 8081)
BIND_ADDRESS = config.get("BIND_ADDRESS", "127.0.0.1")
