"""
OpenAI OAuth constants for Codex (from openai/codex CLI)
"""

# OAuth Configuration
OAUTH_ISSUER = "https://auth.openai.com"
CLIENT_ID = "app_EMoamEEZ73f0CkXaXp7hrann"
SCOPES = "openid profile email offline_access"

AUTHORIZE_URL = f"{OAUTH_ISSUER}/oauth/authorize"
TOKEN_URL = f"{OAUTH_ISSUER}/oauth/token"

# Device authorization (headless login)
DEVICE_USERCODE_URL = f"{OAUTH_ISSUER}/api/accounts/deviceauth/usercode"
DEVICE_TOKEN_URL = f"{OAUTH_ISSUER}/api/accounts/deviceauth/token"
DEVICE_AUTH_REDIRECT_URI = f"{OAUTH_ISSUER}/deviceauth/callback"
DEVICE_VERIFICATION_URL = f"{OAUTH_ISSUER}/codex/device"
# Added to the server-provided interval between polls
DEVICE_POLL_SAFETY_MARGIN = 3

# JWT claim locations for the ChatGPT account ID
JWT_AUTH_CLAIM = "https://api.openai.com/auth"
CHATGPT_ACCOUNT_ID_CLAIM = "chatgpt_account_id"

# Browser flow callback path served by the local listener
OAUTH_CALLBACK_PATH = "/auth/callback"

# Seconds before expiry at which a token is refreshed
EXPIRY_BUFFER_SECONDS = 60
# Used when the token endpoint omits expires_in
DEFAULT_EXPIRES_IN = 3600
