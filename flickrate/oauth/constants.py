"""Constants for the OAuth 1.0a handshake and request signing."""

# Provider endpoints
OAUTH_BASE_URL = "https://www.flickr.com/services/oauth/"
REQUEST_TOKEN_URL = OAUTH_BASE_URL + "request_token"
AUTHORIZE_URL = OAUTH_BASE_URL + "authorize"
ACCESS_TOKEN_URL = OAUTH_BASE_URL + "access_token"  # noqa: S105

# Fixed protocol values
HTTP_METHOD = "GET"
SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
DEFAULT_PERMS = "read"

# Parameter names
PARAM_CALLBACK = "oauth_callback"
PARAM_CALLBACK_CONFIRMED = "oauth_callback_confirmed"
PARAM_CONSUMER_KEY = "oauth_consumer_key"
PARAM_NONCE = "oauth_nonce"
PARAM_SIGNATURE = "oauth_signature"
PARAM_SIGNATURE_METHOD = "oauth_signature_method"
PARAM_TIMESTAMP = "oauth_timestamp"
PARAM_TOKEN = "oauth_token"
PARAM_TOKEN_SECRET = "oauth_token_secret"  # noqa: S105
PARAM_VERIFIER = "oauth_verifier"
PARAM_VERSION = "oauth_version"
PARAM_USER_NSID = "user_nsid"
PARAM_USERNAME = "username"

# Callback listener
CALLBACK_HOST = "127.0.0.1"
CALLBACK_PATH = "/oauth"

# Nonce entropy in bytes (hex-encoded, so twice as many characters)
NONCE_BYTES = 16

# Seconds to wait for the provider to redirect back before giving up
DEFAULT_VERIFIER_TIMEOUT_SECONDS = 300.0

# Log component name
COMPONENT_OAUTH = "oauth"
