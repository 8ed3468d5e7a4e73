"""
Endpoints, wire field names and client defaults for the Diffbot API.
"""

__version__ = "1.1.0"

USER_AGENT = f"diffbot-python-sdk/{__version__}"

API_ROOT = "https://api.diffbot.com"
WWW_ROOT = "https://www.diffbot.com"

ARTICLE_ENDPOINT = f"{API_ROOT}/v2/article"
IMAGE_ENDPOINT = f"{API_ROOT}/v2/image"
PRODUCT_ENDPOINT = f"{API_ROOT}/v2/product"
CLASSIFIER_ENDPOINT = f"{API_ROOT}/v2/analyze"
FRONTPAGE_ENDPOINT = f"{WWW_ROOT}/api/frontpage"
BATCH_ENDPOINT = f"{WWW_ROOT}/api/batch"

TOKEN_ENV_VAR = "DIFFBOT_TOKEN"

HTTP_OK = 200
HTTP_UNAUTHORIZED = 401

# Query parameters
TOKEN = "token"
URL = "url"
FIELDS = "fields"
TIMEOUT = "timeout"
MODE = "mode"
STATS = "stats"
FORMAT = "format"
BATCH = "batch"

# Response fields and headers
APPLICATION_JSON = "application/json"
CONTENT_TYPE = "Content-Type"
STATUS_CODE = "statusCode"
MESSAGE = "message"
ERROR_CODE = "errorCode"
ERROR = "error"

DEFAULT_MAX_BATCH_REQUEST = 25
MAX_BATCH_REQUEST_LIMIT = 50
DEFAULT_BATCH_REQUEST_TIMEOUT = 300.0
DEFAULT_READ_TIMEOUT = 20.0
DEFAULT_CONCURRENT_BATCH_REQUEST = 1
