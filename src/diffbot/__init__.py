from .batching.pending import PendingResult as PendingResult
from .batching.pending import ResolutionState as ResolutionState
from .client import Diffbot as Diffbot
from .config import DiffbotSettings as DiffbotSettings
from .constants import __version__ as __version__
from .exceptions import APIError as APIError
from .exceptions import AuthorizationError as AuthorizationError
from .exceptions import BatchError as BatchError
from .exceptions import ConfigurationError as ConfigurationError
from .exceptions import DiffbotError as DiffbotError
from .exceptions import ParseError as ParseError
from .exceptions import ResolutionError as ResolutionError
from .exceptions import ServerError as ServerError
from .models import Article as Article
from .models import Classified as Classified
from .models import Frontpage as Frontpage
from .models import Images as Images
from .models import PageType as PageType
from .models import Products as Products

__all__ = [
    "Diffbot",
    "DiffbotSettings",
    "PendingResult",
    "ResolutionState",
    "Article",
    "Classified",
    "Frontpage",
    "Images",
    "PageType",
    "Products",
    "DiffbotError",
    "ConfigurationError",
    "AuthorizationError",
    "ServerError",
    "ParseError",
    "APIError",
    "BatchError",
    "ResolutionError",
    "__version__",
]
