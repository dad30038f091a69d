from .api_router import CommonRouter
from .default_router import DefaultRouter
from .open_router import OpenRouter
from .status_router import StatusRouter
