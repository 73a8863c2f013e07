from .chat import install_error_handlers
from .chat import router as chat_router

__all__ = ["chat_router", "install_error_handlers"]
