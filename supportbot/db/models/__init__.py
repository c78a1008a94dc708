from .chat_session import ChatSession
from .inappropriate_log import InappropriateLog
from .message import Message
from .unknown_question import UnknownQuestion

__all__ = ["ChatSession", "InappropriateLog", "Message", "UnknownQuestion"]
