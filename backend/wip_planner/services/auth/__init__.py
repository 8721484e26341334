"""Authentication, session handling and permission rules"""

from .session import create_session_token, decode_session_token, get_current_session

__all__ = ["create_session_token", "decode_session_token", "get_current_session"]
