from .auth import User, SessionToken
from .drivers import Driver
from .punches import PunchLog
from .returns import ReturnForm, ReturnItem

__all__ = [
    'User', 'SessionToken',
    'Driver',
    'PunchLog',
    'ReturnForm', 'ReturnItem',
]
