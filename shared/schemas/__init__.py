"""Pydantic v2 schemas shared between the API and its clients."""

from .peis import *  # noqa: F401,F403
from .activities import *  # noqa: F401,F403
from .files import *  # noqa: F401,F403
from .sessions import *  # noqa: F401,F403
