"""utils package – Reusable helper functions and the entity event emitter."""

from .helpers import clamp, safe_ratio
from .events import EventEmitter
