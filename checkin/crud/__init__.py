from .ticket import ticket
from .badge import badge

__all__ = ["ticket", "badge"]
