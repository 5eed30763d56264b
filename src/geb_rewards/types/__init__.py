from .aliases import BlockNumber, SafeHandler

__all__ = (
    "BlockNumber",
    "SafeHandler",
)
