from .driver import GamsDriver

__all__ = ["GamsDriver"]
