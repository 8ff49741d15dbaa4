from .mongodb import Database

__all__ = ["Database"]
