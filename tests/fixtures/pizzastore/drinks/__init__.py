from .drink import Drink

__all__ = ["Drink"]
