from typing import Protocol


class Product(Protocol):
    def get_price(self) -> float: ...
