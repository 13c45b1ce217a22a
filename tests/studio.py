from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from example import Director

if TYPE_CHECKING:
    from decimal import Decimal


class Studio:
    def __init__(self, director: Director, budget: Optional[Decimal] = None):
        self.director = director
        self.budget = budget
