import math
from dataclasses import dataclass


@dataclass
class Page:
    """1-indexed page request."""
    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": math.ceil(total / self.limit) if self.limit else 0,
        }
