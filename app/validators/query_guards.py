import re
from typing import Any, Mapping, Optional

from app.config.settings import settings
from app.schemas.student_schemas import PaginationParams, SearchCheck
from app.utils.string_utils import MAX_SQL_INTEGER, to_int, to_str

SEARCH_DENYLIST = (
    re.compile(r"['\";\\]"),
    re.compile(r"\b(DROP|DELETE|INSERT|UPDATE|SELECT)\b", re.IGNORECASE),
)


class PaginationGuard:
    """Clamps listing parameters into usable values; never rejects input."""

    def __init__(
        self,
        default_limit: Optional[int] = None,
        max_limit: Optional[int] = None,
    ):
        self.default_limit = default_limit or settings.DEFAULT_PAGE_SIZE
        self.max_limit = max_limit or settings.MAX_PAGE_SIZE

    def normalize(self, params: Mapping[str, Any]) -> PaginationParams:
        page = to_int(params.get("page"))
        limit = to_int(params.get("limit"))
        # A zero or unparsable limit falls back to the default, like a missing one
        if not limit:
            limit = self.default_limit

        limit = min(self.max_limit, max(1, limit))
        # Keep the OFFSET (page - 1) * limit bindable
        page = min(max(1, page or 1), MAX_SQL_INTEGER // limit)

        return PaginationParams(
            page=page,
            limit=limit,
            search=to_str(params.get("search")),
        )


class SearchGuard:
    """
    Rejects over-long search strings and ones that look like SQL injection.

    The denylist is a first filter only; the repository binds the term as a
    query parameter regardless.
    """

    def __init__(self, max_length: Optional[int] = None):
        self.max_length = max_length or settings.MAX_SEARCH_LENGTH

    def check(self, search: Any) -> SearchCheck:
        if not search or not isinstance(search, str):
            return SearchCheck(is_valid=True, search="")

        trimmed = search.strip()
        if len(trimmed) > self.max_length:
            return SearchCheck(
                is_valid=False,
                error=f"Search keyword must be at most {self.max_length} characters",
            )

        for pattern in SEARCH_DENYLIST:
            if pattern.search(trimmed):
                return SearchCheck(
                    is_valid=False, error="Search keyword contains illegal characters"
                )

        return SearchCheck(is_valid=True, search=trimmed)
