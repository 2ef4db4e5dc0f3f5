"""Read-only catalog queries: content listing and plans."""

from mediagate.models import Content, Plan
from mediagate.repositories.interfaces import ContentFilter, Repositories

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def clamp_page(limit: int, offset: int) -> tuple[int, int]:
    """Bound page size to [1, MAX_PAGE_SIZE] and offset to >= 0."""
    if limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    return min(limit, MAX_PAGE_SIZE), max(offset, 0)


class CatalogService:
    def __init__(self, repositories: Repositories):
        self.repos = repositories

    def list_content(
        self,
        content_filter: ContentFilter,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> tuple[list[Content], int]:
        limit, offset = clamp_page(limit, offset)
        return self.repos.contents.list(content_filter, limit, offset)

    def list_plans(self, active_only: bool = True) -> list[Plan]:
        return self.repos.plans.list(active_only=active_only)

    def get_plan(self, plan_id: str) -> Plan:
        return self.repos.plans.get_by_id(plan_id)
