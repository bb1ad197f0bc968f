"""SQL fragments for article queries."""

from typing import Any, List, Tuple

from ..query.filters import ArticleQuery, SortKey

SORT_COLUMNS = {
    SortKey.TREND: "a.trend_score",
    SortKey.LIKES: "a.likes_count",
    SortKey.BOOKMARKS: "a.bookmarks_count",
    SortKey.LATEST: "a.published_at",
}


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_article_filter(query: ArticleQuery) -> Tuple[str, List[Any]]:
    """
    Build one conjunctive WHERE clause over ``articles a JOIN media_sources ms``.

    Inactive sources are always excluded, whatever the media filter says.

    Returns:
        Tuple of (where_sql, params)
    """
    conditions = ["ms.is_active = TRUE"]
    params: List[Any] = []

    if query.media_names:
        conditions.append("ms.name = ANY(%s)")
        params.append(list(query.media_names))

    if query.since is not None:
        conditions.append("a.published_at >= %s")
        params.append(query.since)

    if query.search:
        pattern = f"%{escape_like(query.search)}%"
        conditions.append("(a.title ILIKE %s OR a.description ILIKE %s)")
        params.extend([pattern, pattern])

    if query.article_ids is not None:
        conditions.append("a.id = ANY(%s)")
        params.append(list(query.article_ids))

    return " AND ".join(conditions), params


def order_by_clause(sort: SortKey) -> str:
    """Descending order for a sort key, newest id first on ties."""
    return f"{SORT_COLUMNS[SortKey(sort)]} DESC, a.id DESC"
