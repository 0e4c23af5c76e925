import unicodedata
from typing import Iterable, List, Tuple
from .models import Post, SortOrder


def title_sort_key(title: str) -> Tuple[str, str, str]:
    """
    Collation key approximating locale-aware title comparison.

    Titles are compared first ignoring accents and case, then by accents,
    then by case with lowercase first. The key does not depend on the
    process locale, so orderings are reproducible across machines.
    """
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), title.casefold(), title.swapcase()


def sort_posts(posts: Iterable[Post], sort_order: SortOrder) -> List[Post]:
    """
    Order posts for display.

    Posts that tie on the active key keep their input order; sorted() is
    stable in both directions.
    """
    if sort_order is SortOrder.NEWEST:
        return sorted(posts, key=lambda post: post.published_at, reverse=True)
    if sort_order is SortOrder.OLDEST:
        return sorted(posts, key=lambda post: post.published_at)
    if sort_order is SortOrder.AZ:
        return sorted(posts, key=lambda post: title_sort_key(post.title))
    if sort_order is SortOrder.ZA:
        return sorted(
            posts, key=lambda post: title_sort_key(post.title), reverse=True
        )

    # SortOrder.parse guards every public entry point
    raise ValueError(f"Unhandled sort order: {sort_order!r}")
