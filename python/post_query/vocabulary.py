from typing import Dict, Iterable, List, Set
from colored_logger import get_colored_logger
from .models import Post

logger = get_colored_logger(__name__)


def extract_tag_vocabulary(posts: Iterable[Post]) -> List[str]:
    """
    Collect the distinct tags used across a collection of posts.

    Args:
        posts: Posts to scan. Posts without tags contribute nothing.

    Returns:
        Tags sorted ascending by code point, without duplicates.
    """
    tags: Set[str] = set()
    for post in posts:
        tags.update(post.tags)

    vocabulary = sorted(tags)
    logger.trace("Extracted vocabulary of %d tag(s)", len(vocabulary))
    return vocabulary


def count_tags(posts: Iterable[Post]) -> Dict[str, int]:
    """
    Count how many posts carry each tag, keyed in vocabulary order.

    A tag listed twice on the same post is counted once for that post.
    """
    counts: Dict[str, int] = {}
    for post in posts:
        for tag in set(post.tags):
            counts[tag] = counts.get(tag, 0) + 1

    return {tag: counts[tag] for tag in sorted(counts)}
