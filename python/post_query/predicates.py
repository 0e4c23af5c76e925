from typing import AbstractSet
from colored_logger import get_colored_logger
from .models import Post, QueryState, TagMatchPolicy

logger = get_colored_logger(__name__)


def matches_search(query: str, post: Post) -> bool:
    """
    Check whether a free-text query occurs in a post's title or description.

    Matching is a plain substring test after lowercasing both sides. The
    query is not trimmed or tokenized, and accents are compared as-is.

    :param query: The search text. An empty query matches every post.
    :param post: The post to test.
    :return: True if the query is found in the title or the description.
    """
    if not query:
        return True

    needle = query.lower()
    return needle in post.title.lower() or needle in post.description.lower()


def matches_tags(
    selected_tags: AbstractSet[str],
    post: Post,
    policy: TagMatchPolicy = TagMatchPolicy.ANY,
) -> bool:
    """
    Check a post's tags against the current tag selection.

    :param selected_tags: Tags chosen by the user. Empty selects everything.
    :param post: The post to test.
    :param policy: ANY needs one selected tag on the post, ALL needs every one.
    :return: True if the post satisfies the selection under the policy.
    """
    if not selected_tags:
        return True

    if not post.tags:
        return False

    if policy is TagMatchPolicy.ALL:
        return all(tag in post.tags for tag in selected_tags)
    return any(tag in post.tags for tag in selected_tags)


def matches_query(
    state: QueryState, post: Post, policy: TagMatchPolicy = TagMatchPolicy.ANY
) -> bool:
    """Combined filter: the search AND the tag selection must both accept the post."""
    matched = matches_search(state.search_text, post) and matches_tags(
        state.selected_tags, post, policy
    )
    if not matched:
        logger.trace("Post '%s' excluded by current query", post.id)
    return matched
