import time
from typing import FrozenSet, Iterable, List, Optional, Tuple, Union
from colored_logger import TRACE_LEVEL, get_colored_logger
from .models import InvalidArgument, Post, QueryState, SortOrder, TagMatchPolicy
from .predicates import matches_query
from .sorting import sort_posts
from .vocabulary import extract_tag_vocabulary

logger = get_colored_logger(__name__)


def run_query(
    posts: Iterable[Post],
    state: QueryState,
    policy: TagMatchPolicy = TagMatchPolicy.ANY,
) -> List[Post]:
    """
    Apply a query state to a collection of posts.

    Args:
        posts: The full collection, left untouched
        state: Search text, tag selection and sort order to apply
        policy: Tag matching policy for multi-tag selections

    Returns:
        A new list of the matching posts in display order
    """
    matching = [post for post in posts if matches_query(state, post, policy)]
    return sort_posts(matching, state.sort_order)


class PostQueryEngine:
    """
    In-memory query engine over a fixed collection of posts.

    Holds the query state (search text, selected tags, sort order) and
    derives the tag vocabulary and the filtered, sorted result view from it.
    Every mutation invalidates the memoized view; the next read recomputes
    it from the full collection.

    The tag match policy is fixed per instance so that every query it runs
    uses the same semantics.
    """

    def __init__(
        self,
        posts: Iterable[Post] = (),
        tag_match_policy: Union[TagMatchPolicy, str] = TagMatchPolicy.ANY,
        sort_order: Union[SortOrder, str] = SortOrder.NEWEST,
    ):
        """
        Initialize the engine.

        Args:
            posts: Initial post collection
            tag_match_policy: ANY or ALL, see TagMatchPolicy
            sort_order: Initial sort order (default: newest)

        Raises:
            InvalidArgument: If the policy or the sort order is unknown
        """
        self._policy = TagMatchPolicy.parse(tag_match_policy)
        self._state = QueryState(sort_order=SortOrder.parse(sort_order))
        self._posts: Tuple[Post, ...] = ()
        self._vocabulary: Optional[List[str]] = None
        self._results: Optional[List[Post]] = None
        self.set_posts(posts)

    # Collection

    @property
    def posts(self) -> Tuple[Post, ...]:
        return self._posts

    def set_posts(self, posts: Iterable[Post]) -> None:
        """Replace the whole post collection. Query state is kept."""
        collection = tuple(posts)

        seen = set()
        for post in collection:
            if post.id in seen:
                logger.warning("Duplicate post id '%s' in collection", post.id)
            seen.add(post.id)

        self._posts = collection
        self._vocabulary = None
        self._invalidate()
        logger.debug("Post collection set: %d post(s)", len(collection))

    # Query state

    @property
    def tag_match_policy(self) -> TagMatchPolicy:
        return self._policy

    @property
    def search_text(self) -> str:
        return self._state.search_text

    @property
    def selected_tags(self) -> FrozenSet[str]:
        return frozenset(self._state.selected_tags)

    @property
    def sort_order(self) -> SortOrder:
        return self._state.sort_order

    @property
    def state(self) -> QueryState:
        """A snapshot of the current query state."""
        return self._state.copy()

    def set_search(self, text: str) -> None:
        text = text or ""
        if text == self._state.search_text:
            return
        self._state.search_text = text
        self._invalidate()

    def toggle_tag(self, tag: str) -> None:
        """Select the tag if it is not selected, deselect it otherwise."""
        if tag in self._state.selected_tags:
            self._state.selected_tags.discard(tag)
            logger.debug("Tag deselected: %s", tag)
        else:
            self._state.selected_tags.add(tag)
            logger.debug("Tag selected: %s", tag)
        self._invalidate()

    def clear_tags(self) -> None:
        if not self._state.selected_tags:
            return
        self._state.selected_tags.clear()
        self._invalidate()

    def is_tag_selected(self, tag: str) -> bool:
        return tag in self._state.selected_tags

    def set_sort_order(self, order: Union[SortOrder, str]) -> None:
        """
        Change the sort order.

        Raises:
            InvalidArgument: If the order is unknown. The state is unchanged.
        """
        try:
            resolved = SortOrder.parse(order)
        except InvalidArgument:
            logger.warning("Rejected sort order: %r", order)
            raise

        if resolved is self._state.sort_order:
            return
        self._state.sort_order = resolved
        self._invalidate()

    # Derived outputs

    def get_vocabulary(self) -> List[str]:
        if self._vocabulary is None:
            self._vocabulary = extract_tag_vocabulary(self._posts)
        return list(self._vocabulary)

    def get_results(self) -> List[Post]:
        if self._results is None:
            if logger.isEnabledFor(TRACE_LEVEL):
                start_time = time.perf_counter()
                self._results = run_query(self._posts, self._state, self._policy)
                logger.trace(
                    "Recomputed results in %.3f ms",
                    (time.perf_counter() - start_time) * 1000,
                )
            else:
                self._results = run_query(self._posts, self._state, self._policy)
            logger.debug(
                "Query returned %d of %d post(s)", len(self._results), len(self._posts)
            )
        return list(self._results)

    def get_result_count(self) -> int:
        return len(self.get_results())

    def _invalidate(self) -> None:
        self._results = None
