"""
Post Query Module

In-memory filtering, tag faceting and sorting over a collection of blog posts.

Key Components:
- Post, QueryState, SortOrder, TagMatchPolicy: the data model
- extract_tag_vocabulary / count_tags: tag facets across all posts
- matches_search / matches_tags / matches_query: inclusion predicates
- sort_posts: stable ordering by date or title
- PostQueryEngine: stateful query surface (search, tag toggles, sort order)
- PostLoader: reads posts from JSON, Markdown front matter or a URL
"""

from .models import InvalidArgument, Post, QueryState, SortOrder, TagMatchPolicy
from .vocabulary import extract_tag_vocabulary, count_tags
from .predicates import matches_search, matches_tags, matches_query
from .sorting import sort_posts, title_sort_key
from .engine import PostQueryEngine, run_query
from .loader import PostLoader, PostLoadError

__all__ = [
    "InvalidArgument",
    "Post",
    "QueryState",
    "SortOrder",
    "TagMatchPolicy",
    "extract_tag_vocabulary",
    "count_tags",
    "matches_search",
    "matches_tags",
    "matches_query",
    "sort_posts",
    "title_sort_key",
    "PostQueryEngine",
    "run_query",
    "PostLoader",
    "PostLoadError",
]
