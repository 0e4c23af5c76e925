#!/usr/bin/env python3

import argparse
import json
import sys
from typing import List, Optional

from colored_logger import setup_colored_logging, get_colored_logger
from post_query import (
    InvalidArgument,
    Post,
    PostLoader,
    PostLoadError,
    PostQueryEngine,
    SortOrder,
    TagMatchPolicy,
    count_tags,
)
from settings import Settings

logger = get_colored_logger(__name__)


def truncate_description(text: str, max_length: int = 150) -> str:
    """Cut a description to max_length characters, marking the cut with "...."."""
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "...."


class QueryCLI:
    """
    Command-line interface for querying a collection of blog posts.

    Provides commands for:
    - Searching posts by text and tags, in a chosen sort order
    - Listing the tag vocabulary with post counts
    - Viewing collection statistics
    """

    def __init__(self, loader: Optional[PostLoader] = None):
        self.loader = loader
        self.settings: Optional[Settings] = None

    def run(self, args: List[str] = None) -> int:
        """
        Run the CLI with the given arguments.

        Args:
            args: Command line arguments. If None, uses sys.argv.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        parser = self._create_parser()
        parsed_args = parser.parse_args(args)

        self.settings = Settings(parsed_args.settings)

        if parsed_args.verbose:
            setup_colored_logging(level="DEBUG")
        else:
            setup_colored_logging(level=self.settings.log_level)

        if not hasattr(parsed_args, "func"):
            parser.print_help()
            return 1

        try:
            return parsed_args.func(parsed_args)
        except PostLoadError as e:
            logger.error("Could not load posts: %s", e)
            return 1
        except InvalidArgument as e:
            logger.error("%s", e)
            return 2
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 1

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser with all subcommands."""
        parser = argparse.ArgumentParser(
            prog="post-query",
            description="Search, filter and sort a collection of blog posts",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  %(prog)s --source posts.json search "python"        # Posts mentioning python
  %(prog)s --source content/blog search -t astro -t css --match all
  %(prog)s --source posts.json search --sort az --format list
  %(prog)s --source https://example.com/posts.json tags
  %(prog)s --settings settings.json stats
            """,
        )

        parser.add_argument(
            "-v", "--verbose", action="store_true", help="Enable verbose logging"
        )
        parser.add_argument(
            "--settings", help="Path to settings.json (default: built-in defaults)"
        )
        parser.add_argument(
            "--source",
            help="Posts file, directory or URL (overrides posts_source setting)",
        )

        subparsers = parser.add_subparsers(dest="command", help="Available commands")
        self._add_search_parser(subparsers)
        self._add_tags_parser(subparsers)
        self._add_stats_parser(subparsers)

        return parser

    def _add_search_parser(self, subparsers):
        search_parser = subparsers.add_parser("search", help="Search posts")
        search_parser.add_argument(
            "query",
            nargs="?",
            default="",
            help="Text to find in titles and descriptions (empty matches all)",
        )
        search_parser.add_argument(
            "-t",
            "--tag",
            action="append",
            help="Filter by tag (can be used multiple times)",
        )
        search_parser.add_argument(
            "--sort",
            choices=[order.value for order in SortOrder],
            help="Sort order (default: default_sort_order setting)",
        )
        search_parser.add_argument(
            "--match",
            choices=[policy.value for policy in TagMatchPolicy],
            help="Match any or all selected tags (default: tag_match_policy setting)",
        )
        search_parser.add_argument(
            "--format",
            choices=["table", "list", "json"],
            default="table",
            help="Output format (default: table)",
        )
        search_parser.set_defaults(func=self._cmd_search)

    def _add_tags_parser(self, subparsers):
        tags_parser = subparsers.add_parser(
            "tags", help="List all tags with their post counts"
        )
        tags_parser.set_defaults(func=self._cmd_tags)

    def _add_stats_parser(self, subparsers):
        stats_parser = subparsers.add_parser(
            "stats", help="Show post collection statistics"
        )
        stats_parser.set_defaults(func=self._cmd_stats)

    def _load_posts(self, args) -> List[Post]:
        source = args.source or self.settings.posts_source
        if not source:
            raise PostLoadError("No post source: pass --source or set posts_source")

        loader = self.loader or PostLoader(
            timeout=self.settings.request_timeout_seconds
        )
        return loader.load(source)

    # Command implementations
    def _cmd_search(self, args) -> int:
        posts = self._load_posts(args)
        engine = PostQueryEngine(
            posts,
            tag_match_policy=args.match or self.settings.tag_match_policy,
            sort_order=args.sort or self.settings.default_sort_order,
        )

        engine.set_search(args.query)
        # Repeated -t flags select a tag once rather than toggling it back off
        for tag in dict.fromkeys(args.tag or []):
            engine.toggle_tag(tag)

        results = engine.get_results()

        if args.format == "json":
            self._display_json(results)
            return 0

        print(f"Showing {engine.get_result_count()} posts")
        if not results:
            print("No posts found matching your criteria.")
            return 0

        if args.format == "list":
            self._display_list(results)
        else:
            self._display_table(results)
        return 0

    def _cmd_tags(self, args) -> int:
        posts = self._load_posts(args)
        counts = count_tags(posts)

        if not counts:
            print("No tags found.")
            return 0

        print(f"\nFound {len(counts)} tags:")
        print(f"{'Tag':<30} {'Posts':<8}")
        print("-" * 40)
        for tag, post_count in counts.items():
            print(f"{tag:<30} {post_count:<8}")

        return 0

    def _cmd_stats(self, args) -> int:
        posts = self._load_posts(args)
        engine = PostQueryEngine(posts)

        print("\nPost Collection Statistics:")
        print(f"  Total posts: {len(posts):,}")
        print(f"  Total tags: {len(engine.get_vocabulary()):,}")
        print(f"  Untagged posts: {sum(1 for post in posts if not post.tags):,}")

        if posts:
            dates = [post.published_at for post in posts]
            print(f"  Oldest post: {min(dates):%Y-%m-%d}")
            print(f"  Newest post: {max(dates):%Y-%m-%d}")

        return 0

    def _display_json(self, results: List[Post]) -> None:
        output = []
        for post in results:
            output.append(
                {
                    "id": post.id,
                    "slug": post.slug,
                    "title": post.title,
                    "description": post.description,
                    "published_at": post.published_at.isoformat(),
                    "tags": list(post.tags),
                    "reading_time": post.reading_time,
                }
            )
        print(json.dumps(output, indent=2))

    def _display_list(self, results: List[Post]) -> None:
        preview_length = self.settings.description_preview_length
        max_tags = self.settings.max_tags_shown

        for i, post in enumerate(results, 1):
            print(f"{i}. {post.title}")
            print(f"   {truncate_description(post.description, preview_length)}")

            details = f"   {post.published_at:%Y-%m-%d}"
            if post.reading_time:
                details += f" | {post.reading_time}"
            print(details)

            if post.tags:
                print("   " + " ".join(f"# {tag}" for tag in post.tags[:max_tags]))
            print(f"   Link: /blog/{post.id}/")
            print()

    def _display_table(self, results: List[Post]) -> None:
        print(f"{'#':<3} {'Title':<40} {'Published':<12} {'Tags':<30}")
        print("-" * 85)

        for i, post in enumerate(results, 1):
            title = post.title[:37] + "..." if len(post.title) > 40 else post.title
            tags = ", ".join(post.tags[: self.settings.max_tags_shown])
            tags = tags[:27] + "..." if len(tags) > 30 else tags

            print(f"{i:<3} {title:<40} {post.published_at:%Y-%m-%d}   {tags:<30}")


def main():
    """Main entry point for the post query CLI."""
    cli = QueryCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
