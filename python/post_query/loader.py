import json
import math
import os
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml

from colored_logger import get_colored_logger
from .models import Post

logger = get_colored_logger(__name__)


class PostLoadError(Exception):
    """Raised when a post source cannot be read at all."""

    pass


class PostLoader:
    """
    Loads post records for the query engine from JSON or Markdown sources.

    Supported sources:
    - http(s) URLs returning a JSON array of posts
    - .json files holding a JSON array of posts
    - .md/.mdx files, or directories of them, with YAML front matter

    JSON records may be flat ({"id", "title", "pubDate", ...}) or shaped like
    content collection entries ({"id", "slug", "data": {...}, "readingTime"}).
    Records that cannot be turned into a Post are logged and skipped.
    """

    USER_AGENT = "PostQuery/1.0"
    MARKDOWN_EXTENSIONS = (".md", ".mdx")
    WORDS_PER_MINUTE = 200
    # Tried after ISO-8601, e.g. "Jul 08 2022" or "2022/07/08"
    DATE_FORMATS = ("%b %d %Y", "%B %d %Y", "%b %d, %Y", "%B %d, %Y", "%Y/%m/%d")

    def __init__(self, timeout: int = 30):
        """
        Initialize the loader.

        Args:
            timeout: Seconds to wait for HTTP sources (default: 30)
        """
        self.timeout = timeout if isinstance(timeout, int) and timeout > 0 else 30
        self.patterns = {
            "front_matter": re.compile(
                r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL
            ),
            "word": re.compile(r"\S+"),
        }

    def load(self, source: str) -> List[Post]:
        """
        Load posts from a URL, a JSON file, a Markdown file or a directory.

        Args:
            source: Where to read posts from

        Returns:
            The posts that could be parsed, in source order

        Raises:
            PostLoadError: If the source is missing or unreadable
        """
        if not source:
            raise PostLoadError("No post source given")

        if source.startswith(("http://", "https://")):
            posts = self.load_url(source)
        elif os.path.isdir(source):
            posts = self.load_directory(source)
        elif os.path.isfile(source):
            if source.lower().endswith(self.MARKDOWN_EXTENSIONS):
                post = self.load_markdown_file(source)
                posts = [post] if post else []
            else:
                posts = self.load_json_file(source)
        else:
            raise PostLoadError(f"Post source does not exist: {source}")

        logger.info("Loaded %d post(s) from %s", len(posts), source)
        return posts

    def load_url(self, url: str) -> List[Post]:
        """Fetch a JSON array of posts over HTTP."""
        headers = {"User-Agent": self.USER_AGENT, "Accept": "application/json"}

        try:
            logger.debug("Downloading posts from %s", url)
            response = requests.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("Failed to download %s: %s", url, e)
            raise PostLoadError(f"Failed to download {url}: {e}") from e
        except ValueError as e:
            logger.error("Invalid JSON from %s: %s", url, e)
            raise PostLoadError(f"Invalid JSON from {url}: {e}") from e

        return self.parse_records(data, source=url)

    def load_json_file(self, file_path: str) -> List[Post]:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", file_path, e)
            raise PostLoadError(f"Invalid JSON in {file_path}: {e}") from e
        except OSError as e:
            logger.error("Could not read %s: %s", file_path, e)
            raise PostLoadError(f"Could not read {file_path}: {e}") from e

        return self.parse_records(data, source=file_path)

    def load_directory(self, directory: str) -> List[Post]:
        """Load every Markdown file under a directory, sorted by path."""
        posts = []
        for path in sorted(Path(directory).rglob("*")):
            if path.is_file() and path.suffix.lower() in self.MARKDOWN_EXTENSIONS:
                post = self.load_markdown_file(str(path))
                if post:
                    posts.append(post)
        return posts

    def load_markdown_file(self, file_path: str) -> Optional[Post]:
        """
        Build a post from a Markdown file's front matter.

        The file stem becomes the post id and the reading time is computed
        from the body text.
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", file_path, e)
            return None

        match = self.patterns["front_matter"].match(content)
        if not match:
            logger.warning("No front matter found in %s", file_path)
            return None

        try:
            front_matter = yaml.safe_load(match.group(1)) or {}
        except yaml.YAMLError as e:
            logger.warning("Invalid front matter in %s: %s", file_path, e)
            return None

        if not isinstance(front_matter, dict):
            logger.warning("Front matter in %s is not a mapping", file_path)
            return None

        body = content[match.end() :]
        record = {
            "id": Path(file_path).stem,
            "data": front_matter,
            "readingTime": self.reading_time(body),
        }
        return self.parse_record(record, source=file_path)

    def parse_records(self, data: Any, source: str = "") -> List[Post]:
        """Turn a decoded JSON array into posts, skipping bad records."""
        if not isinstance(data, list):
            raise PostLoadError(f"Expected a JSON array of posts in {source}")

        posts = []
        for record in data:
            post = self.parse_record(record, source=source)
            if post:
                posts.append(post)

        skipped = len(data) - len(posts)
        if skipped:
            logger.warning("Skipped %d invalid record(s) from %s", skipped, source)
        return posts

    def parse_record(self, record: Any, source: str = "") -> Optional[Post]:
        """Convert one flat or collection-shaped record into a Post."""
        if not isinstance(record, dict):
            logger.warning("Skipping non-object record in %s", source)
            return None

        # Collection entries nest their fields under "data"
        fields: Dict[str, Any] = dict(record)
        if isinstance(record.get("data"), dict):
            fields.update(record["data"])

        post_id = fields.get("id") or fields.get("slug")
        title = fields.get("title")
        if not post_id or not isinstance(title, str) or not title:
            logger.warning("Skipping record without id or title in %s", source)
            return None

        published_at = self.parse_published_at(
            _first_present(fields, "pubDate", "published_at", "publishedAt", "date")
        )
        if published_at is None:
            logger.warning("Skipping post '%s': missing or invalid date", post_id)
            return None

        tags = fields.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        if not isinstance(tags, list):
            logger.warning("Ignoring non-list tags on post '%s'", post_id)
            tags = []

        return Post(
            id=str(post_id),
            title=title,
            description=str(fields.get("description") or ""),
            published_at=published_at,
            tags=tuple(str(tag) for tag in tags if tag is not None),
            slug=str(fields.get("slug") or post_id),
            hero_image=_first_present(fields, "heroImage", "hero_image"),
            reading_time=str(
                _first_present(fields, "readingTime", "reading_time") or ""
            ),
        )

    def parse_published_at(self, value: Any) -> Optional[datetime]:
        """
        Parse a publication date into an aware datetime.

        Accepts datetimes, dates, epoch seconds and ISO-8601 strings. Naive
        values are taken as UTC.
        """
        if value is None or isinstance(value, bool):
            return None

        try:
            if isinstance(value, datetime):
                parsed = value
            elif isinstance(value, date):
                parsed = datetime(value.year, value.month, value.day)
            elif isinstance(value, (int, float)):
                parsed = datetime.fromtimestamp(value, tz=timezone.utc)
            elif isinstance(value, str) and value.strip():
                text = value.strip()
                if text.endswith(("Z", "z")):
                    text = text[:-1] + "+00:00"
                parsed = self._parse_date_string(text)
            else:
                return None
        except (ValueError, OverflowError, OSError) as e:
            logger.debug("Could not parse date %r: %s", value, e)
            return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _parse_date_string(self, text: str) -> datetime:
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass

        for date_format in self.DATE_FORMATS:
            try:
                return datetime.strptime(text, date_format)
            except ValueError:
                continue
        raise ValueError(f"Unrecognized date format: {text}")

    def reading_time(self, text: str) -> str:
        """Estimate reading time as "N min read", never below one minute."""
        words = len(self.patterns["word"].findall(text or ""))
        minutes = max(1, math.ceil(words / self.WORDS_PER_MINUTE))
        return f"{minutes} min read"


def _first_present(fields: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if fields.get(key) is not None:
            return fields[key]
    return None
