"""
CLI tests: commands run end to end against a JSON post file.
"""

import io
import json
import os
import unittest
from contextlib import redirect_stdout
from unittest.mock import Mock, patch

from cli_query import QueryCLI, truncate_description
from post_query import PostLoadError
from .test_utils import TempDirTestCase, TestDataFixtures


class TestTruncateDescription(unittest.TestCase):
    def test_short_text_is_unchanged(self):
        self.assertEqual(truncate_description("short", 10), "short")
        self.assertEqual(truncate_description("x" * 150), "x" * 150)

    def test_long_text_is_cut_and_marked(self):
        self.assertEqual(truncate_description("abcdefghij", 4), "abcd....")

    def test_trailing_whitespace_is_stripped_before_marker(self):
        self.assertEqual(truncate_description("abc   defgh", 5), "abc....")


class TestQueryCLI(TempDirTestCase):
    """Run CLI commands and inspect their output."""

    def setUp(self):
        super().setUp()
        records = [
            TestDataFixtures.get_flat_post_record(
                id="alpha",
                title="Alpha",
                description="First post",
                tags=["x"],
                pubDate="2023-01-01",
            ),
            TestDataFixtures.get_flat_post_record(
                id="beta",
                title="Beta",
                description="Second post",
                tags=["y"],
                pubDate="2024-01-01",
            ),
            TestDataFixtures.get_flat_post_record(
                id="gamma",
                title="Gamma",
                description="Third post " + "long " * 60,
                tags=["x", "y", "z", "w"],
                pubDate="2022-06-15",
            ),
        ]
        self.source = self.write_file("posts.json", json.dumps(records))
        self.env_patch = patch.dict(os.environ, {}, clear=False)
        self.env_patch.start()

    def tearDown(self):
        self.env_patch.stop()
        super().tearDown()

    def _run(self, *args):
        output = io.StringIO()
        with patch("cli_query.setup_colored_logging"), redirect_stdout(output):
            exit_code = QueryCLI().run(list(args))
        return exit_code, output.getvalue()

    def _run_json(self, *args):
        exit_code, output = self._run("--source", self.source, "search", *args, "--format", "json")
        self.assertEqual(exit_code, 0)
        return [entry["id"] for entry in json.loads(output)]

    def test_search_defaults_to_newest_first(self):
        self.assertEqual(self._run_json(), ["beta", "alpha", "gamma"])

    def test_search_text(self):
        self.assertEqual(self._run_json("alp"), ["alpha"])

    def test_tag_filter_any_and_all(self):
        self.assertEqual(self._run_json("-t", "x", "-t", "y"), ["beta", "alpha", "gamma"])
        self.assertEqual(
            self._run_json("-t", "x", "-t", "y", "--match", "all"), ["gamma"]
        )

    def test_repeated_tag_flag_selects_once(self):
        self.assertEqual(self._run_json("-t", "x", "-t", "x"), ["alpha", "gamma"])

    def test_sort_orders(self):
        self.assertEqual(self._run_json("--sort", "az"), ["alpha", "beta", "gamma"])
        self.assertEqual(self._run_json("--sort", "za"), ["gamma", "beta", "alpha"])
        self.assertEqual(self._run_json("--sort", "oldest"), ["gamma", "alpha", "beta"])

    def test_table_output_shows_count(self):
        exit_code, output = self._run("--source", self.source, "search")

        self.assertEqual(exit_code, 0)
        self.assertIn("Showing 3 posts", output)
        self.assertIn("Alpha", output)
        self.assertIn("2024-01-01", output)

    def test_list_output_truncates_and_limits_tags(self):
        exit_code, output = self._run(
            "--source", self.source, "search", "gamma", "--format", "list"
        )

        self.assertEqual(exit_code, 0)
        self.assertIn("....", output)
        self.assertIn("# x # y # z", output)
        self.assertNotIn("# w", output)
        self.assertIn("Link: /blog/gamma/", output)
        self.assertIn("2 min read", output)

    def test_no_results_message(self):
        exit_code, output = self._run("--source", self.source, "search", "nothing-matches")

        self.assertEqual(exit_code, 0)
        self.assertIn("Showing 0 posts", output)
        self.assertIn("No posts found matching your criteria.", output)

    def test_tags_command_lists_counts(self):
        exit_code, output = self._run("--source", self.source, "tags")

        self.assertEqual(exit_code, 0)
        self.assertIn("Found 4 tags", output)
        lines = [line.split() for line in output.splitlines()]
        self.assertIn(["x", "2"], lines)
        self.assertIn(["w", "1"], lines)

    def test_stats_command(self):
        exit_code, output = self._run("--source", self.source, "stats")

        self.assertEqual(exit_code, 0)
        self.assertIn("Total posts: 3", output)
        self.assertIn("Total tags: 4", output)
        self.assertIn("Oldest post: 2022-06-15", output)
        self.assertIn("Newest post: 2024-01-01", output)

    def test_source_from_settings_file(self):
        settings_path = self.write_file(
            "settings.json",
            json.dumps({"posts_source": self.source, "default_sort_order": "az"}),
        )

        exit_code, output = self._run(
            "--settings", settings_path, "search", "--format", "json"
        )

        self.assertEqual(exit_code, 0)
        self.assertEqual(
            [entry["id"] for entry in json.loads(output)], ["alpha", "beta", "gamma"]
        )

    def test_missing_source_fails(self):
        os.environ.pop("POST_QUERY_POSTS_SOURCE", None)

        exit_code, _ = self._run("search")

        self.assertEqual(exit_code, 1)

    def test_unreadable_source_fails(self):
        exit_code, _ = self._run(
            "--source", os.path.join(self.temp_dir, "nope.json"), "search"
        )

        self.assertEqual(exit_code, 1)

    def test_no_command_prints_help(self):
        exit_code, output = self._run()

        self.assertEqual(exit_code, 1)
        self.assertIn("usage:", output)

    def test_invalid_sort_choice_is_rejected_by_parser(self):
        with self.assertRaises(SystemExit):
            self._run("--source", self.source, "search", "--sort", "sideways")

    def test_injected_loader_is_used(self):
        loader = Mock()
        loader.load.side_effect = PostLoadError("boom")

        output = io.StringIO()
        with patch("cli_query.setup_colored_logging"), redirect_stdout(output):
            exit_code = QueryCLI(loader=loader).run(["--source", "anything", "tags"])

        self.assertEqual(exit_code, 1)
        loader.load.assert_called_once_with("anything")


if __name__ == "__main__":
    unittest.main()
