"""
Test suite for post-query.

Test Categories:
- Unit tests: vocabulary, predicates, sorting and the query engine in isolation
- Loader tests: JSON, Markdown front matter and HTTP sources
- CLI and settings tests: the command-line surface and its configuration
"""
