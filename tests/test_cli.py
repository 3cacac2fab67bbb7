"""
Unit tests for the convert_article command-line interface.
"""
import json

import pytest

from article_codec.front_matter import parse_markdown
from convert_article import main, parse_args


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


class TestParseArgs:
    """Test argument parsing."""

    def test_to_markdown_options(self):
        """Metadata flags are exposed with underscore names."""
        args = parse_args(
            ["to-markdown", "a.html", "--article-id", "42", "--slug", "s"]
        )
        assert args.command == "to-markdown"
        assert args.input_html == "a.html"
        assert args.article_id == "42"
        assert args.slug == "s"

    def test_command_required(self):
        """A sub-command must be given."""
        with pytest.raises(SystemExit):
            parse_args([])


class TestToMarkdown:
    """Test the to-markdown sub-command."""

    def test_explicit_output(self, tmp_path):
        """An explicit output path needs no config file."""
        html = _write(tmp_path / "a.html", '<p class="no-margin">Hi</p>')
        output = tmp_path / "a.md"

        main(
            [
                "to-markdown",
                str(html),
                "--output",
                str(output),
                "--article-id",
                "42",
                "--title",
                "Hello",
            ]
        )

        front_matter, body = parse_markdown(output.read_text("utf-8"))
        assert front_matter == {"intercom_id": "42", "title": "Hello"}
        assert body == "Hi\n"

    def test_output_under_articles_dir(self, tmp_path):
        """Without --output the path is derived from the config."""
        config = _write(
            tmp_path / "config.json", json.dumps({"articles_dir": "articles"})
        )
        html = _write(tmp_path / "a.html", "<h1>Hello</h1>")

        main(
            [
                "to-markdown",
                str(html),
                "--config",
                str(config),
                "--collection-id",
                "7",
                "--slug",
                "My Article",
            ]
        )

        output = tmp_path / "articles" / "en" / "7" / "my-article.md"
        front_matter, body = parse_markdown(output.read_text("utf-8"))
        assert front_matter == {"intercom_collection_id": "7", "locale": "en"}
        assert body == "# Hello\n"

    def test_slug_defaults_to_input_stem(self, tmp_path):
        """The input file name is used when no slug is given."""
        config = _write(
            tmp_path / "config.json", json.dumps({"articles_dir": "out"})
        )
        html = _write(tmp_path / "Getting_Started.html", "<p>Hi</p>")

        main(["to-markdown", str(html), "--config", str(config)])

        expected = tmp_path / "out" / "en" / "uncategorized"
        assert (expected / "getting-started.md").exists()

    def test_missing_input(self, tmp_path):
        """A missing input file exits with a message."""
        with pytest.raises(SystemExit):
            main(["to-markdown", str(tmp_path / "missing.html")])

    def test_config_error_exits(self, tmp_path):
        """Config problems are reported as SystemExit."""
        html = _write(tmp_path / "a.html", "<p>Hi</p>")
        with pytest.raises(SystemExit):
            main(
                [
                    "to-markdown",
                    str(html),
                    "--config",
                    str(tmp_path / "missing.json"),
                ]
            )


class TestToHtml:
    """Test the to-html sub-command."""

    def test_default_output(self, tmp_path):
        """The output defaults to the input path with .html."""
        markdown = _write(tmp_path / "doc.md", "---\ntitle: Doc\n---\nHello\n")

        main(["to-html", str(markdown)])

        output = tmp_path / "doc.html"
        assert output.read_text("utf-8") == '<p class="no-margin">Hello</p>'

    def test_bad_front_matter_exits(self, tmp_path):
        """Invalid front matter is reported as SystemExit."""
        markdown = _write(tmp_path / "doc.md", "---\n- a\n---\nHello\n")
        with pytest.raises(SystemExit):
            main(["to-html", str(markdown)])

    def test_missing_input(self, tmp_path):
        """A missing Markdown file exits with a message."""
        with pytest.raises(SystemExit):
            main(["to-html", str(tmp_path / "missing.md")])
