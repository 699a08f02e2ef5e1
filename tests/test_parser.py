import pytest

from nexuspm.vault.parser import (
    extract_link_target,
    extract_link_targets,
    first_heading,
)


@pytest.mark.parametrize(
    "value",
    [
        "[[Target]]",
        "[[Target|Alias]]",
        "[[Target#Heading]]",
        "[Alias](Target.md)",
        "Target",
        "  Target  ",
        [["Target"]],  # unquoted `parent: [[Target]]` as parsed by YAML
        ["[[Target]]"],
    ],
)
def test_link_forms_extract_same_target(value) -> None:
    assert extract_link_target(value) == "Target"


def test_markdown_link_is_unescaped_and_keeps_folders() -> None:
    assert extract_link_target("[Plan](Projects/Site/Launch%20plan.md)") == "Projects/Site/Launch plan"


def test_wiki_link_wins_over_markdown_link() -> None:
    assert extract_link_target("[[Wiki]] and [md](Other.md)") == "Wiki"


@pytest.mark.parametrize("value", [None, "", "   ", 3, True, {"a": 1}, [], ["a", "b"]])
def test_unusable_values_give_none(value) -> None:
    assert extract_link_target(value) is None


def test_extract_link_targets_drops_unusable_entries() -> None:
    assert extract_link_targets(["[[A]]", "", None, "B", 4]) == ["A", "B"]
    assert extract_link_targets("[[A]]") == []


def test_first_heading_skips_subheadings_and_code() -> None:
    content = "\n".join(
        [
            "## Notes",
            "```",
            "# not a heading",
            "```",
            "#tag line",
            "# Real title ",
            "# Second",
        ]
    )
    assert first_heading(content) == "Real title"


def test_first_heading_none_without_h1() -> None:
    assert first_heading("## Only sub\ntext") is None


def test_first_heading_skips_frontmatter_comments() -> None:
    content = "\n".join(
        [
            "---",
            "# owner: ops team",
            "status: todo",
            "---",
            "",
            "Body text, no heading.",
        ]
    )
    assert first_heading(content) is None
    assert first_heading(content + "\n# Actual title") == "Actual title"


def test_first_heading_unclosed_frontmatter_is_body() -> None:
    assert first_heading("---\n# Title") == "Title"
