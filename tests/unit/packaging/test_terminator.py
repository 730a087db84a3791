"""Tests for terminator token selection."""

from dckit.packaging.manifest import SourceFile
from dckit.packaging.terminator import (
    assign_terminators,
    base_terminator,
    choose_terminator,
    salted_terminator,
)


def test_base_terminator_replaces_non_alphanumerics() -> None:
    """Test that every non-alphanumeric character in the path becomes an underscore."""
    assert base_terminator("devcontainer.json") == "EOF_devcontainer_json"
    assert base_terminator("generate-claude-config.sh") == "EOF_generate_claude_config_sh"
    assert base_terminator("sub/dir/a.cfg") == "EOF_sub_dir_a_cfg"
    assert base_terminator("Dockerfile") == "EOF_Dockerfile"


def test_assign_terminators_gives_distinct_tokens() -> None:
    """Test that two files get two different tokens in manifest order."""
    files = [
        SourceFile(path="a.cfg", content=b"x=1\n"),
        SourceFile(path="b.sh", content=b"echo hi\n"),
    ]

    tokens = assign_terminators(files)

    assert tokens == ("EOF_a_cfg", "EOF_b_sh")


def test_choose_terminator_salts_when_content_contains_token() -> None:
    """Test that a token occurring in the payload is replaced by a salted one."""
    source = SourceFile(path="a.cfg", content=b"line\nEOF_a_cfg\nmore\n")

    token = choose_terminator(source, set())

    assert token != "EOF_a_cfg"
    assert token.startswith("EOF_a_cfg_")
    assert len(token) == len("EOF_a_cfg_") + 8
    assert token.encode() not in source.content


def test_choose_terminator_is_deterministic() -> None:
    """Test that the same input always yields the same token."""
    source = SourceFile(path="a.cfg", content=b"EOF_a_cfg\n")

    assert choose_terminator(source, set()) == choose_terminator(source, set())


def test_choose_terminator_skips_salted_token_also_in_content() -> None:
    """Test that a salted candidate present in the content is skipped too."""
    first_salt = salted_terminator("a.cfg", 1)
    source = SourceFile(path="a.cfg", content=f"EOF_a_cfg\n{first_salt}\n".encode())

    token = choose_terminator(source, set())

    assert token == salted_terminator("a.cfg", 2)


def test_assign_terminators_salts_colliding_paths() -> None:
    """Test that paths mapping to the same base token still get unique tokens."""
    files = [
        SourceFile(path="a.cfg", content=b""),
        SourceFile(path="a-cfg", content=b""),
    ]

    tokens = assign_terminators(files)

    assert tokens[0] == "EOF_a_cfg"
    assert tokens[1] == salted_terminator("a-cfg", 1)
    assert len(set(tokens)) == 2


def test_salted_terminator_varies_with_counter() -> None:
    """Test that each counter value produces a different salt."""
    assert salted_terminator("a.cfg", 1) != salted_terminator("a.cfg", 2)
