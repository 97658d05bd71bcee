# tests/test_cli.py

import pytest

from prompt_library.cli.library_admin import build_parser, main


@pytest.fixture
def db_arg(db_file):
    return ["--database", str(db_file)]


def test_no_command_prints_help(capsys):
    main([])
    assert "Manage the prompt library database" in capsys.readouterr().out


def test_init_creates_and_seeds(db_arg, db_file, capsys):
    main(db_arg + ["init"])
    out = capsys.readouterr().out
    assert "Schema ready (version 2)" in out
    assert "Seeded 3 starter prompts." in out
    assert db_file.exists()

    main(db_arg + ["init"])
    assert "seed skipped" in capsys.readouterr().out


def test_prompts_listing_and_filters(db_arg, capsys):
    main(db_arg + ["init"])
    capsys.readouterr()

    main(db_arg + ["prompts"])
    out = capsys.readouterr().out
    assert "Creative Writing Assistant" in out
    assert "Total: 3 prompt(s)" in out

    main(db_arg + ["prompts", "--mode", "dashboard", "--search", "review"])
    out = capsys.readouterr().out
    assert "Code Review Expert" in out
    assert "Total: 1 prompt(s)" in out


def test_toggle_rate_and_stats(db_arg, capsys):
    main(db_arg + ["init"])
    capsys.readouterr()

    main(db_arg + ["toggle-history", "3"])
    assert "Upload 3 is now active." in capsys.readouterr().out

    main(db_arg + ["toggle-prompt", "1"])
    assert "Prompt 1 is now inactive." in capsys.readouterr().out

    main(db_arg + ["rate", "2", "5"])
    assert "Prompt 2 rated 5 (1 rating(s))." in capsys.readouterr().out

    main(db_arg + ["stats"])
    out = capsys.readouterr().out
    assert "Prompts: 3" in out
    assert "Average rating: 5.00" in out

    main(db_arg + ["history"])
    assert "Total: 3 upload(s)" in capsys.readouterr().out


def test_store_errors_exit_nonzero(db_arg, capsys):
    main(db_arg + ["init"])
    capsys.readouterr()

    with pytest.raises(SystemExit) as excinfo:
        main(db_arg + ["rate", "2", "9"])
    assert excinfo.value.code == 1
    assert "rating must be an integer between 0 and 5" in capsys.readouterr().out

    with pytest.raises(SystemExit):
        main(db_arg + ["toggle-history", "missing"])


def test_parser_rejects_unknown_mode():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["prompts", "--mode", "sidebar"])
