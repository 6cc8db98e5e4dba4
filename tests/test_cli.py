from dealbot.cli import main
from dealbot.config import DEFAULT_CATALOG_PATH


def test_cli_prints_ranked_matches(capsys):
    rc = main(["cheap pizza", "--catalog", str(DEFAULT_CATALOG_PATH), "--scores"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Terms: cheap, pizza" in out
    assert "1. [2] Slice of Heaven" in out
    assert "score=1.000" in out


def test_cli_no_terms(capsys):
    rc = main(["hi bot", "--catalog", str(DEFAULT_CATALOG_PATH)])
    out = capsys.readouterr().out
    assert rc == 1
    assert "Terms: <none>" in out
    assert "No matching deals." in out
