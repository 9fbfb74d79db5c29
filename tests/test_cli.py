import json
import pytest
from edotuner import cli
from edotuner.persist import load_document
from edotuner.temperaments import EQUAL19


def _run(argv, tmp_path):
    return cli.main(argv + ["--config", str(tmp_path / "none.yaml")])


def test_table_output(tmp_path, capsys):
    _run(["--temperament", "equal19"], tmp_path)
    out = capsys.readouterr().out
    assert "19-EDO" in out
    rows = dict(line.split() for line in out.splitlines() if line.startswith("  "))
    assert len(rows) == 21
    assert rows["C"] == "15.8"
    assert rows["A"] == "0.0"
    assert rows["Fb"] == "57.9"


def test_root_and_pure_by_name(tmp_path, capsys):
    _run(["--temperament", "equal19", "--pure", "C", "--json"], tmp_path)
    data = json.loads(capsys.readouterr().out)
    assert data["pure"] == 8
    assert data["offsets"][1] == 0.0          # C


def test_save_and_reload(tmp_path, capsys):
    out = tmp_path / "t.json"
    _run(["--temperament", "equal19", "--save", str(out)], tmp_path)
    assert "saved" in capsys.readouterr().out
    doc = load_document(out)
    assert doc.temperament is EQUAL19
    _run(["--doc", str(out), "--json"], tmp_path)
    assert json.loads(capsys.readouterr().out)["temperament"] == "equal19"


def test_bad_document_exits(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text('{"temperament": "equal99"}', encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        _run(["--doc", str(bad)], tmp_path)
    assert exc.value.code == 1
    assert "[edotuner] ERROR" in capsys.readouterr().err


def test_bad_root_exits(tmp_path):
    with pytest.raises(SystemExit):
        _run(["--root", "H"], tmp_path)


def test_unwritable_save_exits(tmp_path, capsys):
    blocker = tmp_path / "file.txt"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        _run(["--temperament", "equal19", "--save", str(blocker / "t.json")], tmp_path)
    assert exc.value.code == 1
    assert "[edotuner] ERROR" in capsys.readouterr().err
