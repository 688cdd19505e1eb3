import io
import json

import pytest

from main import build_argparser, configure_logging, main, run


def cycle_text(n, weight=100):
    return "\n".join(f"{(i + 1) % n}:{weight}" for i in range(n)) + "\n"


def test_run_square(square_file):
    trail, labels, miles, meta = run(str(square_file))
    assert trail == [0, 1, 2, 3, 0]
    assert labels == "A -- B -- C -- D -- A"
    assert miles == 0.0
    assert meta["total_feet"] == 45
    assert meta["nodes"] == 4


def test_run_dead_end_path(tmp_path):
    path = tmp_path / "path.txt"
    path.write_text("1:2640\n2:2640\n")
    trail, labels, miles, meta = run(str(path))
    assert trail[0] == trail[-1] == 0
    assert len(trail) == 5
    assert miles == 2.0


def test_run_too_many_nodes_for_labels(tmp_path):
    path = tmp_path / "cycle.txt"
    path.write_text(cycle_text(27))
    trail, labels, miles, _ = run(str(path))
    assert labels is None
    assert trail == list(range(27)) + [0]
    assert miles == 0.51


def test_main_prints_route(square_file, capsys):
    assert main(["-i", str(square_file), "-q"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[:2] == ["A -- B -- C -- D -- A", "0.00 miles"]


def test_main_prompts_for_path(square_file, capsys, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda: f"  {square_file}  \n")
    assert main(["-q"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("File Path >\n")
    assert "A -- B -- C -- D -- A" in out


def test_main_numeric_route_without_labels(tmp_path, capsys):
    path = tmp_path / "cycle.txt"
    path.write_text(cycle_text(27))
    assert main(["-i", str(path), "-q"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("0 -- 1 -- 2")
    assert out[0].endswith("26 -- 0")
    assert out[1] == "0.51 miles"


@pytest.mark.parametrize("text, message", [
    ("1:x\n", "Problem: line 1: invalid weight 'x'"),
    ("1:5\n\n3:5\n", "Problem: graph has 2 disconnected components"),
])
def test_main_reports_problems(tmp_path, capsys, text, message):
    path = tmp_path / "bad.txt"
    path.write_text(text)
    assert main(["-i", str(path), "-q"]) == 1
    assert message in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main(["-i", str(tmp_path / "nope.txt"), "-q"]) == 1
    assert capsys.readouterr().err.startswith("Problem: ")


def test_main_summary_and_export(square_file, tmp_path, capsys):
    out_path = tmp_path / "route.json"
    args = ["-i", str(square_file), "-q", "--summary", "--print-route",
            "--matching", "blossom", "--export", str(out_path)]
    assert main(args) == 0
    out = capsys.readouterr().out
    assert "=== Solution Summary ===" in out
    assert "[0, 1, 2, 3, 0]" in out
    data = json.loads(out_path.read_text())
    assert data["trail"] == [0, 1, 2, 3, 0]
    assert data["meta"]["matching"] == "blossom"
    assert data["meta"]["miles"] == 0.0


def test_argparser_defaults():
    args = build_argparser().parse_args([])
    assert args.input is None
    assert args.start == 0
    assert args.matching == "greedy"
    assert args.verbose == 1


def test_configure_logging_levels(monkeypatch):
    calls = []
    monkeypatch.setattr("logging.basicConfig", lambda **kw: calls.append(kw["level"]))
    for v in (0, 1, 2, 5):
        configure_logging(v)
    configure_logging(3, quiet=True)
    assert calls == [30, 20, 10, 10, 30]


def test_main_stdin_closed_at_prompt(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert main(["-q"]) == 1
    assert capsys.readouterr().err.startswith("Problem: ")
