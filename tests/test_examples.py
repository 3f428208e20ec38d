import os
import runpy

EXAMPLE = os.path.join(os.path.dirname(__file__), "..", "examples", "basic_example.py")


def load_main():
    return runpy.run_path(EXAMPLE, run_name="basic_example")["main"]


def test_basic_example_runs(capsys):
    main = load_main()

    assert main(["demo", "-v", "--temperature", "30.5", "-n", "5"]) == 0
    out = capsys.readouterr().out
    assert "Simulation Name: demo" in out
    assert "Output Directory: /tmp/output" in out
    assert "Temperature: 30.5°C" in out
    assert "Number of Simulations: 5" in out
    assert "Process Type: typeA" in out
    assert "Verbose: True" in out


def test_basic_example_shows_usage(capsys):
    main = load_main()

    assert main(["--help"]) == 2
    assert "usage: simulate" in capsys.readouterr().out
