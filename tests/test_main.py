import pytest

from atomicrmw.main import (
    add_one,
    add_two,
    main,
    simple_demo_1,
    simple_demo_2,
    simple_demo_3,
    simple_demo_4,
)


@pytest.mark.parametrize("value", [0, 3, 1000])
def test_add_two_is_add_one_twice(value):
    assert add_two(value) == add_one(add_one(value))


def test_demo_1(capsys):
    assert simple_demo_1() == (3, 4)
    out = capsys.readouterr().out
    assert "Load(Dest): 4" in out


def test_demo_2_picks_add_two(capsys):
    before, after = simple_demo_2()
    assert (before, after) == (3, add_two(3))
    out = capsys.readouterr().out
    assert "Is fp add_two? true" in out
    assert "Is fp add_one? false" in out


def test_demo_3(capsys):
    assert simple_demo_3() == (3, 21)
    assert "====== Simple Demo 3 ======" in capsys.readouterr().out


def test_demo_4_result_in_range(capsys):
    before, after = simple_demo_4()
    assert before == 3
    assert 0 <= after < 1_000_000
    assert f"After: {after}" in capsys.readouterr().out


def test_main_runs_everything(capsys):
    assert main(["--phase-seconds", "0.02"]) == 0
    out = capsys.readouterr().out
    for header in ("Simple Demo 1", "Simple Demo 4", "Benchmark 1"):
        assert header in out


def test_main_rejects_bad_phase():
    with pytest.raises(SystemExit):
        main(["--phase-seconds", "0"])