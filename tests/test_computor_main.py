import pytest

import computor_main
import subprocess

from computor import CoefficientOverflow, NoExponentFound, StringIndexOutOfRange, ZeroLeadingCoefficient
from computor_main import (
    DEBUG_ENV,
    PARSE_ENV,
    RENDER_ENV,
    RENDER_EXIT_CODE,
    Config,
    load_config,
    main,
    to_latex,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (PARSE_ENV, RENDER_ENV, DEBUG_ENV, computor_main.MANIM_FLAGS_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize("argv", [[], ["x^2 = 0", "extra"]])
def test_wrong_number_of_arguments(argv, capsys) -> None:
    assert main(argv) == 0
    assert capsys.readouterr().out == "Wrong number of arguments\n"


def test_quadratic_uses_stub_coefficients(capsys) -> None:
    assert main(["3 * x^2 + 7 = 0"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "Reduced form: 3 * x^2 + 7 = 0",
        "Polynomial degree: 2",
        "The discriminant is: 0",
        "The equation has one real root",
        "The root is: -1",
    ]


def test_degree_above_two(capsys) -> None:
    assert main(["x^2 + x^3"]) == 0
    out = capsys.readouterr().out
    assert "Polynomial degree: 3" in out
    assert "strictly greater than 2" in out
    assert "discriminant" not in out


def test_degree_below_two(capsys) -> None:
    assert main(["x^1 + 4 = 0"]) == 0
    assert capsys.readouterr().out == "Polynomial degree: 1\n"


def test_no_exponent_is_an_error(capsys) -> None:
    code = main(["no exponents here"])
    assert code == 2
    assert capsys.readouterr().out.startswith("Error: ")


def test_trailing_caret_is_an_error(capsys) -> None:
    assert main(["x^"]) == StringIndexOutOfRange.exit_code
    assert "Missing exponent" in capsys.readouterr().out


def test_debug_prints_exponents(monkeypatch, capsys) -> None:
    monkeypatch.setenv(DEBUG_ENV, "1")
    main(["x^2 + x^1"])
    assert "DEBUG_EXPONENTS: [2, 1]" in capsys.readouterr().out


class TestParsedCoefficients:
    @pytest.fixture(autouse=True)
    def parse_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PARSE_ENV, "true")

    def test_two_roots(self, capsys) -> None:
        assert main(["2 * X^2 + 3 * X^1 + 1 * X^0 = 0"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "Reduced form: 1 * X^0 + 3 * X^1 + 2 * X^2 = 0",
            "Polynomial degree: 2",
            "The discriminant is: 1",
            "The equation has two real roots",
            "The roots are: -0.5 and -1",
        ]

    def test_no_real_roots(self, capsys) -> None:
        assert main(["x^2 + 1 = 0"]) == 0
        out = capsys.readouterr().out
        assert "The discriminant is: -4" in out
        assert "The equation has no real roots" in out
        assert "root is" not in out and "roots are" not in out

    def test_linear(self, capsys) -> None:
        assert main(["5 * X^0 + 4 * X^1 = 4 * X^0"]) == 0
        out = capsys.readouterr().out
        assert "Polynomial degree: 1" in out
        assert "The solution is: -0.25" in out

    def test_degree_above_two(self, capsys) -> None:
        assert main(["x^3 = 0"]) == 0
        assert "strictly greater than 2" in capsys.readouterr().out

    def test_parse_error(self, capsys) -> None:
        assert main(["x^2 + 1"]) == 5
        assert capsys.readouterr().out.startswith("Error: ")


def test_superscript_exponent_is_not_a_digit(capsys) -> None:
    assert main(["x^² + 1 = 0"]) == NoExponentFound.exit_code
    assert capsys.readouterr().out.startswith("Error: ")


def test_huge_parsed_coefficient(monkeypatch, capsys) -> None:
    monkeypatch.setenv(PARSE_ENV, "1")
    assert main([f"x^2 + {10**400}x + 1 = 0"]) == CoefficientOverflow.exit_code
    assert capsys.readouterr().out.splitlines()[-1].startswith("Error: ")


def test_zero_leading_coefficient_exit_code(monkeypatch, capsys) -> None:
    monkeypatch.setattr(computor_main, "STUB_COEFFICIENTS", (0, 1, 1))
    assert main(["x^2 = 0"]) == ZeroLeadingCoefficient.exit_code == 4
    assert capsys.readouterr().out.splitlines()[-1] == "Error: Leading coefficient 'a' must be non-zero"


def test_load_config() -> None:
    config = load_config({PARSE_ENV: "Yes", RENDER_ENV: "0", DEBUG_ENV: "on"})
    assert config == Config(parse_coefficients=True, render=False, debug=True)
    assert load_config({computor_main.MANIM_FLAGS_ENV: "-ql"}).manim_flags == "-ql"
    assert load_config({}).manim_flags == "-pqh"


def test_to_latex() -> None:
    assert to_latex(r"x = \frac{0 +/- sqrt(8)}{2}") == r"x = \frac{0 \pm \sqrt{8}}{2}"
    assert to_latex("Delta = b^2 - 4ac = 0") == r"\Delta = b^2 - 4ac = 0"
    assert to_latex("x1 = 3") == "x_{1} = 3"


class TestRender:
    def test_launches_manim(self, monkeypatch, capsys) -> None:
        calls = []

        def fake_run(cmd, check, env):
            calls.append((cmd, env))
            return subprocess.CompletedProcess(cmd, 0)

        monkeypatch.setattr(computor_main.subprocess, "run", fake_run)
        monkeypatch.setenv(RENDER_ENV, "1")
        assert main(["x^2 = 0"]) == 0

        cmd, env = calls[0]
        assert cmd[0] == "manim"
        assert cmd[-2:] == [computor_main.SCENE_FILE, "SolveScene"]
        assert env[computor_main.EXPR_ENV] == "x^2 = 0"
        assert env[computor_main.STEPS_ENV].splitlines()[0] == "x^2 + 2x + 1 = 0"
        out = capsys.readouterr().out
        assert "DEBUG_RENDER_LIST:" in out
        assert r"Step 2: \Delta = b^2 - 4ac = 0" in out

    def test_missing_manim(self, monkeypatch, capsys) -> None:
        def fake_run(cmd, check, env):
            raise FileNotFoundError("manim")

        monkeypatch.setattr(computor_main.subprocess, "run", fake_run)
        monkeypatch.setenv(RENDER_ENV, "1")
        assert main(["x^2 = 0"]) == RENDER_EXIT_CODE
        assert "Render error" in capsys.readouterr().out

    def test_failed_render(self, monkeypatch, capsys) -> None:
        def fake_run(cmd, check, env):
            return subprocess.CompletedProcess(cmd, 1)

        monkeypatch.setattr(computor_main.subprocess, "run", fake_run)
        monkeypatch.setenv(RENDER_ENV, "1")
        assert main(["x^2 = 0"]) == RENDER_EXIT_CODE
        assert "Render error: manim exited with code 1" in capsys.readouterr().out

    def test_nothing_to_render(self, monkeypatch) -> None:
        def fake_run(cmd, check, env):
            raise AssertionError("manim should not run")

        monkeypatch.setattr(computor_main.subprocess, "run", fake_run)
        monkeypatch.setenv(RENDER_ENV, "1")
        assert main(["x^3 = 0"]) == 0
