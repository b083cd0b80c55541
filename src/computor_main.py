from __future__ import annotations

from dataclasses import dataclass
import os
import re
import subprocess
import sys
from typing import List, Mapping, Optional, Sequence, Tuple

from computor import (
    STUB_COEFFICIENTS,
    UNSOLVABLE,
    MAX_SOLVABLE_DEGREE,
    QuadraticSolution,
    SolveError,
    extract_exponents,
    format_real,
    max_degree,
    parse_equation,
    poly_degree,
    quadratic_steps,
    reduced_form,
    solution_steps,
    solve_polynomial,
    solve_quadratic,
)


PARSE_ENV = "COMPUTOR_PARSE_COEFFICIENTS"
RENDER_ENV = "COMPUTOR_RENDER"
MANIM_FLAGS_ENV = "COMPUTOR_MANIM_FLAGS"
DEBUG_ENV = "COMPUTOR_DEBUG"
EXPR_ENV = "COMPUTOR_EXPR"
STEPS_ENV = "COMPUTOR_STEPS"

DEFAULT_MANIM_FLAGS = "-pqh"
SCENE_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "computor_scene.py")
SCENE_NAME = "SolveScene"
RENDER_EXIT_CODE = 7

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    parse_coefficients: bool = False
    render: bool = False
    manim_flags: str = DEFAULT_MANIM_FLAGS
    debug: bool = False


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in TRUTHY


def load_config(env: Optional[Mapping[str, str]] = None) -> Config:
    if env is None:
        env = os.environ
    return Config(
        parse_coefficients=_flag(env, PARSE_ENV),
        render=_flag(env, RENDER_ENV),
        manim_flags=env.get(MANIM_FLAGS_ENV, DEFAULT_MANIM_FLAGS) or DEFAULT_MANIM_FLAGS,
        debug=_flag(env, DEBUG_ENV),
    )


def _extract_parens(s: str, start: int) -> Tuple[str, int]:
    depth = 1
    i = start
    while i < len(s):
        if s[i] == "(":
            depth += 1
        elif s[i] == ")":
            depth -= 1
            if depth == 0:
                return s[start:i], i + 1
        i += 1
    return s[start:], len(s)


def _convert_roots(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        if text.startswith("sqrt(", i):
            inner, next_i = _extract_parens(text, i + 5)
            out.append(r"\sqrt{" + _convert_roots(inner) + "}")
            i = next_i
            continue
        out.append(text[i])
        i += 1
    return "".join(out)


def to_latex(text: str) -> str:
    converted = text.replace("+/-", r"\pm")
    converted = _convert_roots(converted)
    converted = re.sub(r"\bDelta\b", r"\\Delta", converted)
    converted = re.sub(r"(?<!\\)\b([a-zA-Z])([0-9]+)\b", r"\1_{\2}", converted)
    return converted


def report_quadratic(solution: QuadraticSolution) -> None:
    print(f"The discriminant is: {format_real(solution.discriminant)}")
    print(solution.classification)
    if len(solution.roots) == 1:
        print(f"The root is: {format_real(solution.roots[0])}")
    elif len(solution.roots) == 2:
        print(f"The roots are: {format_real(solution.roots[0])} and {format_real(solution.roots[1])}")


def _solve_stub(equation: str, config: Config) -> List[str]:
    exponents = extract_exponents(equation)
    if config.debug:
        print(f"DEBUG_EXPONENTS: {exponents}")
    degree = max_degree(exponents)
    if degree > MAX_SOLVABLE_DEGREE:
        print(f"Polynomial degree: {degree}")
        print(UNSOLVABLE)
        return []
    if degree < MAX_SOLVABLE_DEGREE:
        print(f"Polynomial degree: {degree}")
        return []

    print(f"Reduced form: {equation}")
    print(f"Polynomial degree: {degree}")
    if config.debug:
        print(f"DEBUG_COEFFICIENTS: {STUB_COEFFICIENTS}")
    report_quadratic(solve_quadratic(*STUB_COEFFICIENTS))
    return quadratic_steps(*STUB_COEFFICIENTS)


def _solve_parsed(equation: str, config: Config) -> List[str]:
    poly = parse_equation(equation)
    if config.debug:
        print(f"DEBUG_COEFFICIENTS: {dict(sorted(poly.items()))}")
    degree = poly_degree(poly)
    print(f"Reduced form: {reduced_form(poly)}")
    print(f"Polynomial degree: {degree}")
    if degree > MAX_SOLVABLE_DEGREE:
        print(UNSOLVABLE)
        return []

    solution = solve_polynomial(poly)
    if solution.discriminant is not None:
        report_quadratic(QuadraticSolution(solution.discriminant, solution.roots))
    else:
        print(solution.description)
        for root in solution.roots:
            print(f"The solution is: {format_real(root)}")
    return solution_steps(poly)


def render(equation: str, steps: Sequence[str], config: Config) -> int:
    print("DEBUG_RENDER_LIST:")
    print(f"Step 0: {to_latex(equation)}")
    for i, line in enumerate(steps, start=1):
        print(f"Step {i}: {to_latex(line)}")

    env = os.environ.copy()
    env[EXPR_ENV] = equation
    env[STEPS_ENV] = "\n".join(steps)

    cmd: List[str] = ["manim", *config.manim_flags.split(), SCENE_FILE, SCENE_NAME]
    try:
        result = subprocess.run(cmd, check=False, env=env)
    except FileNotFoundError as exc:
        print(f"Render error: {exc}")
        return RENDER_EXIT_CODE
    if result.returncode != 0:
        print(f"Render error: manim exited with code {result.returncode}")
        return RENDER_EXIT_CODE
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) != 1:
        print("Wrong number of arguments")
        return 0

    equation = argv[0]
    config = load_config()
    try:
        if config.parse_coefficients:
            steps = _solve_parsed(equation, config)
        else:
            steps = _solve_stub(equation, config)
    except SolveError as exc:
        print(f"Error: {exc}")
        return exc.exit_code

    if config.render and steps:
        return render(equation, steps, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
