from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from math import isfinite, isqrt, sqrt
import re
from typing import List, Optional, Sequence, Tuple, Union

Number = Union[int, float, Fraction]
Poly = dict[int, Fraction]

# Stand-in coefficients used by the CLI for every quadratic input unless
# coefficient parsing is switched on.
STUB_COEFFICIENTS: Tuple[int, int, int] = (1, 2, 1)

MAX_SOLVABLE_DEGREE = 2
DECIMAL_DIGITS = "0123456789"

ONE_ROOT = "The equation has one real root"
TWO_ROOTS = "The equation has two real roots"
NO_ROOTS = "The equation has no real roots"
UNSOLVABLE = "The polynomial degree is strictly greater than 2, I can't solve."
ONE_SOLUTION = "The equation has one solution"
ALL_REALS = "Each real number is a solution."
NO_SOLUTION = "No solution."


class SolveError(ValueError):
    exit_code = 1


class NoExponentFound(SolveError):
    exit_code = 2


class StringIndexOutOfRange(SolveError):
    exit_code = 3


class ZeroLeadingCoefficient(SolveError):
    exit_code = 4


class ParseError(SolveError):
    exit_code = 5


class UnsupportedDegree(SolveError):
    exit_code = 6


class CoefficientOverflow(SolveError):
    exit_code = 8


def to_float(value: Number) -> float:
    try:
        result = float(value)
    except OverflowError as exc:
        raise CoefficientOverflow(f"Value too large for a float: {exc}") from exc
    if not isfinite(result):
        raise CoefficientOverflow("Value too large for a float")
    return result


@dataclass(frozen=True)
class QuadraticSolution:
    discriminant: float
    roots: Tuple[float, ...]

    @property
    def classification(self) -> str:
        return classify_discriminant(self.discriminant)


@dataclass(frozen=True)
class PolynomialSolution:
    degree: int
    roots: Tuple[float, ...]
    description: str
    discriminant: Optional[float] = None


# -- degree detection -------------------------------------------------------


def extract_exponents(text: str) -> List[int]:
    """Collect the digit following every ``x^`` in ``text``, left to right.

    Only the first digit after the caret is read, so ``x^12`` yields 1.
    A caret followed by anything but a digit is skipped. A trailing ``x^``
    raises :class:`StringIndexOutOfRange` instead of reading past the end.
    """
    exponents: List[int] = []
    i = 0
    while i < len(text):
        if text[i] == "x" and i + 1 < len(text) and text[i + 1] == "^":
            if i + 2 >= len(text):
                raise StringIndexOutOfRange(f"Missing exponent after 'x^' at position {i}")
            digit = text[i + 2]
            if digit in DECIMAL_DIGITS:
                exponents.append(int(digit))
            i += 2
            continue
        i += 1
    return exponents


def max_degree(exponents: Sequence[int]) -> int:
    if not exponents:
        raise NoExponentFound("No 'x^N' term found in the equation")
    return max(exponents)


# -- quadratic solving ------------------------------------------------------


def discriminant(a: Number, b: Number, c: Number) -> float:
    return to_float(b * b - 4 * a * c)


def classify_discriminant(value: float) -> str:
    if value == 0:
        return ONE_ROOT
    if value > 0:
        return TWO_ROOTS
    return NO_ROOTS


def solve_quadratic(a: Number, b: Number, c: Number) -> QuadraticSolution:
    if a == 0:
        raise ZeroLeadingCoefficient("Leading coefficient 'a' must be non-zero")
    disc = discriminant(a, b, c)
    two_a = to_float(2 * a)
    minus_b = to_float(-b)
    if disc == 0:
        return QuadraticSolution(disc, (to_float(minus_b / two_a),))
    if disc > 0:
        root = sqrt(disc)
        return QuadraticSolution(disc, (to_float((minus_b + root) / two_a), to_float((minus_b - root) / two_a)))
    return QuadraticSolution(disc, ())


# -- equation parsing -------------------------------------------------------


TERM_RE = re.compile(r"([+-]?)(\d+(?:\.\d+)?)?(?:\*?([xX])(?:\^(\d+))?)?", re.ASCII)


def _parse_side(side: str) -> Poly:
    if not side:
        raise ParseError("One of the equation sides is empty")
    poly: Poly = {}
    pos = 0
    while pos < len(side):
        match = TERM_RE.match(side, pos)
        sign, coef, var, exp = match.groups()
        if coef is None and var is None:
            raise ParseError(f"Unexpected input: {side[pos:]!r}")
        if pos > 0 and not sign:
            raise ParseError(f"Missing operator before {side[pos:match.end()]!r}")
        try:
            value = Fraction(coef) if coef is not None else Fraction(1)
        except ValueError as exc:
            raise ParseError(f"Invalid coefficient: {exc}") from exc
        if sign == "-":
            value = -value
        if var is None:
            deg = 0
        elif exp is None:
            deg = 1
        else:
            deg = int(exp)
        poly = poly_add(poly, {deg: value})
        pos = match.end()
    return poly


def parse_equation(text: str) -> Poly:
    cleaned = re.sub(r"\s+", "", text)
    parts = cleaned.split("=")
    if len(parts) != 2:
        raise ParseError(f"Invalid equation, expected exactly one '=': {text!r}")
    left, right = parts
    return poly_add(_parse_side(left), {deg: -coef for deg, coef in _parse_side(right).items()})


def poly_add(p: Poly, q: Poly) -> Poly:
    out = dict(p)
    for deg, coef in q.items():
        out[deg] = out.get(deg, Fraction(0)) + coef
        if out[deg] == 0:
            del out[deg]
    return out


def poly_degree(poly: Poly) -> int:
    if not poly:
        return 0
    return max(poly.keys())


def format_real(value: Number) -> str:
    value = to_float(value) + 0.0
    return f"{value:g}"


def format_coefficient(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    return format_real(value)


def reduced_form(poly: Poly, var: str = "X") -> str:
    terms: List[str] = []
    for deg in sorted(poly.keys()):
        coef = poly[deg]
        body = f"{format_coefficient(abs(coef))} * {var}^{deg}"
        if not terms:
            terms.append(body if coef > 0 else f"- {body}")
        else:
            terms.append(f"+ {body}" if coef > 0 else f"- {body}")
    if not terms:
        return "0 = 0"
    return " ".join(terms) + " = 0"


def solve_polynomial(poly: Poly) -> PolynomialSolution:
    degree = poly_degree(poly)
    if degree > MAX_SOLVABLE_DEGREE:
        raise UnsupportedDegree(UNSOLVABLE)
    a = poly.get(2, Fraction(0))
    b = poly.get(1, Fraction(0))
    c = poly.get(0, Fraction(0))
    if degree == 2:
        solution = solve_quadratic(a, b, c)
        return PolynomialSolution(2, solution.roots, solution.classification, solution.discriminant)
    if degree == 1:
        return PolynomialSolution(1, (to_float(-c / b),), ONE_SOLUTION)
    if c == 0:
        return PolynomialSolution(0, (), ALL_REALS)
    return PolynomialSolution(0, (), NO_SOLUTION)


# -- solution steps ---------------------------------------------------------


def format_number(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    num = value.numerator
    den = value.denominator
    if num < 0:
        return rf"-\frac{{{abs(num)}}}{{{den}}}"
    return rf"\frac{{{num}}}{{{den}}}"


def exact_sqrt(value: Fraction) -> Optional[Fraction]:
    if value < 0:
        return None
    num_root = isqrt(value.numerator)
    den_root = isqrt(value.denominator)
    if num_root * num_root == value.numerator and den_root * den_root == value.denominator:
        return Fraction(num_root, den_root)
    return None


def sqrt_fraction(value: Fraction) -> str:
    root = exact_sqrt(value)
    if root is not None:
        return format_number(root)
    return f"sqrt({format_number(value)})"


def build_poly_str(coeffs: Poly, var: str) -> str:
    out = ""
    for deg in sorted(coeffs.keys(), reverse=True):
        coef = coeffs[deg]
        if coef == 0:
            continue
        if deg == 0:
            power = ""
        elif deg == 1:
            power = var
        else:
            power = f"{var}^{deg}"
        magnitude = abs(coef)
        body = power if magnitude == 1 and power else f"{format_number(magnitude)}{power}"
        if not out:
            out = body if coef > 0 else f"-{body}"
        else:
            out += f" + {body}" if coef > 0 else f" - {body}"
    return out or "0"


def quadratic_steps(a: Number, b: Number, c: Number, var: str = "x") -> List[str]:
    a, b, c = Fraction(a), Fraction(b), Fraction(c)
    if a == 0:
        raise ZeroLeadingCoefficient("Leading coefficient 'a' must be non-zero")
    steps: List[str] = [f"{build_poly_str({2: a, 1: b, 0: c}, var)} = 0"]

    disc = b * b - 4 * a * c
    steps.append(f"Delta = b^2 - 4ac = {format_number(disc)}")
    center = -b / (2 * a)
    if disc == 0:
        steps.append(rf"{var} = \frac{{-b}}{{2a}}")
        steps.append(f"{var} = {format_number(center)}")
        return steps
    if disc < 0:
        steps.append("Delta < 0")
        return steps

    steps.append(rf"{var} = \frac{{-b +/- sqrt(Delta)}}{{2a}}")
    steps.append(rf"{var} = \frac{{{format_number(-b)} +/- {sqrt_fraction(disc)}}}{{{format_number(2 * a)}}}")
    root = exact_sqrt(disc)
    if root is not None:
        offset = root / (2 * a)
        steps.append(f"{var}1 = {format_number(center + offset)}")
        steps.append(f"{var}2 = {format_number(center - offset)}")
    return steps


def solution_steps(poly: Poly, var: str = "x") -> List[str]:
    degree = poly_degree(poly)
    a = poly.get(2, Fraction(0))
    b = poly.get(1, Fraction(0))
    c = poly.get(0, Fraction(0))
    if degree > MAX_SOLVABLE_DEGREE:
        return [f"{build_poly_str(poly, var)} = 0"]
    if degree == 2:
        return quadratic_steps(a, b, c, var)
    if degree == 1:
        steps = [f"{build_poly_str(poly, var)} = 0"]
        if b != 1:
            steps.append(rf"{var} = \frac{{{format_number(-c)}}}{{{format_number(b)}}}")
        steps.append(f"{var} = {format_number(-c / b)}")
        return steps
    return [f"{format_number(c)} = 0"]
