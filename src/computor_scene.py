from __future__ import annotations

import os
from typing import List

from manim import DOWN, UP, FadeIn, MathTex, Scene, Text, Transform, config

from computor import SolveError, parse_equation, solution_steps
from computor_main import EXPR_ENV, STEPS_ENV, to_latex


DEFAULT_EXPR = "1 * X^0 + 2 * X^1 + 1 * X^2 = 0"


def load_steps(expr: str) -> List[str]:
    raw = os.environ.get(STEPS_ENV, "")
    if raw.strip():
        return [line for line in raw.splitlines() if line.strip()]
    return solution_steps(parse_equation(expr))


def fit_to_frame(mob: MathTex) -> None:
    max_width = config.frame_width * 0.9
    max_height = config.frame_height * 0.8
    if mob.width > max_width:
        mob.scale(max_width / mob.width)
    if mob.height > max_height:
        mob.scale(max_height / mob.height)
    mob.move_to([0, 0, 0])


class SolveScene(Scene):
    def construct(self) -> None:
        expr = os.environ.get(EXPR_ENV, DEFAULT_EXPR)
        anim_run_time = 1.2
        final_wait = 2.0

        title = Text("Step: 0", font="Noto Sans", weight="BOLD")
        title.scale(0.45).to_edge(UP, buff=0.1)
        label = MathTex(to_latex(expr))
        fit_to_frame(label)
        self.play(FadeIn(title), FadeIn(label), run_time=anim_run_time)

        try:
            steps = load_steps(expr)
        except SolveError as exc:
            error = Text(f"Error: {exc}", font="Noto Sans")
            error.scale(0.6).next_to(label, DOWN, buff=0.6)
            self.play(FadeIn(error), run_time=anim_run_time)
            self.wait(final_wait)
            return

        for i, line in enumerate(steps, start=1):
            new_title = Text(f"Step: {i}", font="Noto Sans", weight="BOLD")
            new_title.scale(0.45).to_edge(UP, buff=0.1)
            new_label = MathTex(to_latex(line))
            fit_to_frame(new_label)
            self.play(
                Transform(title, new_title),
                Transform(label, new_label),
                run_time=anim_run_time,
            )

        self.wait(final_wait)
