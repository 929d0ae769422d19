"""
Minesweeper Autoplayer - Interactive Demo

Run with: streamlit run app/demo.py
"""

import random
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Any, Dict, List, Optional, Tuple

from autosweep import Board, Minesweeper, MinesweeperSolver, board_probabilities
from autosweep.config import DEFAULT_MAX_COMPONENT_SIZE, DIFFICULTY_LEVELS, GUESSING_STRATEGIES

COLORS = {
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}

METHOD_LABELS = {
    "first_move": "First Move",
    "single_infer": "Single Inference",
    "subset_infer": "Subset Elimination",
    "paired_infer": "Paired Inference",
    "budget_infer": "Mine Budget",
    "enumeration_infer": "Enumeration",
    "probabilistic_guess": "Probabilistic Guess",
}


def cell_size_for(width: int) -> Tuple[int, str]:
    """Scale cell size based on board width."""
    if width >= 30:
        return 14, "10px"
    if width >= 25:
        return 16, "11px"
    if width >= 16:
        return 20, "13px"
    return 26, "15px"


def render_snapshot(
    snapshot: List[List[str]],
    mines: Optional[frozenset] = None,
    probabilities: Optional[Dict[Tuple[int, int], float]] = None,
    highlight_cell: Optional[Tuple[int, int]] = None,
) -> str:
    """Render a board snapshot ("." hidden, "F" flag, "!" exploded, digits) as HTML."""
    height, width = len(snapshot), len(snapshot[0])
    cell_size, font_size = cell_size_for(width)

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for row in range(height):
        html += "<tr>"
        for col in range(width):
            symbol = snapshot[row][col]
            pos = (row, col)

            if symbol == "F":
                cell, bg, text_color = "F", "#ffa500", "#ffffff"
            elif symbol == "!":
                cell, bg, text_color = "M", "#ff0000", "#ffffff"
            elif symbol == ".":
                if mines is not None and pos in mines:
                    cell, bg, text_color = "M", "#ffcccc", "#ff0000"
                elif probabilities is not None and pos in probabilities:
                    p = probabilities[pos]
                    shade = int(255 * (1.0 - p))
                    cell, bg, text_color = f"{p * 100:.0f}", f"rgb(255,{shade},{shade})", "#333333"
                else:
                    cell, bg, text_color = ".", "#c0c0c0", "#666666"
            else:
                cell = symbol
                bg = "#f0f0f0" if cell == "0" else "#ffffff"
                text_color = COLORS.get(cell, "#000000")

            border = "3px solid #ff0000" if pos == highlight_cell else "1px solid #999"
            display = cell if cell != "0" else " "

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def new_game(width: int, height: int, mines: int, algorithm: str, seed: Optional[int]) -> None:
    st.session_state.game = Minesweeper(
        width, height, mines, algorithm, rng=random.Random(seed)
    )
    st.session_state.solver = None
    st.session_state.outcome = None
    st.session_state.current_step = 0


def main():
    st.set_page_config(
        page_title="Minesweeper Autoplayer",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minesweeper Autoplayer")
    st.markdown("""
    Plays Minesweeper with constraint inference, exact frontier enumeration and least-risk guessing.
    """)

    st.sidebar.header("Game Configuration")

    presets = [f"{name.title()} ({w}x{h}, {m})" for name, (w, h, m) in DIFFICULTY_LEVELS.items()]
    preset = st.sidebar.selectbox("Difficulty Preset", presets + ["Custom"])

    if preset == "Custom":
        width = st.sidebar.slider("Width", 5, 30, 16)
        height = st.sidebar.slider("Height", 5, 30, 16)
        max_mines = width * height - 9
        mines = st.sidebar.slider("Mines", 0, max_mines, min(40, max_mines))
    else:
        level = list(DIFFICULTY_LEVELS)[presets.index(preset)]
        width, height, mines = DIFFICULTY_LEVELS[level]

    algorithm = st.sidebar.selectbox(
        "Mine Generation",
        ["safe_neighborhood_rule", "safe_first_action_rule"],
        help="safe_neighborhood_rule: First click + neighbors are safe. "
             "safe_first_action_rule: Only first click is safe.",
    )
    guessing_strategy = st.sidebar.selectbox(
        "Guessing Strategy",
        list(GUESSING_STRATEGIES),
        format_func=lambda x: "Bayesian (Recommended)" if x == "bayesian" else "Local Density",
    )
    max_component_size = st.sidebar.slider(
        "Max Component Size",
        5,
        60,
        DEFAULT_MAX_COMPONENT_SIZE,
        help="Frontier components with more cells are approximated instead of enumerated.",
    )
    seed_text = st.sidebar.text_input("Seed (blank for random)", "")
    seed: Optional[int] = int(seed_text) if seed_text.strip().lstrip("-").isdigit() else None

    if "game" not in st.session_state:
        st.session_state.prev_settings = None

    current_settings = (width, height, mines, algorithm, seed)
    if st.session_state.prev_settings != current_settings:
        new_game(width, height, mines, algorithm, seed)
        st.session_state.prev_settings = current_settings

    board_col, stats_col = st.columns([3, 1])

    with board_col:
        st.subheader("Game Board")
        btn_col1, btn_col2 = st.columns(2)

        with btn_col1:
            if st.button("Regenerate Board", type="primary"):
                new_game(width, height, mines, algorithm, seed)
                st.rerun()

        with btn_col2:
            if st.button("Solve"):
                game = st.session_state.game
                if st.session_state.outcome is not None:
                    game.reset()
                solver = MinesweeperSolver(
                    Board(game),
                    max_component_size=max_component_size,
                    guessing_strategy=guessing_strategy,
                    rng=random.Random(seed) if seed is not None else None,
                    record_steps=True,
                )
                st.session_state.solver = solver
                st.session_state.outcome = solver.run()
                st.session_state.current_step = len(solver.steps_history) - 1
                st.rerun()

        solver = st.session_state.solver
        outcome = st.session_state.outcome
        game = st.session_state.game

        if solver is not None and solver.steps_history:
            steps = solver.steps_history
            step_display = st.slider("Step", 1, len(steps), st.session_state.current_step + 1)
            st.session_state.current_step = step_display - 1
            step = steps[st.session_state.current_step]

            action_label = "Mark as Mine" if step["action"] == "flagged" else "Reveal"
            method_label = METHOD_LABELS.get(step["method"], step["method"])
            detail = ""
            if step["probability"] is not None:
                detail = f" (mine probability {step['probability'] * 100:.1f}%)"
            message = (
                f"**Step {step_display}/{len(steps)}**: {action_label} cell "
                f"{step['cell']} - *{method_label}*{detail}"
            )
            if step["action"] == "guessed_and_lost":
                st.error(message + " - **Game Lost! Hit a mine.**")
            elif step_display == len(steps) and outcome is not None and outcome.won:
                st.success(message + " - **Game Won!**")
            else:
                st.info(message)

            is_final = step_display == len(steps)
            html = render_snapshot(
                step["snapshot"],
                mines=game.mines() if is_final else None,
                highlight_cell=step["cell"],
            )
            st.markdown(html, unsafe_allow_html=True)
        else:
            show_probabilities = st.checkbox("Show mine probabilities", value=False)
            probabilities = None
            view = Board(game) if solver is None else solver.board
            if show_probabilities and view.revealed_cells():
                probabilities = dict(
                    board_probabilities(view, max_component_size=max_component_size).items()
                )
            st.markdown(render_snapshot(view.snapshot(), probabilities=probabilities), unsafe_allow_html=True)
            st.info("Click 'Solve' to play the board, or 'Regenerate Board' for a new one.")

    with stats_col:
        st.subheader("Solver Statistics")

        if solver is not None and outcome is not None:
            stats: Dict[str, Any] = outcome.stats
            metrics: List[Tuple[str, Any]] = [
                ("Result", "Win" if outcome.won else "Loss"),
                ("Reveal Moves", stats["reveal_moves_count"]),
                ("Cells Revealed", stats["revealed_cells_count"]),
                ("Mines Flagged", stats["flags_count"]),
                ("Luck", f"{stats['luck']:.3f}"),
            ]
            for label, value in metrics:
                st.metric(label, value)

            st.markdown("---")
            st.markdown("**Inference Statistics**")
            for method, count in stats["inferred_counts"].items():
                st.text(f"{METHOD_LABELS[method]}: {count} cells")
            st.text(f"Guesses: {stats['guesses_count']}")
            st.text(f"Approximated guesses: {stats['approximated_guesses_count']}")
        else:
            st.info("Run the solver to see statistics.")


if __name__ == "__main__":
    main()
