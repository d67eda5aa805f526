"""Keyboard interface that turns key presses into planner commands."""

from __future__ import annotations

import argparse
import contextlib
import json
from collections.abc import Callable, Sequence

import numpy as np

from legtraj.commands import TowrCommand
from legtraj.models import Robot, robot_name
from legtraj.state import Dx, State

# Key codes as reported by curses for the special keys.
KEY_DOWN = 258
KEY_UP = 259
KEY_LEFT = 260
KEY_RIGHT = 261
KEY_NPAGE = 338
KEY_PPAGE = 339

#: Number of predefined gait combinations.
COMBO_COUNT = 5

#: Terrains that can be chosen; the index is sent in the command.
DEFAULT_TERRAIN_NAMES = ("Flat",)

HEADING_ROW = 6
STATUS_ROW = 22

_D_LIN = 0.1  # [m]
_D_ANG = 0.25  # [rad]
_D_DURATION = 0.2  # [s]
_D_SPEED = 0.1

_GOAL_MOVES = {
    KEY_RIGHT: ("lin", 0, -_D_LIN),
    KEY_LEFT: ("lin", 0, _D_LIN),
    KEY_DOWN: ("lin", 1, _D_LIN),
    KEY_UP: ("lin", 1, -_D_LIN),
    KEY_PPAGE: ("lin", 2, 0.5 * _D_LIN),
    KEY_NPAGE: ("lin", 2, -0.5 * _D_LIN),
    ord("4"): ("ang", 0, -_D_ANG),  # roll-
    ord("6"): ("ang", 0, _D_ANG),  # roll+
    ord("8"): ("ang", 1, _D_ANG),  # pitch+
    ord("2"): ("ang", 1, -_D_ANG),  # pitch-
    ord("1"): ("ang", 2, _D_ANG),  # yaw+
    ord("9"): ("ang", 2, -_D_ANG),  # yaw-
}

_STATUS = {
    ord("o"): "Optimizing motion",
    ord("v"): "Visualizing current bag file",
    ord("i"): "Visualizing initialization (iteration 0)",
    ord("p"): "In rqt_bag: right-click on xpp/state_des -> View -> Plot.\n"
    "Then expand the values you wish to plot on the right",
    ord("q"): "Closing user interface",
}

_BANNER = (
    " " + "*" * 78,
    "                 Legged trajectory optimization - user interface",
    " " + "*" * 78,
)


def advance_circular(current: int, count: int) -> int:
    """Next index in a ring of ``count`` entries."""
    if count <= 0:
        raise ValueError("a ring needs at least one entry")
    return 0 if current == count - 1 else current + 1


def _row(key: str, description: str, value: str) -> str:
    return f" {key:<9}{description:<25}{value}"


class UserInterface:
    """Holds the goal and settings the user edits and publishes each change."""

    def __init__(self, publish: Callable[[TowrCommand], None]) -> None:
        self._publish = publish
        self.goal_position = np.array([2.1, 0.0, 0.0])
        self.goal_orientation = np.zeros(3)  # roll, pitch, yaw applied Z->Y'->X''
        self.robot = int(Robot.MONOPED)
        self.terrain = 0
        self.terrain_names: list[str] = list(DEFAULT_TERRAIN_NAMES)
        self.gait_combo = 0
        self.total_duration = 2.4
        self.replay_speed = 1.0  # realtime
        self.optimize_phase_durations = False
        self.running = True
        self.status = ""
        self._reset_one_shot_flags()

    def _reset_one_shot_flags(self) -> None:
        self.optimize = False
        self.visualize_trajectory = False
        self.plot_trajectory = False
        self.play_initialization = False

    def handle_key(self, key: int | str) -> TowrCommand:
        """Apply a key press, publish the resulting command and return it."""
        code = ord(key) if isinstance(key, str) else int(key)

        if code in _GOAL_MOVES:
            target, dim, delta = _GOAL_MOVES[code]
            vector = self.goal_position if target == "lin" else self.goal_orientation
            vector[dim] += delta
        elif code == ord("t"):
            self.terrain = advance_circular(self.terrain, len(self.terrain_names))
        elif code == ord("g"):
            self.gait_combo = advance_circular(self.gait_combo, COMBO_COUNT)
        elif code == ord("r"):
            self.robot = advance_circular(self.robot, len(Robot))
        elif code == ord("+"):
            self.total_duration += _D_DURATION
        elif code == ord("-"):
            self.total_duration -= _D_DURATION
        elif code == ord("'"):
            self.replay_speed += _D_SPEED
        elif code == ord(";"):
            self.replay_speed -= _D_SPEED
        elif code == ord("y"):
            self.optimize_phase_durations = not self.optimize_phase_durations
        elif code == ord("o"):
            self.optimize = True
        elif code == ord("v"):
            self.visualize_trajectory = True
        elif code == ord("i"):
            self.play_initialization = True
        elif code == ord("p"):
            self.plot_trajectory = True
        elif code == ord("q"):
            self.running = False

        if code in _STATUS:
            self.status = _STATUS[code]

        command = self.command()
        self._publish(command)
        self._reset_one_shot_flags()
        return command

    def command(self) -> TowrCommand:
        """The command describing the current settings."""
        goal_lin = State(3, 3)
        goal_lin.set(Dx.POS, self.goal_position)
        goal_ang = State(3, 3)
        goal_ang.set(Dx.POS, self.goal_orientation)
        return TowrCommand(
            goal_lin=goal_lin,
            goal_ang=goal_ang,
            total_duration=self.total_duration,
            replay_trajectory=self.visualize_trajectory,
            play_initialization=self.play_initialization,
            replay_speed=self.replay_speed,
            optimize=self.optimize,
            terrain=self.terrain,
            gait=self.gait_combo,
            robot=self.robot,
            optimize_phase_durations=self.optimize_phase_durations,
            plot_trajectory=self.plot_trajectory,
        )

    def screen_lines(self) -> list[str]:
        """The key table, starting with its heading and a blank line."""
        x, y = self.goal_position[:2]
        roll, pitch, yaw = self.goal_orientation
        return [
            _row("Key", "Description", "Info"),
            "",
            _row("o", "Optimize motion", "-"),
            _row("v", "visualize motion in rviz", "-"),
            _row("i", "play initialization", "-"),
            _row("p", "Plot values (rqt_bag)", "-"),
            _row(";/'", "Replay speed", f"{self.replay_speed:.2f}"),
            _row("arrows", "Goal x-y", f"{x:.2f}  {y:.2f} [m]"),
            _row("keypad", "Goal r-p-y", f"{roll:.2f}  {pitch:.2f}  {yaw:.2f} [rad]"),
            _row("r", "Robot", robot_name(self.robot)),
            _row("g", "Gait", str(self.gait_combo)),
            _row("y", "Optimize gait", "On" if self.optimize_phase_durations else "off"),
            _row("t", "Terrain", self.terrain_names[self.terrain]),
            _row("+/-", "Duration", f"{self.total_duration:.2f} [s]"),
            _row("q", "Close user interface", "-"),
        ]


def _command_to_dict(command: TowrCommand) -> dict:
    return {
        "goal_lin": {
            "pos": command.goal_lin.p().tolist(),
            "vel": command.goal_lin.v().tolist(),
        },
        "goal_ang": {
            "pos": command.goal_ang.p().tolist(),
            "vel": command.goal_ang.v().tolist(),
        },
        "total_duration": command.total_duration,
        "replay_trajectory": command.replay_trajectory,
        "play_initialization": command.play_initialization,
        "replay_speed": command.replay_speed,
        "optimize": command.optimize,
        "terrain": command.terrain,
        "gait": command.gait,
        "robot": command.robot,
        "optimize_phase_durations": command.optimize_phase_durations,
        "plot_trajectory": command.plot_trajectory,
    }


def _draw(stdscr, ui: UserInterface, curses_error) -> None:
    stdscr.erase()
    lines = list(enumerate(_BANNER))
    lines += [(HEADING_ROW + i, text) for i, text in enumerate(ui.screen_lines())]
    lines += [(STATUS_ROW + i, text) for i, text in enumerate(ui.status.splitlines())]
    for row, text in lines:
        with contextlib.suppress(curses_error):
            stdscr.addstr(row, 0, text)
    stdscr.refresh()


def _run(stdscr, ui: UserInterface, curses_error) -> None:
    stdscr.keypad(True)
    while ui.running:
        _draw(stdscr, ui, curses_error)
        ui.handle_key(stdscr.getch())


def main(argv: Sequence[str] | None = None) -> int:
    """Run the keyboard interface, appending each command as a JSON line."""
    parser = argparse.ArgumentParser(
        description="Edit the planning goal with the keyboard."
    )
    parser.add_argument(
        "--output",
        default="user_commands.jsonl",
        help="file to which every command is appended as one JSON line",
    )
    args = parser.parse_args(argv)

    import curses

    with open(args.output, "a", encoding="utf-8") as out:

        def publish(command: TowrCommand) -> None:
            out.write(json.dumps(_command_to_dict(command)) + "\n")
            out.flush()

        ui = UserInterface(publish)
        curses.wrapper(_run, ui, curses.error)
    return 0