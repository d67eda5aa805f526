# legtraj

Building blocks for formulating trajectory optimization problems for legged
robots: robot models, constraint sets evaluated on spline nodes or at
discretized times, helpers for preparing planning requests and visualization
data, and a terminal keyboard editor for planning commands.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

- `legtraj.state` – `State` holds a vector quantity and its derivatives, all
  zero at first. `at(deriv)` returns a copy, `set(deriv, value)` replaces one,
  and `p()`, `v()`, `a()` give position, velocity and acceleration. `Dx` names
  the derivatives and `Dim` the Cartesian axes.
- `legtraj.models` – kinematic models (`MonopedKinematicModel`,
  `BipedKinematicModel`, `HyqKinematicModel`, `AnymalKinematicModel`) giving
  the nominal stance of each foot in the base frame
  (`nominal_stance_in_base()`), the allowed deviation from it
  (`max_deviation_from_nominal()`) and `number_of_endeffectors()`. A plain
  `KinematicModel(n_ee)` has zero range of motion. `rigid_body_parameters(robot)`
  returns a `RigidBodyParameters` with mass and inertia elements, and
  `inertia_matrix()` builds the symmetric 3x3 matrix. `make_kinematic_model(robot)`
  and `robot_name(robot)` take a `Robot` value. Foot indices are `BipedId` and
  `QuadrupedId`.
- `legtraj.constraints` – `ConstraintSet` and `Bounds` (with `BOUND_ZERO` and
  `NO_BOUND`), the base of all constraints. A set is linked to its variables by
  `init_variable_depended_quantities(variables)`, where `variables` maps
  variable-set names to objects. `TimeDiscretizationConstraint` evaluates a
  constraint at a list of times; subclasses implement
  `update_constraint_at_instance`, `update_bounds_at_instance` and
  `update_jacobian_at_instance`, and a subclass's `from_horizon(total_time, dt,
  name)` places the times every `dt` from zero plus once at `total_time`.
  `TotalDurationConstraint(total_time, ee, schedule_id)` bounds the sum of the
  optimized phase durations of one foot between 0.1 and `total_time - 0.2`.
- `legtraj.node_constraints` – `SwingConstraint` keeps each non-constant node
  at the x-y midpoint of its neighbours with a matching velocity, and
  `TerrainConstraint` keeps every node after the first on the terrain (constant
  nodes) or above it. The node variables and the terrain are supplied by you;
  they must provide the methods described by the `NodeVariables` and
  `HeightMap` protocols. Jacobian columns are looked up with `NodeValueInfo`.
- `legtraj.commands` – `TowrCommand`, the planning request;
  `to_xpp_endeffector(number_of_ee, towr_ee_id)` maps foot indices of one-,
  two- and four-legged robots to visualization ids and names;
  `select_iteration_topics` and `iteration_time_offsets` pick evenly spaced
  optimizer iterations and give each a playback start time;
  `solver_options(command)` gives the solver settings for a request;
  `initial_stance(nominal_stance_b, z_ground)` puts the feet on flat ground and
  returns the base height above them.
- `legtraj.visualization` – `Quaternion`, `Pose` and `Marker`;
  `goal_pose(terrain, command)` places the commanded goal on the terrain with
  the commanded roll, pitch and yaw, and `terrain_markers(terrain, dxy, x_min,
  x_max, y_min, y_max)` tiles an area with patches tilted to the terrain
  normal. `quaternion_from_euler_zyx` and `quaternion_from_two_vectors` do the
  rotation work.
- `legtraj.user_interface` – `UserInterface`, a keyboard-driven editor for a
  `TowrCommand` that calls a publish function after every key, and
  `advance_circular(current, count)` for cycling through robots, gaits and
  terrains.

## Example

```python
from legtraj.commands import to_xpp_endeffector
from legtraj.models import Robot, make_kinematic_model

print(to_xpp_endeffector(4, 0))  # (0, 'Left-Front')
print(make_kinematic_model(Robot.HYQ).nominal_stance_in_base())
```

## Keyboard interface

```
legtraj-ui --output user_commands.jsonl
```

opens a curses screen listing the keys: arrow keys and Page Up/Down move the
goal position, the keypad digits change the goal orientation, `r`, `g` and `t`
cycle through robots, gait combinations and terrains, `+`/`-` change the
duration, `;`/`'` the replay speed, `y` toggles phase-duration optimization,
`o`, `v`, `i` and `p` set one-shot request flags, and `q` closes the screen.
After every key press the current command is appended as one JSON line to the
output file (default `user_commands.jsonl`).

## What this package does not do

It contains no nonlinear solver, no spline or node variable sets, no terrain
height maps, no gait generator and no dynamics constraints; the constraint
classes expect such objects to be supplied. The keyboard interface only writes
commands to a file: nothing here reads them, runs an optimization, records or
replays trajectories, or draws the goal pose and terrain markers in a viewer.