# nexusnode

Building blocks for a prover node:

- **Tasks**: `nexusnode.task.Task` holds a task's identifiers, public inputs,
  type and difficulty. `combine_proof_hashes` joins proof hashes into one
  Keccak-256 hex digest.
- **Adaptive difficulty**: `nexusnode.difficulty.DifficultyTracker` picks the
  next `TaskDifficulty` to request from the last success and how long it took.
  A task that took 420 seconds or more keeps the difficulty where it is.
- **System information**: `nexusnode.system` reports logical cores, CPU
  frequency, memory use, an estimated peak GFLOP/s and a measured GFLOP/s
  figure. The measurement is cached after the first call.
- **Session messages**: `nexusnode.messages` prints coloured `[INFO]` and
  `[SUCCESS]` lines for session start and shutdown.
- **Metrics**: `nexusnode.metrics` samples CPU and RAM use of the current
  process and of its child processes whose names contain "nexus". It also
  keeps task counters, the success rate and the proving runtime.
- **Dashboard**: `nexusnode.dashboard.DashboardState` turns worker events
  (`ActivityEvent`) into counters, timers and an activity log of the last 50
  events. `nexusnode.render` builds `rich` renderables for the header, the
  info, log and metrics panels, the footer, the whole dashboard and a login
  screen. `nexusnode.utils` holds the formatting helpers they share.

## Installation

```
pip install .
```

With the test tools:

```
pip install ".[test]"
```

## Examples

Combining proof hashes:

```python
from nexusnode.task import combine_proof_hashes

combine_proof_hashes(["a1b2c3d4e5f6"])
# '966f43edb4fb988490ec112be0d646d119651650d74e4244ec3d291a1c073cf2'
combine_proof_hashes([])
# ''
```

Choosing the next difficulty:

```python
from nexusnode.difficulty import DifficultyTracker, TaskDifficulty

tracker = DifficultyTracker()
tracker.desired_difficulty()            # TaskDifficulty.SMALL_MEDIUM to start with
tracker.record_assignment(TaskDifficulty.MEDIUM)
tracker.update_success_tracking(300)    # finished quickly
tracker.desired_difficulty()            # TaskDifficulty.LARGE
```

Feeding events to the dashboard and drawing it once:

```python
from rich.console import Console

from nexusnode.dashboard import ActivityEvent, DashboardState, EventType, WorkerKind
from nexusnode.render import render_dashboard

state = DashboardState(node_id=12345, num_threads=2)
state.add_event(ActivityEvent(
    WorkerKind.TASK_FETCHER, EventType.SUCCESS,
    "Step 1 of 4: Got task abc123", timestamp="2024-01-01 12:00:00",
))
state.update()
state.current_task                      # 'abc123'

Console().print(render_dashboard(state, "0.10.13", 40))
```

## The Fibonacci guest program

`nexusnode-fib` reads up to three lines from standard input. The first is the
number of steps. The next two are optional starting values, and each defaults
to 1 when it is missing or cannot be read. The command prints the final value,
computed with 32-bit wrapping addition. If the first line is missing or is not
a valid unsigned 32-bit number, the command reports the error on standard
error and exits with status 1.

```
printf '10\n1\n1\n' | nexusnode-fib
144
```

The same computation is available as `nexusnode.fib.fibonacci(n, init_a, init_b)`.

## What this package does not do

- It does not talk to an orchestrator. It does not fetch tasks, generate
  proofs or submit them. `Task` and `DifficultyTracker` only hold the data and
  choose what to request.
- It does not check for newer releases or for version requirements, and it
  does not check regional restrictions at start-up.
- It has no interactive terminal application. There is no event loop, no key
  handling and no splash screen. `nexusnode.render` returns renderables, and
  drawing and refreshing them is up to the caller.
- It stores no configuration and no credentials.

## Running the tests

```
pytest
```