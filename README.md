# glowdrive

Building blocks for the driver and agent sides of a small distributed
data-flow system. The package has no dependencies beyond the standard library.

- **Planning** (`glowdrive.plan`): `group_tasks(fc)` fuses connected steps of a
  flow into `StepGroup`s and splits them shard by shard into `TaskGroup`s that
  run together on one executor. Inconsistent flows raise `PlanError`.
- **Plotting** (`glowdrive.plot`): `render_graph(task_groups, fc)` returns the
  task groups as a Graphviz dot graph; `plot_graph` prints it.
- **Resource matching** (`glowdrive.market`): `Market` is a continuous double
  auction that pairs waiting `Demand`s with `Supply`s by a scoring function.
- **Data locality** (`glowdrive.locator`): `DatasetShardLocator` remembers where
  each dataset shard lives, and `score_task_group` divides a bid by one plus the
  distance from a task group's inputs to an allocation.
- **File distribution** (`glowdrive.rsync`): `RsyncServer` serves the executable
  and related files over HTTP; `fetch_files_to` downloads only files whose
  CRC-32 differs from the local copy.
- **Executor bookkeeping** (`glowdrive.executors`): `LocalExecutorManager` keeps
  one `AgentExecutorStatus` per request id and drops entries not touched for
  24 hours.
- **Options** (`glowdrive.options`): `DriverOption` and `TaskOption` read the
  `-glow.*` and certificate flags from a command line.

## Flow objects

`plan`, `plot` and `locator` work on flow objects supplied by the caller and
only read their attributes: a flow has `steps` and `datasets`; a step has `id`,
`tasks` and `inputs`; a dataset has `id`, `step`, `shards`, `reading_steps`,
`external_input_chans` and `external_output_chans`; a shard has `name`,
`display_name`, `parent` and `reading_tasks`; a task has `id`, `name`,
`inputs` and `outputs`. Locations given to the locator need `url()` and
`distance(other)`, and allocations a `location`.

## Matching demands with supplies

```python
import queue

from glowdrive.market import Market, Supply

market = Market().set_score_function(
    lambda requirement, bid, obj: 1 / (1 + abs(requirement - obj))
).set_fetch_function(lambda demands: None)

answers = [queue.Queue(maxsize=1) for _ in range(3)]
for wanted, answer in zip([1.0, 2.0, 3.0], answers):
    market.add_demand(wanted, 1, answer)

for offered in [2.8, 0.8, 1.8]:
    market.add_supply(Supply(offered))

print([answer.get().object for answer in answers])
```

A demand that finds supplies waiting gets the best-scoring one at once;
otherwise it is queued. `add_supply` hands a supply to the best-scoring waiting
demand or keeps it; on equal scores the later candidate wins. `fetcher_loop`
runs forever, calling the fetch function with the pending demands whenever
there are any. `return_supply` puts a supply back on the market.

## Serving and fetching files

```python
from glowdrive.rsync import RsyncServer, fetch_files_to

server = RsyncServer("./my_flow", ["lookup.txt"])
server.start("localhost:0", None)
print(server.port, server.executable_file_hash())

fetch_files_to(f"localhost:{server.port}", "/tmp/work")
server.stop()
```

The server answers `/list` with the file names and checksums and
`/file/<name>` with a file's content. Files that cannot be read when the
server is created are logged and left out. `generate_file_hash(path)` gives a
file's `FileHash`, `list_files(server)` what a server offers, and
`fetch_url(url, path)` downloads one file and marks it executable. Failures
while listing, downloading or writing raise `FetchError`. Pass an
`ssl.SSLContext` to `start` to serve over TLS.

## Tracking executors

```python
from glowdrive.executors import LocalExecutorManager

manager = LocalExecutorManager()
status = manager.get_executor_status(42)
stopper = manager.start_purging()   # purges hourly in a daemon thread
...
stopper.set()
```

`purge_expired(now)` can also be called directly and returns the dropped ids.

## Reading options

```python
from glowdrive.options import DriverOption, TaskOption, parse_input_locations

driver = DriverOption.from_args(["-glow", "-glow.leader", "localhost:8930"])
print(driver.related_file_names())

task = TaskOption.from_args(["-glow.flow.id", "0", "-glow.taskGroup.id", "2"])
print(task.is_task_mode())

print(parse_input_locations("abc-d1-s0@host1:8931,abc-d2-s0@host2:8931"))
```

Flags are accepted as `-name value`, `-name=value` or, for booleans, `-name`.
Unknown flags are ignored; bad values raise `ValueError`.

## What the package does not do

It provides no command to run, no agent server that accepts connections,
stores dataset shards or starts executors, no scheduler event loop that
requests executors from a leader, and no network channels between tasks. It
does not define flows or datasets itself; these are supplied by the caller as
described above.

## Tests

The test suite uses pytest and is installed with the `test` extra.