# matrix_oracle/runner.py
# TestRunner boundary -- invokes the engine under test against persisted
# input fixtures and leaves its results in the same fixture store.
#
# Contract: after run(request) returns, store.load(output_name(f)) yields the
# engine's result for every fixture f in request.fixture_names.
#
# The invocation is synchronous and bounded by request.timeout_s. Expiry
# raises RunnerTimeoutError. Any other engine failure raises RunnerError.
# Runners never retry.

import concurrent.futures
import subprocess
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Sequence

from matrix_oracle.data_models.matrix import Matrix
from matrix_oracle.exceptions import InvalidSpecError, RunnerError, RunnerTimeoutError
from matrix_oracle.storage.fixture_store import FixtureStore, input_name, output_name

# engine(inputs, transform_id, variables) -> outputs, keyed by fixture name.
EngineFn = Callable[[Dict[str, Matrix], str, Dict[str, object]], Mapping[str, Matrix]]

_STDERR_TAIL_CHARS = 2000


def _call_into(future: concurrent.futures.Future, fn, *args) -> None:
    # Worker body: hand the engine's result or exception to the waiting caller.
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = fn(*args)
    except BaseException as exc:
        future.set_exception(exc)
    else:
        future.set_result(result)


@dataclass(frozen=True)
class RunRequest:
    """
    Everything a runner needs for one engine invocation.

    Fields:
      scenario_name  -- Scenario being executed (for diagnostics).
      transform_id   -- Transform the engine is expected to apply.
      script         -- Engine-side program identifier; may be empty.
      fixture_names  -- Logical fixture names to process, declaration order.
      variables      -- (name, value) pairs for the engine.
      store          -- Fixture store scoped to this execution.
      timeout_s      -- Time bound for the invocation.
    """
    scenario_name: str
    transform_id:  str
    script:        str
    fixture_names: tuple
    variables:     tuple
    store:         FixtureStore
    timeout_s:     float


class TestRunner:
    """
    Base class for engine adapters. Subclasses implement run().
    """

    # Keep pytest from collecting this class as a test case.
    __test__ = False

    def run(self, request: RunRequest) -> None:
        raise NotImplementedError


class CallableEngineRunner(TestRunner):
    """
    Drives an in-process engine callable.

    The runner loads every in/<fixture>, calls the engine once on a worker
    thread, waits at most request.timeout_s, and saves every returned matrix
    as out/<fixture>. Outputs for names the engine did not return are simply
    absent; the comparison stage reports them as missing fixtures.

    A timed-out engine call cannot be interrupted. It runs on a daemon
    thread, which is abandoned on timeout: whatever it returns later is
    discarded, and it never keeps the interpreter from exiting.
    """

    def __init__(self, engine: EngineFn, name: str = "") -> None:
        if not callable(engine):
            raise InvalidSpecError("engine", engine, "must be callable")
        self._engine = engine
        self._name   = name or getattr(engine, "__name__", "engine")

    def run(self, request: RunRequest) -> None:
        inputs = {f: request.store.load(input_name(f)) for f in request.fixture_names}
        variables = dict(request.variables)

        future: concurrent.futures.Future = concurrent.futures.Future()
        worker = threading.Thread(
            target=_call_into,
            args=(future, self._engine, inputs, request.transform_id, variables),
            name=f"engine-{self._name}",
            daemon=True,
        )
        worker.start()
        try:
            outputs = future.result(timeout=request.timeout_s)
        except concurrent.futures.TimeoutError:
            raise RunnerTimeoutError(request.timeout_s, self._name)
        except Exception as exc:
            raise RunnerError(
                f"engine '{self._name}' raised {type(exc).__name__}: {exc}"
            ) from exc

        if not isinstance(outputs, Mapping):
            raise RunnerError(
                f"engine '{self._name}' returned {type(outputs).__name__}, expected a mapping"
            )
        for fixture_name, matrix in outputs.items():
            if fixture_name not in request.fixture_names:
                continue
            if not isinstance(matrix, Matrix):
                raise RunnerError(
                    f"engine '{self._name}' returned {type(matrix).__name__} "
                    f"for fixture '{fixture_name}', expected Matrix"
                )
            request.store.save(output_name(fixture_name), matrix)


class SubprocessRunner(TestRunner):
    """
    Drives an external engine command.

    command is a sequence of argument templates formatted with:
      {fixtures_dir}  -- root of the execution's fixture store
      {transform}     -- transform id
      {script}        -- engine-side program identifier
      {scenario}      -- scenario name
      plus every scenario variable by name (e.g. {rows}, {cols}).

    The engine reads in/<fixture>.json and must write out/<fixture>.json in
    the fixture store format. A non-zero exit code raises RunnerError with
    the tail of stderr.
    """

    def __init__(self, command: Sequence[str]) -> None:
        if isinstance(command, str) or not command:
            raise InvalidSpecError("command", command, "must be a non-empty sequence of arguments")
        self._command = tuple(str(part) for part in command)

    def build_command(self, request: RunRequest) -> list:
        fields = dict(request.variables)
        fields.update({
            "fixtures_dir": str(request.store.path),
            "transform":    request.transform_id,
            "script":       request.script,
            "scenario":     request.scenario_name,
        })
        try:
            return [part.format(**fields) for part in self._command]
        except (KeyError, IndexError) as exc:
            raise InvalidSpecError(
                "command", self._command, f"unknown placeholder {exc}"
            ) from exc

    def run(self, request: RunRequest) -> None:
        cmd = self.build_command(request)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=request.timeout_s,
            )
        except subprocess.TimeoutExpired:
            raise RunnerTimeoutError(request.timeout_s, cmd[0])
        except OSError as exc:
            raise RunnerError(f"could not start '{cmd[0]}': {exc}") from exc

        if proc.returncode != 0:
            tail = (proc.stderr or "")[-_STDERR_TAIL_CHARS:]
            raise RunnerError(
                f"'{cmd[0]}' exited with code {proc.returncode}: {tail.strip()}",
                exit_code=proc.returncode,
            )
