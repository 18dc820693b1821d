"""
Simulation Scheduler

Drives sample generation and owns the run state machine:

    IDLE -> RUNNING <-> PAUSED
               |
               v
           COMPLETED  (until the next run())

Instant mode generates every sample synchronously inside run(). Animated
mode uses a repeating generation timer firing every 1000 / speed ms; each
firing produces one sample and starts a workload lifecycle:

    originating --800ms--> distributing --1500ms--> completed --500ms--> removed

Lifecycle timings do not depend on speed, so a faster run simply has more
workloads in flight at once.

Time is a SimPy environment measured in milliseconds. Callers either advance
it directly (batch runs, tests) or let a RealtimeDriver pump it from the
wall clock. Every state change happens under one re-entrant lock.
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import threading
from typing import Any, Callable, Mapping, Optional

import simpy
from simpy.core import Infinity
from simpy.events import Timeout

from ..config.settings import EngineSettings, get_settings
from ..core.entities import LocationSet
from .distribution import default_distribution
from .entities import Substep, Workload
from .generator import SampleGenerator
from .history import SimulationHistory, next_simulation_name
from .models import (
    ConfigBundle,
    ExecutionConfig,
    LocationStats,
    OriginConfig,
    SimulationConfig,
    SimulationResult,
)
from .mutations import (
    ConfigMutation,
    SetSimulationOption,
    SimulationOption,
    apply_mutation,
    validate_bundle,
    validate_execution_config,
    validate_origin_config,
    validate_simulation_config,
)
from .sampler import RandomSource
from .state import SimulationState

logger = logging.getLogger(__name__)


class SchedulerStatus(Enum):
    """Run state machine."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class FrameSnapshot:
    """What a renderer needs for one frame. Everything is a copy."""
    status: SchedulerStatus
    name: str
    time_ms: float
    samples_processed: int
    num_samples: int
    workloads: list[Workload] = field(default_factory=list)
    stats: dict[str, LocationStats] = field(default_factory=dict)
    active_workloads: dict[str, int] = field(default_factory=dict)
    accumulated_dots: dict[str, int] = field(default_factory=dict)

    @property
    def substeps(self) -> list[Substep]:
        return [substep for workload in self.workloads for substep in workload.substeps]

    @property
    def progress(self) -> float:
        return self.samples_processed / self.num_samples if self.num_samples else 0.0


CompletionCallback = Callable[[Optional[SimulationResult]], Any]


class SimulationScheduler:
    """
    Main simulation engine.

    Owns the live configuration, the SimulationState and the generation
    timer. The completion callback runs with the scheduler lock held and
    receives the recorded SimulationResult (None when auto_record is off).
    """

    def __init__(
        self,
        locations: LocationSet = None,
        bundle: ConfigBundle = None,
        rng: RandomSource = None,
        env: simpy.Environment = None,
        settings: EngineSettings = None,
        history: SimulationHistory = None,
        on_complete: CompletionCallback = None,
        auto_record: bool = True,
        name: str = "Simulation 1"
    ):
        self.settings = settings or get_settings()
        self.locations = locations or LocationSet()
        self.env = env or simpy.Environment()
        self.history = history if history is not None else SimulationHistory()
        self.on_complete = on_complete
        self.auto_record = auto_record
        self.name = name

        if rng is None:
            rng = random.Random(self.settings.random_seed)
        self.generator = SampleGenerator(self.locations, rng)

        if bundle is None:
            bundle = self._default_bundle()
        self._bundle = validate_bundle(bundle, self.locations)

        self.state = SimulationState.fresh(self.locations)
        self.status = SchedulerStatus.IDLE
        self._timer: Optional[simpy.Process] = None
        self._recorded_name: Optional[str] = None  # History name of the current run, once recorded
        self._lock = threading.RLock()

    def _default_bundle(self) -> ConfigBundle:
        max_count = self.settings.max_workload_count
        return ConfigBundle.default(
            self.locations,
            num_samples=self.settings.num_samples,
            speed=self.settings.speed,
            instant_mode=self.settings.instant_mode,
            max_workload_count=max_count,
            workload_count_distribution=default_distribution(max_count)
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def now(self) -> float:
        return self.env.now

    @property
    def origin_config(self) -> OriginConfig:
        return self._bundle.origin_config

    @property
    def execution_config(self) -> ExecutionConfig:
        return self._bundle.execution_config

    @property
    def simulation_config(self) -> SimulationConfig:
        return self._bundle.simulation_config

    @property
    def samples_processed(self) -> int:
        return self.state.samples_processed

    @property
    def stats(self) -> dict[str, LocationStats]:
        return self.state.stats

    @property
    def has_active_timer(self) -> bool:
        return self._timer is not None and self._timer.is_alive

    def current_bundle(self) -> ConfigBundle:
        """Copy of the live configuration, e.g. for saving as a preset."""
        with self._lock:
            return self._bundle.model_copy(deep=True)

    def frame(self) -> FrameSnapshot:
        with self._lock:
            state = self.state
            return FrameSnapshot(
                status=self.status,
                name=self.name,
                time_ms=self.env.now,
                samples_processed=state.samples_processed,
                num_samples=self.simulation_config.num_samples,
                workloads=[w.copy() for w in state.workloads.values()],
                stats={k: v.model_copy() for k, v in state.stats.items()},
                active_workloads={k: v for k, v in state.active_workloads.items() if v},
                accumulated_dots=dict(state.accumulated_dots)
            )

    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------

    def run(self, name: Optional[str] = None) -> None:
        """Start a fresh run, discarding whatever the previous one left."""
        with self._lock:
            if name:
                self.name = name
            self._cancel_timer()
            self.state.reset(self.locations)
            self._recorded_name = None
            self.status = SchedulerStatus.RUNNING

            config = self.simulation_config
            logger.info(
                "Starting %s: %d samples, %s",
                self.name,
                config.num_samples,
                "instant" if config.instant_mode else f"{config.speed:g} samples/s"
            )

            if config.instant_mode:
                self._drain()
            else:
                self._start_timer()

    def pause(self) -> bool:
        with self._lock:
            if self.status is not SchedulerStatus.RUNNING:
                logger.debug("Ignoring pause while %s", self.status.value)
                return False
            self._cancel_timer()
            self.status = SchedulerStatus.PAUSED
            return True

    def resume(self) -> bool:
        with self._lock:
            if self.status is not SchedulerStatus.PAUSED:
                logger.debug("Ignoring resume while %s", self.status.value)
                return False
            self.status = SchedulerStatus.RUNNING
            if self.simulation_config.instant_mode:
                self._drain()
            else:
                self._start_timer()
            return True

    def reset(self) -> None:
        with self._lock:
            self._cancel_timer()
            self.state.reset(self.locations)
            self._recorded_name = None
            self.status = SchedulerStatus.IDLE

    def set_speed(self, speed: float) -> None:
        self.apply(SetSimulationOption(SimulationOption.SPEED, speed))

    def set_instant_mode(self, instant_mode: bool) -> None:
        self.apply(SetSimulationOption(SimulationOption.INSTANT_MODE, instant_mode))

    def set_num_samples(self, num_samples: int) -> None:
        self.apply(SetSimulationOption(SimulationOption.NUM_SAMPLES, num_samples))

    # ------------------------------------------------------------------
    # Configuration updates (accepted at any time)
    # ------------------------------------------------------------------

    def apply(self, mutation: ConfigMutation) -> None:
        with self._lock:
            self._replace_bundle(apply_mutation(self._bundle, mutation, self.locations))

    def update_origin_config(self, origin_config: Mapping[str, float]) -> None:
        with self._lock:
            validated = validate_origin_config(origin_config, self.locations)
            self._replace_bundle(self._bundle.model_copy(update={"origin_config": validated}))

    def update_execution_config(self, execution_config: Mapping[str, Mapping[str, Any]]) -> None:
        with self._lock:
            validated = validate_execution_config(execution_config, self.locations)
            self._replace_bundle(self._bundle.model_copy(update={"execution_config": validated}))

    def update_workload_count_distribution(self, distribution: Mapping[int, int]) -> None:
        with self._lock:
            data = self.simulation_config.model_dump()
            data["workload_count_distribution"] = dict(distribution)
            config = validate_simulation_config(data)
            self._replace_bundle(self._bundle.model_copy(update={"simulation_config": config}))

    def update_simulation_config(self, config: SimulationConfig) -> None:
        with self._lock:
            validated = validate_simulation_config(config)
            self._replace_bundle(self._bundle.model_copy(update={"simulation_config": validated}))

    def load_bundle(self, bundle: ConfigBundle) -> None:
        """Make a stored preset the active configuration."""
        with self._lock:
            self._replace_bundle(validate_bundle(bundle, self.locations))

    def _replace_bundle(self, bundle: ConfigBundle) -> None:
        previous = self.simulation_config
        self._bundle = bundle
        self._on_simulation_config_changed(previous, bundle.simulation_config)

    def _on_simulation_config_changed(
        self,
        previous: SimulationConfig,
        current: SimulationConfig
    ) -> None:
        if self.status is SchedulerStatus.RUNNING:
            if current.instant_mode and not previous.instant_mode:
                self._cancel_timer()
                self._drain()
                return
            if not current.instant_mode and (
                previous.instant_mode or current.speed != previous.speed
            ):
                self._start_timer()

        if current.num_samples != previous.num_samples:
            self._check_completion()

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def save_result(self, name: Optional[str] = None) -> SimulationResult:
        """
        Snapshot the current configuration and stats into the history.

        The auto-generated name then advances to the next "Simulation N".
        Re-saving a run that completion already recorded keeps that entry's
        name and leaves the next name alone.
        """
        with self._lock:
            if name is None and self._recorded_name is not None:
                return self.history.save(self._recorded_name, self._bundle, self.state.stats)
            result = self.history.save(name or self.name, self._bundle, self.state.stats)
            self.name = next_simulation_name(self.name)
            return result

    # ------------------------------------------------------------------
    # Driving the clock
    # ------------------------------------------------------------------

    def advance(self, ms: float) -> None:
        """Move simulated time forward by `ms`."""
        with self._lock:
            if ms > 0:
                self.env.run(until=self.env.now + ms)

    def advance_to(self, time_ms: float) -> None:
        with self._lock:
            if time_ms > self.env.now:
                self.env.run(until=time_ms)

    def run_until_complete(self, drain_workloads: bool = True) -> bool:
        """
        Step simulated time until the run completes.

        With `drain_workloads`, keeps going until every in-flight workload
        has been removed. Returns whether the run completed; a paused run
        stops as soon as nothing is left to animate.
        """
        with self._lock:
            while self.status is SchedulerStatus.RUNNING or (
                drain_workloads and self.state.workloads
            ):
                if self.env.peek() == Infinity:
                    break
                self.env.step()
            return self.state.completed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_timer(self) -> None:
        self._cancel_timer()
        interval = 1000.0 / self.simulation_config.speed
        self._timer = self.env.process(self._generation_loop(interval))
        logger.debug("Generation timer every %.1f ms", interval)

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None or not timer.is_alive:
            return
        # Timers that cancel themselves or have not started yet fall out of
        # their loop on the identity check instead
        if timer is not self.env.active_process and isinstance(timer.target, Timeout):
            timer.interrupt("cancelled")

    def _generation_loop(self, interval: float):
        timer = self.env.active_process
        try:
            while self._timer is timer:
                yield self.env.timeout(interval)
                with self._lock:
                    if self._timer is not timer:
                        break
                    self._tick()
        except simpy.Interrupt:
            pass

    def _tick(self) -> None:
        if self.state.samples_processed < self.simulation_config.num_samples:
            self._generate_animated()
        self._check_completion()

    def _drain(self) -> None:
        """Instant mode: every remaining sample, no workload objects."""
        state = self.state
        while state.samples_processed < self.simulation_config.num_samples:
            sample = self.generator.generate(
                state,
                self.origin_config,
                self.execution_config,
                self.simulation_config.workload_count_distribution
            )
            state.samples_processed += 1
            for target in sample.targets:
                state.add_accumulated_dot(target)
        self._check_completion()

    def _generate_animated(self) -> None:
        state = self.state
        sample = self.generator.generate(
            state,
            self.origin_config,
            self.execution_config,
            self.simulation_config.workload_count_distribution
        )
        state.samples_processed += 1

        workload = Workload(
            id=state.next_workload_id(),
            origin=sample.origin,
            created_at=self.env.now,
            next_transition_at=self.env.now + self.settings.originating_ms,
            substeps=[
                Substep(
                    id=state.next_substep_id(),
                    target=target,
                    is_at_origin=target == sample.origin
                )
                for target in sample.targets
            ]
        )
        state.workloads[workload.id] = workload
        state.active_workloads[workload.origin] += 1
        self.env.process(self._lifecycle(workload, state.run_token))

    def _lifecycle(self, workload: Workload, run_token: int):
        timings = self.settings

        yield self.env.timeout(timings.originating_ms)
        with self._lock:
            if run_token != self.state.run_token:
                return
            workload.start_distributing(self.env.now + timings.distributing_ms)

        yield self.env.timeout(timings.distributing_ms)
        with self._lock:
            if run_token != self.state.run_token:
                return
            workload.complete(self.env.now + timings.cleanup_ms)
            for substep in workload.substeps:
                self.state.add_accumulated_dot(substep.target)

        yield self.env.timeout(timings.cleanup_ms)
        with self._lock:
            if run_token != self.state.run_token:
                return
            self.state.workloads.pop(workload.id, None)
            self.state.release_workload(workload.origin)
            self._check_completion()

    def _check_completion(self) -> None:
        state = self.state
        if state.completed or self.status not in (SchedulerStatus.RUNNING, SchedulerStatus.PAUSED):
            return

        num_samples = self.simulation_config.num_samples
        if state.samples_processed < num_samples:
            return

        state.samples_processed = num_samples
        state.completed = True
        self.status = SchedulerStatus.COMPLETED
        self._cancel_timer()
        logger.info(
            "%s completed: %d samples, %d executions",
            self.name,
            state.samples_processed,
            state.total_executed
        )

        result = None
        if self.auto_record:
            result = self.save_result()
            self._recorded_name = result.name
        if self.on_complete is not None:
            self.on_complete(result)
