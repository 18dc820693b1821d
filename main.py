#!/usr/bin/env python3
"""
Workload Placement Simulator - Main Demo

Runs the engine end to end:
1. Instant run with the default (even) placement
2. Edge-to-cloud what-if from the built-in preset, then a stricter variant
3. Animated run in simulated time, with a pause and a speed change
4. Reloading a saved preset and exporting its result
5. History of saved results
"""

import logging

from workload_sim.config import get_settings
from workload_sim.core import LocationSet
from workload_sim.interfaces import InMemoryPresetStore, JsonResultExporter
from workload_sim.simulation import (
    FrameSnapshot,
    RealtimeDriver,
    ResultAnalyzer,
    SetExecutionEnabled,
    SimulationScheduler,
    get_preset,
)

EDGE_LOCATIONS = ["near-edge", "far-edge", "functional-edge", "pc"]


class ProgressRenderer:
    """FrameRenderer that prints one status line per frame."""

    def render(self, frame: FrameSnapshot) -> None:
        print(f"  t={frame.time_ms:>7.0f} ms  {frame.status.value:<9}"
              f" samples {frame.samples_processed:>4}/{frame.num_samples}"
              f"  in flight: {len(frame.workloads)} workloads, {len(frame.substeps)} substeps")


def print_summary(analyzer: ResultAnalyzer, result) -> None:
    print(analyzer.format_markdown(analyzer.summarize(result)))
    print()


def run_instant_demo(scheduler: SimulationScheduler, analyzer: ResultAnalyzer):
    """Default configuration, all samples at once."""
    print("=" * 60)
    print("INSTANT RUN - DEFAULT PLACEMENT")
    print("=" * 60)
    print()

    scheduler.set_instant_mode(True)
    scheduler.set_num_samples(10000)
    scheduler.run()

    print_summary(analyzer, scheduler.history.latest)


def run_edge_to_cloud_demo(
    scheduler: SimulationScheduler,
    analyzer: ResultAnalyzer,
    presets: InMemoryPresetStore
):
    """Built-in Edge-to-Cloud preset, then the same with no local execution at the edge."""
    print("=" * 60)
    print("WHAT-IF: EDGE-TO-CLOUD")
    print("=" * 60)
    print()

    preset = get_preset("edge-to-cloud")
    print(f"  {preset.name}: {preset.description}")
    print()
    scheduler.load_bundle(preset.bundle(scheduler.locations, scheduler.simulation_config))
    scheduler.run()
    print_summary(analyzer, scheduler.history.latest)

    for location_id in EDGE_LOCATIONS:
        scheduler.apply(SetExecutionEnabled(location_id, location_id, False))

    presets.save("edge-to-cloud-strict", scheduler.current_bundle())
    scheduler.run()
    print_summary(analyzer, scheduler.history.latest)


def run_preset_demo(scheduler: SimulationScheduler, presets: InMemoryPresetStore):
    """Reload a saved preset, rerun it and export the result."""
    print("=" * 60)
    print("PRESET RELOAD AND EXPORT")
    print("=" * 60)
    print()

    scheduler.load_bundle(presets.load("edge-to-cloud-strict"))
    scheduler.set_num_samples(1000)
    scheduler.run()

    exported = JsonResultExporter().export(scheduler.history.latest)
    print(f"  Presets: {', '.join(presets.names())}")
    print(f"  Exported {scheduler.history.latest.name} as {len(exported)} bytes of JSON:")
    for line in exported.splitlines()[:8]:
        print(f"    {line}")
    print("    ...")
    print()


def run_animated_demo(scheduler: SimulationScheduler, analyzer: ResultAnalyzer):
    """Timer-paced run, driven in simulated milliseconds."""
    print("=" * 60)
    print("ANIMATED RUN (SIMULATED TIME)")
    print("=" * 60)
    print()

    renderer = ProgressRenderer()
    driver = RealtimeDriver(scheduler, on_frame=renderer.render)

    scheduler.set_instant_mode(False)
    scheduler.set_num_samples(200)
    scheduler.set_speed(20)
    scheduler.run()
    start = scheduler.now

    driver.pump(2000, start)

    scheduler.pause()
    driver.pump(5000, start)

    scheduler.resume()
    scheduler.set_speed(100)
    scheduler.run_until_complete()
    renderer.render(scheduler.frame())
    print()

    print_summary(analyzer, scheduler.history.latest)


def main():
    """Run all demonstrations."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print()
    print("+" + "=" * 58 + "+")
    print("|          WORKLOAD PLACEMENT SIMULATOR DEMONSTRATION      |")
    print("+" + "=" * 58 + "+")
    print()

    locations = LocationSet()
    scheduler = SimulationScheduler(locations=locations, settings=settings)
    analyzer = ResultAnalyzer(locations)
    presets = InMemoryPresetStore.with_builtins(locations)

    run_instant_demo(scheduler, analyzer)
    run_edge_to_cloud_demo(scheduler, analyzer, presets)
    run_animated_demo(scheduler, analyzer)
    run_preset_demo(scheduler, presets)

    print("=" * 60)
    print("HISTORY")
    print("=" * 60)
    for result in scheduler.history:
        print(f"  {result.timestamp}  {result.name:<16} "
              f"{result.total_originated:>6} samples  {result.total_executed:>7} executions")
    print()


if __name__ == "__main__":
    main()
