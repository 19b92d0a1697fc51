import json
import sys
import time
from typing import List, Optional

from crossroads.kernel.simulation_kernel import SimulationKernel

def run_headless_experiment(output_path: str, duration_ticks: int = 120, seed: int = 42,
                            densities: Optional[dict] = None, kernel: Optional[SimulationKernel] = None) -> List[dict]:
    """Runs the approach simulation without a server and dumps per-tick metrics as JSON."""
    kernel = kernel or SimulationKernel()
    kernel.initialize(seed=seed)
    for direction, density in (densities or {}).items():
        kernel.set_density(direction, density)

    results = []

    start_time = time.time()
    for i in range(duration_ticks):
        kernel.run_tick()
        status = kernel.get_status()
        results.append({
            "tick": i,
            "speeds": {d: [s.firstGroup.currentSpeed, s.secondGroup.currentSpeed] for d, s in status.items()},
            "reached": {d: [s.firstGroup.hasReached, s.secondGroup.hasReached] for d, s in status.items()},
            "vehicles": sum(s.volumes.total for s in status.values())
        })

    end_time = time.time()
    print(f"Experiment finished in {end_time - start_time:.4f}s")

    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2)
    return results

if __name__ == "__main__":
    if len(sys.argv) > 2:
        run_headless_experiment(sys.argv[1], int(sys.argv[2]))
    elif len(sys.argv) > 1:
        run_headless_experiment(sys.argv[1])
    else:
        print("Usage: python -m crossroads.experiments.run_experiment <output> [ticks]")
