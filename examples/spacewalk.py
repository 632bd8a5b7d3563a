"""
Spacewalk: one miner thrusts away from a drifting ship until the tether
goes taut, then drifts back on the reel-in pull.

Demonstrates:
- World setup with logging
- Tether attach on ship exit
- Automatic plot generation
"""
import time
from pathlib import Path
import sys

import numpy as np

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tetherlab.components import Player, Ship
from tetherlab.core.simulation import World
from tetherlab.dynamics.body import PointBody2D


def main():
    """Run the spacewalk."""
    print("=" * 60)
    print("Spacewalk")
    print("=" * 60)

    ship = Ship("ship", PointBody2D("ship", (400.0, 300.0)))
    world = World.with_logging(name="spacewalk", ship=ship, auto_save_plots=True)

    miner = Player("miner", PointBody2D("miner", (460.0, 300.0)))
    world.add_player(miner)
    world.exit_ship("miner")

    print(f"\nInitial Conditions:")
    print(f"  Rope budget: {miner.rope_max_length:.0f} units")
    print(f"  Segment length: {miner.tether_config.segment_length:.0f} units")
    print(f"  Oxygen: {miner.oxygen:.0f}")

    # Burn outward for 3 s, then coast
    miner.thrust((1.0, 0.4))
    start = time.time()
    world.run(frames=180, log_interval=60)
    miner.thrust((0.0, 0.0))
    world.run(frames=420, log_interval=60)
    elapsed = time.time() - start

    span = np.linalg.norm(miner.position - ship.position)
    taut_frames = sum(1 for rec in world.history if rec["miner.taut"])

    print(f"\nResults:")
    print(f"  Simulated time: {world.t:.2f} s ({world.frame} frames)")
    print(f"  Wall clock time: {elapsed:.3f} s")
    print(f"  Final span: {span:.1f} / {miner.rope_max_length:.0f}")
    print(f"  Taut frames: {taut_frames}")
    print(f"  Oxygen left: {miner.oxygen:.1f}")

    print(f"\nOutput saved to: {world.output_path}")
    print("=" * 60)


if __name__ == "__main__":
    main()
