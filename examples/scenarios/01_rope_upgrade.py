"""
Example 01: Rope Upgrade
Two miners on the same ship; one buys a longer rope mid-walk.
"""

from tetherlab import Scenario


def run_demo():
    print("\n--- Running Scenario with a Rope Upgrade ---")

    scenario = (
        Scenario(name="01_rope_upgrade")
        # Stiffer rope for everyone added below
        .configure_tether(preset="stiff")
        .add_player("miner", offset=(60.0, 0.0))
        .add_player("hauler", offset=(-60.0, 0.0))
        .exit_ship("miner")
        .exit_ship("hauler", frame=30)
        .schedule_thrust("miner", start=0, stop=240, direction=(1.0, 0.0))
        .schedule_thrust("hauler", start=30, stop=240, direction=(-1.0, 0.5))
        # Miner's budget grows from 320 to 620 while still outside
        .schedule_upgrade("miner", frame=300)
        .schedule_thrust("miner", start=300, stop=420, direction=(1.0, 0.0))
        .enable_plotting(show=False)
    )

    scenario.run(frames=720, log_interval=120)
    print(f"Results saved to: {scenario.world.output_path}")


if __name__ == "__main__":
    run_demo()
