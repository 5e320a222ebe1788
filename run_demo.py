"""Demo script: fly one round with a scripted pilot feeding gamepad messages."""
import json

import numpy as np

from lander_sim.config import create_default_config
from lander_sim.controls import Controls
from lander_sim.main import run_simulation

config = create_default_config()
controls = Controls.from_config(config)
tick = [0]


def pilot(frame):
    """Steer toward the zone and slow the descent near the ground."""
    if 'time' not in frame:
        return
    tick[0] += 1
    course = frame['course']
    v = frame['velocity']
    strafe = np.clip(0.02 * course[:2] - 0.5 * v[:2], -1.0, 1.0)

    buttons = [0.0] * 16
    altitude = frame['position'][2]
    wanted = -6.0 if altitude > 60.0 else -1.5
    # Tap every other tick so each press is a fresh edge
    if tick[0] % 2 == 0:
        if frame['vertical_velocity_target'] < wanted:
            buttons[12] = 1.0
        elif frame['vertical_velocity_target'] > wanted:
            buttons[13] = 1.0

    message = {'axes': [float(strafe[0]), float(strafe[1]), 0.0, 0.0], 'buttons': buttons}
    controls.update_from_payload(json.dumps(message), now=frame['time'])


result = run_simulation(config, controls=controls, sink=pilot, verbose=True)

print("\n\n===== DESCENT DETAILS =====")
log = result.log
if len(log) > 0:
    times = np.array(log.time)
    alts = np.array(log.position_z)
    targets = np.array(log.vertical_velocity_target)
    print(f"Log entries: {len(log)}")
    print(f"Time range: {times[0]:.1f}s - {times[-1]:.1f}s")
    print(f"Final distance to zone: {log.distance_to_zone[-1]:.1f} m")
    print(f"Fuel remaining: {log.fuel_mass[-1]:.1f} kg")
    print()
    print("Target changes:")
    prev = None
    for i in range(len(targets)):
        if targets[i] != prev:
            print(f"  t={times[i]:6.1f}s | Alt={alts[i]:7.1f} m | Target={targets[i]:+5.1f} m/s")
            prev = targets[i]

if result.report is not None:
    print()
    print(result.report)
