"""
Simulation context: synthetic workload sources.
"""

from tsload.context.simulation.simulator import (
    EpochSimulator,
    DevopsSimulator,
    CPUOnlySimulator,
    IoTSimulator,
    DEVOPS_MEASUREMENTS,
    IOT_MEASUREMENTS,
    new_simulator,
    simulator_use_cases,
)

__all__ = [
    'EpochSimulator',
    'DevopsSimulator',
    'CPUOnlySimulator',
    'IoTSimulator',
    'DEVOPS_MEASUREMENTS',
    'IOT_MEASUREMENTS',
    'new_simulator',
    'simulator_use_cases',
]
