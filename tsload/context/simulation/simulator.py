"""
Workload simulators

A simulator walks a time window epoch by epoch; at each epoch it yields one
point per (entity, measurement) pair in a fixed order. Entities are hosts for
the devops workloads and trucks for iot. The values placed in point fields
are random readings; they give the point its shape but the encoder replaces
them with field-table values.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tsload.models import Point
from tsload.protocols import SimulatorProtocol

DEVOPS_MEASUREMENTS: Dict[str, Tuple[str, ...]] = {
    'cpu': ('usage_user', 'usage_system', 'usage_idle', 'usage_nice', 'usage_iowait',
            'usage_irq', 'usage_softirq', 'usage_steal', 'usage_guest', 'usage_guest_nice'),
    'diskio': ('reads', 'writes', 'read_bytes', 'write_bytes', 'read_time', 'write_time', 'io_time'),
    'disk': ('total', 'free', 'used', 'used_percent', 'inodes_total', 'inodes_free', 'inodes_used'),
    'kernel': ('boot_time', 'interrupts', 'context_switches', 'processes_forked',
               'disk_pages_in', 'disk_pages_out'),
    'mem': ('total', 'available', 'used', 'free', 'cached', 'buffered', 'used_percent',
            'available_percent', 'buffered_percent'),
    'net': ('bytes_sent', 'bytes_recv', 'packets_sent', 'packets_recv',
            'err_in', 'err_out', 'drop_in', 'drop_out'),
    'nginx': ('accepts', 'active', 'handled', 'reading', 'requests', 'waiting', 'writing'),
    'postgresl': ('numbackends', 'xact_commit', 'xact_rollback', 'blks_read', 'blks_hit',
                  'tup_returned', 'tup_fetched', 'tup_inserted', 'tup_updated', 'tup_deleted',
                  'conflicts', 'temp_files', 'temp_bytes', 'deadlocks', 'blk_read_time',
                  'blk_write_time'),
    'redis': ('uptime_in_seconds', 'total_connections_received', 'expired_keys', 'evicted_keys',
              'keyspace_hits', 'keyspace_misses', 'instantaneous_ops_per_sec',
              'instantaneous_input_kbps', 'instantaneous_output_kbps', 'connected_clients',
              'used_memory', 'used_memory_rss', 'used_memory_peak', 'used_memory_lua',
              'rdb_changes_since_last_save', 'sync_full', 'sync_partial_ok', 'sync_partial_err',
              'pubsub_channels', 'pubsub_patterns', 'latest_fork_usec', 'connected_slaves',
              'master_repl_offset', 'repl_backlog_active', 'repl_backlog_size',
              'repl_backlog_histlen', 'mem_fragmentation_ratio', 'used_cpu_sys',
              'used_cpu_user', 'used_cpu_sys_children', 'used_cpu_user_children'),
}

IOT_MEASUREMENTS: Dict[str, Tuple[str, ...]] = {
    'readings': ('latitude', 'longitude', 'elevation', 'velocity', 'heading', 'grade',
                 'fuel_consumption'),
    'diagnostics': ('load_capacity', 'fuel_capacity', 'nominal_fuel_consumption',
                    'current_load', 'fuel_state', 'status'),
}

_REGIONS = {
    'us-east-1': ('us-east-1a', 'us-east-1b', 'us-east-1c', 'us-east-1e'),
    'us-west-1': ('us-west-1a', 'us-west-1b'),
    'us-west-2': ('us-west-2a', 'us-west-2b', 'us-west-2c'),
    'eu-west-1': ('eu-west-1a', 'eu-west-1b', 'eu-west-1c'),
    'eu-central-1': ('eu-central-1a', 'eu-central-1b'),
    'ap-southeast-1': ('ap-southeast-1a', 'ap-southeast-1b'),
    'ap-southeast-2': ('ap-southeast-2a', 'ap-southeast-2b'),
    'ap-northeast-1': ('ap-northeast-1a', 'ap-northeast-1c'),
    'sa-east-1': ('sa-east-1a', 'sa-east-1b', 'sa-east-1c'),
}
_OSES = ('Ubuntu16.10', 'Ubuntu16.04LTS', 'Ubuntu15.10')
_ARCHES = ('x64', 'x86')
_TEAMS = ('SF', 'NYC', 'LON', 'CHI')
_SERVICES = tuple(str(i) for i in range(20))
_SERVICE_VERSIONS = ('0', '1')
_SERVICE_ENVIRONMENTS = ('production', 'staging', 'test')

_FLEETS = ('East', 'West', 'North', 'South')
_DRIVERS = ('Albert', 'Derek', 'Andy', 'Seth', 'Trish', 'Rodney')
_MODELS = ('F-150', 'G-2000', 'H-2')
_DEVICE_VERSIONS = ('v1.0', 'v1.5', 'v2.0', 'v2.3')

# share of trucks with a missing tag value, and chance a truck is offline for an epoch
_IOT_MISSING_TAG_RATE = 0.1
_IOT_OFFLINE_RATE = 0.05


@dataclass
class Entity:
    """A host or truck and its ordered tags."""
    tags: List[Tuple[str, Any]]


def make_hosts(scale: int, rng: random.Random) -> List[Entity]:
    hosts = []
    regions = sorted(_REGIONS)
    for i in range(scale):
        region = rng.choice(regions)
        hosts.append(Entity(tags=[
            ('hostname', f'host_{i}'),
            ('region', region),
            ('datacenter', rng.choice(_REGIONS[region])),
            ('rack', str(rng.randrange(100))),
            ('os', rng.choice(_OSES)),
            ('arch', rng.choice(_ARCHES)),
            ('team', rng.choice(_TEAMS)),
            ('service', rng.choice(_SERVICES)),
            ('service_version', rng.choice(_SERVICE_VERSIONS)),
            ('service_environment', rng.choice(_SERVICE_ENVIRONMENTS)),
        ]))
    return hosts


def make_trucks(scale: int, rng: random.Random) -> List[Entity]:
    trucks = []
    for i in range(scale):
        tags: List[Tuple[str, Any]] = [
            ('name', f'truck_{i}'),
            ('fleet', rng.choice(_FLEETS)),
            ('driver', rng.choice(_DRIVERS)),
            ('model', rng.choice(_MODELS)),
            ('device_version', rng.choice(_DEVICE_VERSIONS)),
        ]
        if rng.random() < _IOT_MISSING_TAG_RATE:
            # unregistered trucks report without a driver/fleet
            missing = rng.randrange(1, 3)
            key, _ = tags[missing]
            tags[missing] = (key, None)
        trucks.append(Entity(tags=tags))
    return trucks


class EpochSimulator(SimulatorProtocol):
    """
    Generic epoch/entity/measurement walker

    Args:
        entities: Hosts or trucks, in emission order
        measurements: Measurement name -> field keys
        start, end: Simulated time window [start, end)
        interval: Simulated time between epochs
        limit: Stop after this many written points (0 = window only)
        rng: Random source for readings
    """

    def __init__(
        self,
        entities: Sequence[Entity],
        measurements: Dict[str, Tuple[str, ...]],
        start: datetime,
        end: datetime,
        interval: timedelta,
        limit: int = 0,
        rng: Optional[random.Random] = None,
    ):
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self.entities = list(entities)
        self.measurements = list(measurements.items())
        self.start = start
        self.end = end
        self.interval = interval
        self.limit = limit
        self.rng = rng or random.Random()

        self.made_points = 0
        self._now = start
        self._entity_idx = 0
        self._measurement_idx = 0
        self._done = not self.entities or not self.measurements or start >= end

    def finished(self) -> bool:
        return self._done

    def next(self, point: Point) -> bool:
        if self._done:
            return False

        entity = self.entities[self._entity_idx]
        name, field_keys = self.measurements[self._measurement_idx]
        write = self.should_write(entity)
        if write:
            point.set_measurement_name(name)
            point.set_timestamp(self._now)
            for key, value in entity.tags:
                point.append_tag(key, value)
            for key in field_keys:
                point.append_field(key, self.reading(key))
            self.made_points += 1

        self._advance()
        if self.limit and self.made_points >= self.limit:
            self._done = True
        return write

    def should_write(self, entity: Entity) -> bool:
        return True

    def reading(self, field_key: str) -> float:
        return round(self.rng.uniform(0.0, 100.0), 3)

    def _advance(self):
        self._measurement_idx += 1
        if self._measurement_idx < len(self.measurements):
            return
        self._measurement_idx = 0
        self._entity_idx += 1
        if self._entity_idx < len(self.entities):
            return
        self._entity_idx = 0
        self._now += self.interval
        if self._now >= self.end:
            self._done = True


class DevopsSimulator(EpochSimulator):
    """Server fleet: every host reports every measurement each epoch."""

    def __init__(self, scale, start, end, interval, limit=0, rng=None, measurements=None):
        rng = rng or random.Random()
        super().__init__(
            make_hosts(scale, rng),
            measurements or DEVOPS_MEASUREMENTS,
            start, end, interval, limit, rng,
        )


class CPUOnlySimulator(DevopsSimulator):
    def __init__(self, scale, start, end, interval, limit=0, rng=None):
        super().__init__(scale, start, end, interval, limit, rng,
                         measurements={'cpu': DEVOPS_MEASUREMENTS['cpu']})


class IoTSimulator(EpochSimulator):
    """Truck fleet; a truck can be offline for an epoch and produce nothing."""

    def __init__(self, scale, start, end, interval, limit=0, rng=None):
        rng = rng or random.Random()
        super().__init__(make_trucks(scale, rng), IOT_MEASUREMENTS, start, end, interval, limit, rng)
        self._offline: Dict[int, datetime] = {}

    def should_write(self, entity: Entity) -> bool:
        # offline status is decided once per truck per epoch
        key = id(entity)
        if self._offline.get(key) == self._now:
            return False
        if self._measurement_idx == 0 and self.rng.random() < _IOT_OFFLINE_RATE:
            self._offline[key] = self._now
            return False
        return True


_SIMULATORS = {
    'devops': DevopsSimulator,
    'cpu-only': CPUOnlySimulator,
    'iot': IoTSimulator,
}


def simulator_use_cases() -> List[str]:
    return sorted(_SIMULATORS)


def new_simulator(config, rng: Optional[random.Random] = None) -> EpochSimulator:
    """Build the simulator for a validated GeneratorConfig."""
    try:
        factory = _SIMULATORS[config.use]
    except KeyError:
        raise ValueError(f"unknown use case {config.use!r}") from None
    return factory(
        config.scale,
        config.start_time(),
        config.end_time(),
        timedelta(seconds=config.log_interval),
        config.limit,
        rng,
    )
