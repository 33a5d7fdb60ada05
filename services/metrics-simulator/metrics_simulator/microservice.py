"""Simulated microservices that record mock metrics in their cloud's registry."""

from sms_common.config import MicroserviceConfig
from sms_common.models.metrics import PrefixedRegistry

from metrics_simulator.generator import MetricGenerator

METER_PREFIX = "meter."
TIMER_PREFIX = "timer."


class Microservice:
    """An instance of a microservice deployed to one cloud.

    In real life these metrics would be defined and updated in the
    microservice source code; here every update records a random value for
    each configured meter and timer.
    """

    def __init__(
        self,
        config: MicroserviceConfig,
        registry: PrefixedRegistry,
        generator: MetricGenerator,
    ):
        self.config = config
        self.registry = registry
        self.generator = generator

    @property
    def name(self) -> str:
        return self.config.name

    def update(self) -> None:
        """Update all metrics defined for this microservice."""
        for meter in self.config.metrics.meters:
            value = self.generator.sample(meter.low, meter.high)
            self.registry.get_or_register_meter(METER_PREFIX + meter.name).mark(value)

        for timer in self.config.metrics.timers:
            seconds = self.generator.sample(timer.low, timer.high)
            self.registry.get_or_register_timer(TIMER_PREFIX + timer.name).update(seconds)

    def metric_names(self) -> list[str]:
        """Fully qualified names of every metric this instance emits."""
        names = [METER_PREFIX + m.name for m in self.config.metrics.meters]
        names += [TIMER_PREFIX + t.name for t in self.config.metrics.timers]
        return [self.registry.qualify(name) for name in names]
