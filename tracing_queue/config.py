import math
import numbers
from dataclasses import dataclass
from typing import Callable, Union

from tracing_queue.errors import ConfigurationError
from tracing_queue.priority import PRIORITY_POLICIES


@dataclass
class SimulationConfig:
    """Parameters for a single interview queue scenario.

    Capacity is expressed relative to the mean daily arrival rate, so
    capacity_ratio = 1 means the tracing team can on average interview every new case.
    """

    mean_rate: float = 20.0
    capacity_ratio: float = 1.0
    max_interview_delay: int = 5
    prop_time_delay: float = 0.0
    proportion_cases_vaccinated: float = 0.0
    days_samples: int = 50
    days_burnin: int = 5
    days_burnout: int = 5
    priority_policy: Union[str, Callable] = 'oldest_swab_first'

    @property
    def capacity(self) -> float:
        # not floored, admission compares rank against the real value
        return self.capacity_ratio * self.mean_rate

    @property
    def days_to_simulate(self) -> int:
        return self.days_burnin + self.days_samples + self.days_burnout

    @property
    def number_of_cases(self) -> int:
        return int(round(self.days_to_simulate * self.mean_rate))

    @property
    def policy_name(self) -> str:
        if isinstance(self.priority_policy, str):
            return self.priority_policy
        return getattr(self.priority_policy, 'name', getattr(self.priority_policy, '__name__', repr(self.priority_policy)))

    def validate(self):
        """Checks every parameter and raises a single error listing all the problems.

        Raises:
            ConfigurationError: if any parameter is outside its allowed range
        """
        problems = []

        if not is_finite_number(self.mean_rate) or self.mean_rate <= 0:
            problems.append(f'mean_rate must be a positive number, got {self.mean_rate!r}')

        if not is_finite_number(self.capacity_ratio) or self.capacity_ratio < 0:
            problems.append(f'capacity_ratio must be a non-negative number, got {self.capacity_ratio!r}')

        if not is_integer(self.max_interview_delay) or self.max_interview_delay < 0:
            problems.append(f'max_interview_delay must be a non-negative integer, got {self.max_interview_delay!r}')

        if not is_finite_number(self.prop_time_delay) or not 0 <= self.prop_time_delay < 1:
            problems.append(f'prop_time_delay must lie in [0, 1), got {self.prop_time_delay!r}')

        if not is_finite_number(self.proportion_cases_vaccinated) or not 0 <= self.proportion_cases_vaccinated <= 1:
            problems.append(f'proportion_cases_vaccinated must lie in [0, 1], got {self.proportion_cases_vaccinated!r}')

        for field_name in ['days_samples', 'days_burnin', 'days_burnout']:
            value = getattr(self, field_name)
            if not is_integer(value) or value <= 0:
                problems.append(f'{field_name} must be a positive integer, got {value!r}')

        if isinstance(self.priority_policy, str):
            if self.priority_policy not in PRIORITY_POLICIES:
                problems.append(f'unknown priority policy {self.priority_policy!r}, choose one of {sorted(PRIORITY_POLICIES)}')
        elif not callable(self.priority_policy):
            problems.append(f'priority_policy must be a policy name or a callable, got {self.priority_policy!r}')

        if problems:
            raise ConfigurationError('; '.join(problems))

        return self


def is_finite_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)
