from tracing_queue.config import SimulationConfig
from tracing_queue.errors import ConfigurationError
import numpy as np
import pytest


def test_default_config_is_valid():

    assert SimulationConfig().validate() == SimulationConfig()


def test_derived_values():

    config = SimulationConfig(mean_rate=12, capacity_ratio=0.4, days_burnin=5, days_samples=50, days_burnout=10)

    assert config.capacity == pytest.approx(4.8)
    assert config.days_to_simulate == 65
    assert config.number_of_cases == 780


def test_capacity_is_not_floored():

    assert SimulationConfig(mean_rate=3, capacity_ratio=0.5).capacity == 1.5


@pytest.mark.parametrize('parameters', [
    {'mean_rate': 0},
    {'mean_rate': -1.5},
    {'mean_rate': np.inf},
    {'capacity_ratio': -0.1},
    {'capacity_ratio': np.nan},
    {'max_interview_delay': -1},
    {'max_interview_delay': 1.5},
    {'prop_time_delay': 1.0},
    {'prop_time_delay': -0.2},
    {'proportion_cases_vaccinated': 1.1},
    {'days_samples': 0},
    {'days_burnin': -3},
    {'days_burnout': 2.5},
    {'priority_policy': 'shortest_queue_first'},
    {'priority_policy': 3},
])
def test_invalid_config_rejected(parameters):

    with pytest.raises(ConfigurationError):
        SimulationConfig(**parameters).validate()


def test_all_problems_reported():

    with pytest.raises(ConfigurationError) as error:
        SimulationConfig(mean_rate=-1, capacity_ratio=-1).validate()

    assert 'mean_rate' in str(error.value)
    assert 'capacity_ratio' in str(error.value)


def test_numpy_integers_accepted():

    SimulationConfig(max_interview_delay=np.int64(3), days_samples=np.int64(10)).validate()


def test_callable_policy_accepted():

    def my_policy(cases, rng):
        return cases

    config = SimulationConfig(priority_policy=my_policy).validate()

    assert config.policy_name == 'my_policy'
