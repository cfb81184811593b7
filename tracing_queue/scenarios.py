import itertools
import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, replace

import numpy as np
import pandas as pd

from tracing_queue.config import SimulationConfig
from tracing_queue.queueing_process import interview_queueing_process
from tracing_queue.summary import summarise_outcomes
from tracing_queue.trimming import trim_burnin_burnout

log = logging.getLogger(__name__)


def run_scenario(config: SimulationConfig, seed) -> pd.DataFrame:
    """Simulates one scenario end to end and returns the sampled case outcomes.

    Args:
        config (SimulationConfig): The scenario parameters
        seed (int or np.random.SeedSequence): Seeds the generator owned by this scenario. Arrival generation
            and random tie breaking both draw from it, so the same seed reproduces the same output.
    """

    config.validate()
    rng = np.random.default_rng(seed)

    queue = interview_queueing_process.from_config(config, rng)
    queue.run_simulation()

    return trim_burnin_burnout(
        queue.get_case_outcomes(),
        days_burnin=config.days_burnin,
        days_samples=config.days_samples,
        mean_rate=config.mean_rate
    )


def scenario_grid(base_config: SimulationConfig, policies: list, capacity_ratios: list, mean_rates: list) -> list:
    """Every combination of policy, capacity ratio and mean rate, other parameters taken from base_config.
    """

    return [
        replace(base_config, priority_policy=policy, capacity_ratio=capacity_ratio, mean_rate=mean_rate)
        for policy, capacity_ratio, mean_rate in itertools.product(policies, capacity_ratios, mean_rates)
    ]


def _summarise_scenario(config: SimulationConfig, seed) -> dict:

    outcomes = run_scenario(config, seed)

    summary = asdict(config)
    summary['priority_policy'] = config.policy_name
    summary.update(summarise_outcomes(outcomes))

    return summary


def run_scenarios(configs: list, seed: int = 0, max_workers: int = None) -> pd.DataFrame:
    """Runs independent scenarios, in parallel if more than one worker is allowed.

    Each scenario gets its own child of np.random.SeedSequence(seed), assigned by position in configs,
    so the results do not depend on how the scenarios are spread across workers.

    Args:
        configs (list): SimulationConfigs to run
        seed (int, optional): Root seed. Defaults to 0.
        max_workers (int, optional): Number of worker processes, 1 runs everything in this process.
            Defaults to None, which lets ProcessPoolExecutor decide.

    Returns:
        pd.DataFrame: One row per scenario, the config followed by its summary statistics
    """

    # fail before any worker starts
    for config in configs:
        config.validate()

    child_seeds = np.random.SeedSequence(seed).spawn(len(configs))

    log.info(f'Running {len(configs)} scenarios')

    if max_workers == 1:
        results = [_summarise_scenario(config, child_seed) for config, child_seed in zip(configs, child_seeds)]

    else:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(_summarise_scenario, configs, child_seeds))

    return pd.DataFrame(results)
