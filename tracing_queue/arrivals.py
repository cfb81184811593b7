import math

import numpy as np
import pandas as pd

from tracing_queue.errors import ConfigurationError

# testing delays longer than this are truncated
MAX_TEST_TURNAROUND = 8


def draw_swab_dates(number_of_cases: int, mean_rate: float, rng: np.random.Generator) -> np.ndarray:
    """Draws daily case counts until there are enough cases, starting at day 1.

    Daily counts are negative binomial with mean and size both equal to mean_rate, so the counts are
    overdispersed relative to a Poisson process (variance = 2 * mean).

    Args:
        number_of_cases (int): The number of swab dates required
        mean_rate (float): The mean number of cases swabbed per day
        rng (np.random.Generator): The scenario's random number generator

    Returns:
        np.ndarray: A non-decreasing array of swab dates, exactly number_of_cases long
    """

    if not math.isfinite(mean_rate) or mean_rate <= 0:
        raise ConfigurationError(f'mean_rate must be a positive number, got {mean_rate!r}')

    swab_dates = []
    day = 1

    while len(swab_dates) < number_of_cases:

        # numpy's parameterisation: mean = n (1 - p) / p, so n = mean_rate and p = 0.5 gives size = mean
        cases_today = rng.negative_binomial(mean_rate, 0.5)
        swab_dates.extend([day] * cases_today)
        day += 1

    return np.array(swab_dates[:number_of_cases], dtype=int)


def generate_cases(
    number_of_cases: int,
    mean_rate: float,
    proportion_cases_vaccinated: float,
    rng: np.random.Generator) -> pd.DataFrame:
    """Creates the synthetic case population. All cases are generated before the queue is run.

    Args:
        number_of_cases (int): How many cases to generate
        mean_rate (float): Mean number of new cases per day
        proportion_cases_vaccinated (float): Probability that any one case is vaccinated
        rng (np.random.Generator): The scenario's random number generator

    Returns:
        pd.DataFrame: One row per case, indexed by case_id, in arrival order
    """

    if number_of_cases < 0:
        raise ConfigurationError(f'number_of_cases must be non-negative, got {number_of_cases!r}')

    swab_dates = draw_swab_dates(number_of_cases, mean_rate, rng)

    test_turnaround = np.minimum(rng.poisson(1, size=number_of_cases), MAX_TEST_TURNAROUND)

    cases = pd.DataFrame({
        'swab_date': swab_dates,
        'notification_date': swab_dates + test_turnaround,
        'notification_time': rng.random(size=number_of_cases),
        'vaccinated': rng.random(size=number_of_cases) < proportion_cases_vaccinated
    })
    cases.index.name = 'case_id'

    return cases
