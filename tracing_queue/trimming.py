import math

import pandas as pd


def trim_burnin_burnout(outcomes: pd.DataFrame, days_burnin: int, days_samples: int, mean_rate: float) -> pd.DataFrame:
    """Drops the cases from the start and the end of a run, where the queue is not in a steady state.

    At the start the backlog is empty, and at the end there is no future capacity to clear it. The slice is
    taken by arrival order, not calendar day: the first days_burnin * mean_rate cases are removed, and
    everything after the next days_samples * mean_rate cases.

    Args:
        outcomes (pd.DataFrame): The case outcome table, in arrival order
        days_burnin (int): Number of days of warm up
        days_samples (int): Number of days that are sampled
        mean_rate (float): Mean number of new cases per day

    Returns:
        pd.DataFrame: The sampled cases
    """

    first_sampled = math.floor(days_burnin * mean_rate)
    last_sampled = math.floor(days_burnin * mean_rate + days_samples * mean_rate)

    return outcomes.iloc[first_sampled:last_sampled]
