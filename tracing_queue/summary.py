import numpy as np
import pandas as pd


def summarise_outcomes(outcomes: pd.DataFrame) -> dict:
    """Headline statistics for one scenario's (trimmed) case outcomes.

    The mean time to interview only covers cases that were interviewed, missed cases are reported
    separately through proportion_missed.
    """

    interviewed = np.isfinite(outcomes.time_to_interview)

    return {
        'number_of_cases': len(outcomes),
        'proportion_missed': float((~interviewed).mean()) if len(outcomes) > 0 else np.nan,
        'mean_time_to_interview': float(outcomes.time_to_interview[interviewed].mean()) if interviewed.any() else np.nan,
        'mean_test_turnaround_time': float(outcomes.test_turnaround_time.mean()) if len(outcomes) > 0 else np.nan
    }


def interview_delay_distribution(outcomes: pd.DataFrame, max_interview_delay: int) -> pd.Series:
    """The proportion of cases interviewed after each number of days, plus the proportion missed.

    Args:
        outcomes (pd.DataFrame): Case outcomes
        max_interview_delay (int): The longest possible time to interview

    Returns:
        pd.Series: Indexed by 0..max_interview_delay then 'missed', sums to 1 when there are any cases
    """

    time_to_interview = outcomes.time_to_interview
    interviewed = np.isfinite(time_to_interview)

    counts = time_to_interview[interviewed].astype(int).value_counts()
    counts = counts.reindex(range(max_interview_delay + 1), fill_value=0)
    counts = pd.concat([counts, pd.Series({'missed': int((~interviewed).sum())})])

    total = len(outcomes)
    if total == 0:
        return counts.astype(float)

    return counts / total


def bootstrap_ci(values, statistic, rng: np.random.Generator, number_of_resamples: int = 1000, alpha: float = 0.05):
    """Percentile bootstrap confidence interval for a statistic of a sample.

    Args:
        values (array like): The observed sample
        statistic (func): Maps a resampled array to a number, e.g. np.mean
        rng (np.random.Generator): Generator used to draw the resamples
        number_of_resamples (int, optional): Defaults to 1000.
        alpha (float, optional): One minus the coverage of the interval. Defaults to 0.05.

    Returns:
        tuple: (lower, upper)
    """

    values = np.asarray(values)

    if len(values) == 0:
        raise ValueError('cannot bootstrap an empty sample')

    if not 0 < alpha < 1:
        raise ValueError(f'alpha must lie in (0, 1), got {alpha!r}')

    resample_index = rng.integers(0, len(values), size=(number_of_resamples, len(values)))
    estimates = np.array([statistic(values[index]) for index in resample_index])

    lower, upper = np.quantile(estimates, [alpha / 2, 1 - alpha / 2])

    return float(lower), float(upper)
