import tracing_queue.arrivals as ar
from tracing_queue.errors import ConfigurationError
import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def cases():
    return ar.generate_cases(
        number_of_cases=500,
        mean_rate=20,
        proportion_cases_vaccinated=0.3,
        rng=np.random.default_rng(42))


def test_generate_cases_size(cases):

    assert len(cases) == 500
    assert list(cases.index) == list(range(500))
    assert cases.index.name == 'case_id'


def test_generate_cases_columns(cases):

    assert list(cases.columns) == ['swab_date', 'notification_date', 'notification_time', 'vaccinated']


def test_swab_dates_start_at_day_one_and_never_decrease(cases):

    assert cases.swab_date.min() >= 1
    assert cases.swab_date.is_monotonic_increasing


def test_test_turnaround_is_capped(cases):

    turnaround = cases.notification_date - cases.swab_date

    assert turnaround.min() >= 0
    assert turnaround.max() <= ar.MAX_TEST_TURNAROUND


def test_notification_time_within_day(cases):

    assert ((cases.notification_time >= 0) & (cases.notification_time < 1)).all()


def test_vaccinated_is_boolean(cases):

    assert cases.vaccinated.dtype == bool
    assert 0 < cases.vaccinated.mean() < 1


@pytest.mark.parametrize('proportion, expected', [(0, False), (1, True)])
def test_vaccinated_extremes(proportion, expected):

    cases = ar.generate_cases(100, 10, proportion, np.random.default_rng(0))

    assert (cases.vaccinated == expected).all()


def test_generate_cases_reproducible():

    first = ar.generate_cases(200, 15, 0.5, np.random.default_rng(7))
    second = ar.generate_cases(200, 15, 0.5, np.random.default_rng(7))

    pd.testing.assert_frame_equal(first, second)


def test_generate_no_cases():

    cases = ar.generate_cases(0, 20, 0.5, np.random.default_rng(0))

    assert len(cases) == 0
    assert list(cases.columns) == ['swab_date', 'notification_date', 'notification_time', 'vaccinated']


@pytest.mark.parametrize('mean_rate', [0, -5, np.nan])
def test_non_positive_rate_rejected(mean_rate):

    with pytest.raises(ConfigurationError):
        ar.generate_cases(10, mean_rate, 0.5, np.random.default_rng(0))


def test_daily_counts_are_overdispersed():
    """Negative binomial with size equal to the mean has variance twice the mean
    """

    swab_dates = ar.draw_swab_dates(200000, 20, np.random.default_rng(5))

    # drop the last day, which is truncated
    daily_counts = np.bincount(swab_dates)[1:-1]

    assert daily_counts.mean() == pytest.approx(20, rel=0.05)
    assert daily_counts.var() == pytest.approx(40, rel=0.15)
