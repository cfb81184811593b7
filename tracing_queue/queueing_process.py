import logging

import numpy as np
import pandas as pd

from tracing_queue.arrivals import generate_cases
from tracing_queue.config import SimulationConfig, is_integer
from tracing_queue.errors import ConfigurationError
from tracing_queue.priority import check_policy_order, get_priority_policy

log = logging.getLogger(__name__)

# time_to_interview for cases that were never interviewed
MISSED = np.inf

CASE_COLUMNS = ['swab_date', 'notification_date', 'notification_time', 'vaccinated']

OUTCOME_COLUMNS = [
    'swab_date',
    'notification_date',
    'test_turnaround_time',
    'vaccinated',
    'time_to_interview',
    'interview_date'
]


class interview_queueing_process():

    def __init__(self,
        cases: pd.DataFrame,
        capacity: float,
        max_interview_delay: int,
        prop_time_delay: float,
        priority_policy,
        rng: np.random.Generator = None):
        """A day by day model of the queue of notified cases waiting for a contact tracing interview.

        Each day, every case that is notified, not yet interviewed and still within its interview window
        is eligible. The priority policy orders the case table and the first `capacity` ranks are interviewed,
        provided they are eligible.

        Args:
            cases (pd.DataFrame): The case population, see arrivals.generate_cases
            capacity (float): The number of interviews available each day. Not required to be a whole number.
            max_interview_delay (int): The number of days after notification that a case can still be interviewed
            prop_time_delay (float): Cases notified after this fraction of the day cannot be interviewed until the next day
            priority_policy (str or callable): A registered policy name, or a function(cases, rng) -> ordered cases
            rng (np.random.Generator, optional): The scenario's random number generator. Required by randomised policies,
                and passed on to custom policies as is
        """

        missing_columns = [column for column in CASE_COLUMNS if column not in cases.columns]
        if missing_columns:
            raise ConfigurationError(f'case table is missing columns {missing_columns}')

        if not np.isfinite(capacity) or capacity < 0:
            raise ConfigurationError(f'capacity must be a non-negative number, got {capacity!r}')

        if not is_integer(max_interview_delay) or max_interview_delay < 0:
            raise ConfigurationError(f'max_interview_delay must be a non-negative integer, got {max_interview_delay!r}')

        if not 0 <= prop_time_delay < 1:
            raise ConfigurationError(f'prop_time_delay must lie in [0, 1), got {prop_time_delay!r}')

        self.capacity = capacity
        self.max_interview_delay = max_interview_delay
        self.prop_time_delay = prop_time_delay
        self.priority_policy = get_priority_policy(priority_policy)

        if rng is None and getattr(self.priority_policy, 'randomised', False):
            raise ConfigurationError(f"policy {self.priority_policy.name!r} needs the scenario's random number generator")

        self.rng = rng

        # model variables, days are counted from 1
        self.time = 1
        self.days_to_simulate = int(cases.notification_date.max()) if len(cases) > 0 else 0

        self.preallocate_case_rows(cases)
        self.preallocate_queue_rows()

    @classmethod
    def from_config(cls, config: SimulationConfig, rng: np.random.Generator):
        """Generates a case population for a scenario and sets up the queue to process it.

        Args:
            config (SimulationConfig): The scenario parameters, validated before anything is generated
            rng (np.random.Generator): The random number generator owned by this scenario
        """

        config.validate()

        cases = generate_cases(
            number_of_cases=config.number_of_cases,
            mean_rate=config.mean_rate,
            proportion_cases_vaccinated=config.proportion_cases_vaccinated,
            rng=rng
        )

        return cls(
            cases=cases,
            capacity=config.capacity,
            max_interview_delay=config.max_interview_delay,
            prop_time_delay=config.prop_time_delay,
            priority_policy=config.priority_policy,
            rng=rng
        )

    def preallocate_case_rows(self, cases: pd.DataFrame):
        """Copies the case population into the table the queue works on. Each case keeps its row
        (and case_id) for the whole simulation.
        """

        self.case_info = cases[CASE_COLUMNS].copy()
        self.case_info.index.name = 'case_id'

        # nan until the case is interviewed
        self.case_info['interview_date'] = np.nan
        self.case_info['eligible_for_interview'] = False

    def preallocate_queue_rows(self):
        """We preallocate all the rows of the dataframe for speed of computation. This function specifically creates the dataframe that provides
        an overview of the queue.
        """

        self.queue_info = pd.DataFrame({
            'time': list(range(1, self.days_to_simulate + 1)),
            'capacity': self.capacity,
            'number_eligible': 0,
            'number_interviewed_today': 0,
            'number_missed_today': 0,
            'capacity_exceeded': False,
            'capacity_exceeded_by': 0
        })

    def update_eligibility(self):
        """Works out which cases could be interviewed today.
        """

        day = self.time
        notification_date = self.case_info.notification_date

        notified = notification_date <= day
        not_interviewed = self.case_info.interview_date.isna()
        not_expired = notification_date >= day - self.max_interview_delay

        # cases notified within the after hours fraction of the day wait until tomorrow
        after_hours = (notification_date == day) & (self.case_info.notification_time < self.prop_time_delay)

        self.case_info['eligible_for_interview'] = notified & not_interviewed & not_expired & ~after_hours

        # the interview window closed yesterday for these cases
        newly_missed = not_interviewed & (notification_date == day - self.max_interview_delay - 1)

        self.queue_info.loc[self.queue_info.time == day, ['number_eligible', 'number_missed_today']] = [
            self.case_info.eligible_for_interview.sum(),
            newly_missed.sum()
        ]

    @property
    def todays_eligible(self):
        return list(self.case_info[self.case_info.eligible_for_interview].index)

    def process_day_of_queue(self):
        """Asks the priority policy for today's order and interviews the top ranked eligible cases.
        """

        # the policy works on a copy, today's eligibility always comes from case_info
        ordered = self.priority_policy(self.case_info.copy(), self.rng)
        check_policy_order(ordered, self.case_info)

        eligible = self.case_info.eligible_for_interview.reindex(ordered.index).to_numpy(dtype=bool)

        # ranks are compared against the real valued capacity, so capacity 4.8 admits ranks 1 to 4
        rank = np.arange(1, len(ordered) + 1)
        admitted = (rank <= self.capacity) & eligible

        self.interview_cases(to_be_interviewed=list(ordered.index[admitted]))

        number_eligible = len(self.todays_eligible)
        capacity_exceeded_by = number_eligible - len(self.todays_interviewed_index)

        self.queue_info.loc[self.queue_info.time == self.time, ['capacity_exceeded', 'capacity_exceeded_by']] = [
            capacity_exceeded_by > 0,
            capacity_exceeded_by
        ]

    def interview_cases(self, to_be_interviewed: list):
        """Records the interview of a list of cases that were admitted today.

        Args:
            to_be_interviewed (list): The case_ids of the admitted cases
        """

        already_interviewed = self.case_info.loc[to_be_interviewed, 'interview_date'].notna()
        if already_interviewed.any():
            raise ValueError(f'cases {list(already_interviewed[already_interviewed].index)} have already been interviewed')

        # record an attribute of which cases were interviewed today for use later
        self.todays_interviewed_index = to_be_interviewed

        self.case_info.loc[to_be_interviewed, 'interview_date'] = self.time

        self.queue_info.loc[self.queue_info.time == self.time, ['number_interviewed_today']] = len(to_be_interviewed)

    def simulate_one_day(self, verbose=False):
        """Simulates one day of the queue.

        Args:
            verbose (bool, optional): If true, output simulation progress. Defaults to False.
        """

        self.update_eligibility()
        self.process_day_of_queue()

        self.time += 1

        if verbose:
            print(f'Model time {self.time - 1}, progress: {round((self.time - 1) / self.days_to_simulate * 100)}%', end='\r')

    def run_simulation(self, verbose=False):
        """Runs the queue from day 1 until the last case has been notified.
        """

        log.debug(f'Simulating {len(self.case_info)} cases over {self.days_to_simulate} days')

        while self.time <= self.days_to_simulate:

            self.simulate_one_day(verbose=verbose)

        log.debug(f'{int(self.case_info.interview_date.notna().sum())} of {len(self.case_info)} cases interviewed')

    def get_case_outcomes(self) -> pd.DataFrame:
        """Returns one row per case, in arrival order, with the delays used to score the scenario.

        Cases that were never interviewed have time_to_interview set to infinity.
        """

        outcomes = self.case_info[['swab_date', 'notification_date', 'vaccinated', 'interview_date']].copy()

        outcomes['test_turnaround_time'] = outcomes.notification_date - outcomes.swab_date
        outcomes['time_to_interview'] = (outcomes.interview_date - outcomes.notification_date).fillna(MISSED)

        return outcomes[OUTCOME_COLUMNS]

    def get_prob_interviewed(self, swab_date: int):
        """Returns the probability of being interviewed for cases swabbed on a specified day

        Args:
            swab_date (int): The day of interest
        """

        swabbed_today = self.case_info.swab_date == swab_date
        return self.case_info.loc[swabbed_today, 'interview_date'].notna().mean()

    def return_capacity_hitting_time(self):
        """Return the first day on which there were more eligible cases than interviews, if there was one

        Returns:
            int: The day on which capacity was first exceeded
        """

        if any(self.queue_info.capacity_exceeded):

            return self.queue_info.loc[self.queue_info.capacity_exceeded == True, 'time'].min()

        else:

            return None
