import numpy as np
import pandas as pd

from tracing_queue.errors import ConfigurationError, PolicyContractError


class priority_policy():

    def __init__(self,
        name: str,
        sort_by: tuple = (),
        ascending: tuple = (),
        randomised: bool = False):
        """A priority policy that orders cases by a composite sort key.

        Eligible cases always come first, then the tiebreak columns in sort_by, then case_id, so the
        order never depends on the order rows happen to be stored in.

        Args:
            name (str): The name the policy is registered under
            sort_by (tuple): Columns used to break ties among eligible (and among ineligible) cases
            ascending (tuple): Sort direction for each column in sort_by
            randomised (bool): If true, ties are broken by a fresh uniform key drawn on every call
        """

        if len(sort_by) != len(ascending):
            raise ValueError('sort_by and ascending must be the same length')

        self.name = name
        self.sort_by = list(sort_by)
        self.ascending = list(ascending)
        self.randomised = randomised

    def __call__(self, cases: pd.DataFrame, rng: np.random.Generator = None) -> pd.DataFrame:
        return self.order(cases, rng)

    def __repr__(self):
        return f'priority_policy({self.name!r})'

    def order(self, cases: pd.DataFrame, rng: np.random.Generator = None) -> pd.DataFrame:
        """Returns the cases in the order in which admission should be attempted.

        Args:
            cases (pd.DataFrame): The case table, with eligible_for_interview computed for today
            rng (np.random.Generator): Only required by randomised policies

        Returns:
            pd.DataFrame: The same rows, reordered
        """

        keyed = cases.assign(tiebreak_case_id=cases.index)
        sort_by = ['eligible_for_interview'] + self.sort_by
        ascending = [False] + self.ascending

        if self.randomised:
            if rng is None:
                raise ValueError(f'policy {self.name!r} needs a random number generator')
            keyed['random_key'] = rng.random(size=len(cases))
            sort_by.append('random_key')
            ascending.append(True)

        sort_by.append('tiebreak_case_id')
        ascending.append(True)

        ordered = keyed.sort_values(by=sort_by, ascending=ascending, kind='mergesort')

        return cases.loc[ordered.index]


oldest_swab_first = priority_policy(
    name='oldest_swab_first',
    sort_by=['swab_date'],
    ascending=[True])

newest_swab_first = priority_policy(
    name='newest_swab_first',
    sort_by=['swab_date'],
    ascending=[False])

newest_notification_first = priority_policy(
    name='newest_notification_first',
    sort_by=['notification_date'],
    ascending=[False])

random_order = priority_policy(
    name='random',
    randomised=True)

# unvaccinated cases are ranked ahead of vaccinated cases swabbed on the same day
vaccine_aware_newest_swab = priority_policy(
    name='vaccine_aware_newest_swab',
    sort_by=['swab_date', 'vaccinated'],
    ascending=[False, True])


PRIORITY_POLICIES = {
    policy.name: policy
    for policy in [
        oldest_swab_first,
        newest_swab_first,
        newest_notification_first,
        random_order,
        vaccine_aware_newest_swab
    ]
}


def get_priority_policy(policy):
    """Resolve a policy name to a policy. Callables are passed straight through.
    """

    if callable(policy):
        return policy

    try:
        return PRIORITY_POLICIES[policy]
    except KeyError:
        raise ConfigurationError(
            f'unknown priority policy {policy!r}, choose one of {sorted(PRIORITY_POLICIES)}'
        ) from None


def check_policy_order(ordered: pd.DataFrame, cases: pd.DataFrame):
    """Checks the output of a policy before it is used to admit anyone.

    Eligibility is read from cases, never from the policy's output, so a policy cannot make a case
    eligible by relabelling it.

    Args:
        ordered (pd.DataFrame): The output of the policy
        cases (pd.DataFrame): The table that was handed to the policy

    Raises:
        PolicyContractError: if rows were added, dropped or duplicated, or if an ineligible case is ranked
            ahead of an eligible one
    """

    if 'eligible_for_interview' not in cases.columns:
        raise PolicyContractError('eligible_for_interview must be computed before a policy is applied')

    if len(ordered) != len(cases) or not ordered.index.sort_values().equals(cases.index.sort_values()):
        raise PolicyContractError('priority policy must return exactly the rows it was given')

    eligible = cases['eligible_for_interview'].reindex(ordered.index).to_numpy(dtype=bool)

    # eligible rows must form a prefix of the ordering
    if np.any(eligible[1:] > eligible[:-1]):
        raise PolicyContractError('priority policy ranked an ineligible case ahead of an eligible case')
