"""
Validity judgement: fold independent criteria into one flag.

Every criterion yields 0 or 1; the sensor is invalid iff their sum is
positive. Nothing is remembered between calls.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidityFlag:
    """
    Aggregate validity plus the per-criterion signals that produced it.

    :param invalid:  True when at least one criterion fired.
    :param criteria: Tuple of (name, fired) pairs in evaluation order.
    """
    invalid: bool
    criteria: tuple = ()

    @property
    def valid(self):
        return not self.invalid

    @property
    def bits(self):
        """Per-criterion diagnostic bits, bit i set when criterion i fired."""
        return sum(1 << i for i, (_, fired) in enumerate(self.criteria) if fired)

    def __getitem__(self, name):
        for criterion, fired in self.criteria:
            if criterion == name:
                return fired
        raise KeyError(name)


class JudgementAggregator:
    """
    Combine named criteria into a ValidityFlag.

    :param criteria_names: Ordered names of the criteria this sensor checks.
                           The order fixes the diagnostic bit positions.
    """
    def __init__(self, criteria_names):
        self.criteria_names = tuple(criteria_names)
        if not self.criteria_names:
            raise ValueError("at least one criterion is required.")

    def initial_flag(self):
        # Power-on state: nothing has been judged yet, so report invalid.
        return ValidityFlag(invalid=True, criteria=tuple((name, False) for name in self.criteria_names))

    def judge(self, signals):
        """
        :param signals: Mapping criterion name -> bool (True = invalidating).
                        Every configured criterion must be present.
        :return: ValidityFlag.
        """
        criteria = tuple((name, bool(signals[name])) for name in self.criteria_names)
        total = sum(int(fired) for _, fired in criteria)
        return ValidityFlag(invalid=total > 0, criteria=criteria)
