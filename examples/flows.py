"""Example flow descriptions.

Run them with the CLI, e.g.::

    rivulet levels examples/flows.py:spread
    rivulet run examples/flows.py:running_mean 4 8 6 2
    rivulet run examples/flows.py:spread "[10, 4]" "[7, 7]" "[1, 9]"

"""

import operator

from rivulet import accumulate, filter, identity, transform


def running_mean(apply, inputs):
    """Mean of every input seen so far."""
    x = inputs[0]
    total = apply(accumulate(0, operator.add), x)
    count = apply(accumulate(0, lambda n, _: n + 1), x)
    return apply(identity(), [total, count], merge=operator.truediv)


def spread(apply, inputs):
    """Absolute difference of two readings, reported with the larger one."""
    high, low = inputs[0], inputs[1]
    diff = apply(transform(lambda pair: abs(pair[0] - pair[1])), [high, low])
    peak = apply(identity(), [high, low], merge=max)
    return [diff, peak]


def positive_totals(apply, inputs):
    """Running sum of the positive inputs only."""
    positive = apply(filter(lambda v: v > 0), inputs[0])
    return apply(accumulate(0, operator.add), positive)
