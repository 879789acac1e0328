"""Helpers for formatting values shown to users."""
import datetime

import pytz

# Output for timestamps that aren't set.
EMPTY = "---"

_DAY = datetime.timedelta(days=1)
_WEEK = 7 * _DAY
_MONTH = 30 * _DAY
_YEAR = 12 * _MONTH

# (upper bound, format, divisor) pairs checked in order; the first bound
# larger than the elapsed time picks the format.
_MAGNITUDES = [
  (datetime.timedelta(seconds=1), "now", None),
  (datetime.timedelta(seconds=2), "1 second {0}", None),
  (datetime.timedelta(minutes=1), "{1} seconds {0}", datetime.timedelta(seconds=1)),
  (datetime.timedelta(minutes=2), "1 minute {0}", None),
  (datetime.timedelta(hours=1), "{1} minutes {0}", datetime.timedelta(minutes=1)),
  (datetime.timedelta(hours=2), "1 hour {0}", None),
  (_DAY, "{1} hours {0}", datetime.timedelta(hours=1)),
  (2 * _DAY, "1 day {0}", None),
  (_WEEK, "{1} days {0}", _DAY),
  (2 * _WEEK, "1 week {0}", None),
  (_MONTH, "{1} weeks {0}", _WEEK),
  (2 * _MONTH, "1 month {0}", None),
  (_YEAR, "{1} months {0}", _MONTH),
  (18 * _MONTH, "1 year {0}", None),
  (2 * _YEAR, "2 years {0}", None),
  (37 * _YEAR, "{1} years {0}", _YEAR),
]


class Clock(object): # pylint: disable=useless-object-inheritance
  """Source of the current time; tests substitute a fixed clock."""

  def now(self): # pylint: disable=no-self-use
    """Return the current time with timezone information."""
    return datetime.datetime.now(tz=pytz.utc)


class FixedClock(Clock):
  """A clock that always returns the same time."""

  def __init__(self, now):
    self._now = now

  def now(self):
    return self._now


def age(then, clock=None):
  """Describe how long ago then was; e.g. "5 minutes ago".

  Args:
    then: A timezone aware datetime or None.
    clock: (Optional) Clock to read the current time from.
  """
  if then is None:
    return EMPTY

  clock = clock or Clock()
  now = clock.now()
  if then.tzinfo is None:
    then = pytz.utc.localize(then)

  label = "ago"
  elapsed = now - then
  if elapsed < datetime.timedelta(0):
    label = "from now"
    elapsed = -elapsed

  for bound, fmt, divisor in _MAGNITUDES:
    if elapsed < bound:
      count = elapsed // divisor if divisor else 1
      return fmt.format(label, count)

  return "a long while {0}".format(label)
