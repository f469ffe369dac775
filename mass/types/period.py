### Calendar/clock constraints for when a Service operates

import itertools as it, operator as op, functools as ft
import enum

from .. import utils as u


class Day(enum.Enum):
	monday, tuesday, wednesday, thursday, friday, saturday, sunday = range(1, 8)

	@property
	def seq(self): return self.value
	@property
	def title(self): return self.name.title()

	def __str__(self): return self.title[:2]

	@classmethod
	def parse(cls, abbr):
		'Find Day by its two-letter abbreviation or full name, case-insensitive.'
		abbr = abbr.strip().lower()
		for day in cls:
			if abbr in (day.name, day.name[:2]): return day
		raise ValueError(abbr)

weekdays = Day.monday, Day.tuesday, Day.wednesday, Day.thursday, Day.friday
saturdays = Day.saturday,
sundays = Day.sunday,
weekends = Day.saturday, Day.sunday

def days_equal(days1, days2):
	'Same number of days and every day of first set is in the second one.'
	if len(days1) != len(days2): return False
	return all(day in days2 for day in days1)


def _cmp(a, b): return (a > b) - (a < b)


@u.attr_struct(frozen=True, hash=True)
class Time:
	h = u.attr_init()
	m = u.attr_init()
	s = u.attr_init(0)

	@classmethod
	def parse(cls, time_str):
		vals = list(int(v.strip()) for v in time_str.split(':'))
		if len(vals) == 2: vals.append(0)
		if len(vals) != 3: raise ValueError(time_str)
		return cls(*vals)

	def compare(self, time):
		return _cmp(u.attr.astuple(self), u.attr.astuple(time))

	def __str__(self):
		if not self.s: return '{:02d}:{:02d}'.format(self.h, self.m)
		return '{:02d}:{:02d}:{:02d}'.format(self.h, self.m, self.s)


@u.attr_struct(frozen=True, eq=False)
class TimePeriod:
	'''Clock interval of a day, with start inclusive and end exclusive.
		Named intervals covering whole day without gaps are
			attached as class attributes - early, morning_rush, base, evening_rush, late.'''
	keys = 'start end'

	@classmethod
	def parse(cls, tp_str):
		start, end = tp_str.split('-', 1)
		return cls(Time.parse(start), Time.parse(end))

	def compare(self, tp):
		'''Returns 0 if both bounds are the same, 1 if this interval is
				strictly wider than tp on both ends (i.e. contains it), -1 otherwise.
			Not an ordering - two unrelated intervals are both -1 vs each other.'''
		c_start, c_end = self.start.compare(tp.start), self.end.compare(tp.end)
		if c_start == 0 and c_end == 0: return 0
		if c_start < 0 and c_end > 0: return 1
		return -1

	def __eq__(self, tp):
		if not isinstance(tp, TimePeriod): return NotImplemented
		return self.compare(tp) == 0
	def __hash__(self): return hash((self.start, self.end))
	def __str__(self): return '{} - {}'.format(self.start, self.end)

time_period_names = 'early', 'morning_rush', 'base', 'evening_rush', 'late'
for name, (h0, h1) in zip(time_period_names, [(0, 6), (6, 9), (9, 15), (15, 18), (18, 24)]):
	setattr(TimePeriod, name, TimePeriod(Time(h0, 0), Time(h1, 0)))


@u.attr_struct(frozen=True, eq=False, repr=False)
class Period:
	'''Set of Days and a TimePeriod on these, i.e. "weekdays 9:00-15:00".

		Comparison only looks at min/max day sequence numbers, not the day set itself,
			so e.g. [monday, friday] is equal to [monday..friday] in the same TimePeriod.
		If day bounds match, result is TimePeriod.compare() result.
		If days of the other period extend strictly past these on both ends,
			result is 1 ("contained"), otherwise -1 ("outside").
		Period with no days is contained in any period that has some.
		Note that this is the opposite direction from what TimePeriod.compare()
			returns 1 for, and is not an ordering, so sorting Periods makes no sense.'''

	days = u.attr_init(converter=tuple)
	time_period = u.attr_init()

	@property
	def day_bounds(self):
		seqs = list(map(op.attrgetter('seq'), self.days))
		return u.min(seqs, default=None), u.max(seqs, default=None)

	def compare(self, period):
		# Empty day set has inverted (2**31-1, -1) bounds here,
		#  so it is "contained" in any non-empty period
		(a_min, a_max), (b_min, b_max) = (
			(2**31 - 1 if d_min is None else d_min, -1 if d_max is None else d_max)
			for d_min, d_max in [self.day_bounds, period.day_bounds] )
		if a_min == b_min and a_max == b_max:
			return self.time_period.compare(period.time_period)
		if b_min < a_min and b_max > a_max: return 1
		return -1

	def __eq__(self, period):
		if not isinstance(period, Period): return NotImplemented
		return self.compare(period) == 0
	def __hash__(self): return hash((self.day_bounds, self.time_period))

	def __repr__(self):
		return '<Period {} {}>'.format('/'.join(map(str, self.days)), self.time_period)

period_day_sets = dict(weekday=weekdays, saturday=saturdays, sunday=sundays)
for (days_name, days), tp_name in it.product(period_day_sets.items(), time_period_names):
	setattr( Period, '{}_{}'.format(days_name, tp_name),
		Period(days, getattr(TimePeriod, tp_name)) )
