### Ridership measurements attached to ServiceStops

import itertools as it, operator as op, functools as ft
import enum

from .. import utils as u


class DataKind(enum.Enum):
	'''Rendering hint for a DataType.
		point - shown on stops only, segment - also colors the line leading from the stop.'''
	point, segment = range(2)

class DataType(enum.Enum):
	boardings = 'Boardings', DataKind.point
	alightings = 'Alightings', DataKind.point
	load = 'Load', DataKind.segment

	@property
	def title(self): return self.value[0]
	@property
	def kind(self): return self.value[1]

	@classmethod
	def parse(cls, name):
		try: return cls[name.strip().lower()]
		except KeyError: raise ValueError(name) from None

	def __str__(self): return self.title


@u.attr_struct(frozen=True, hash=True)
class Data:
	dtype = u.attr_init()
	value = u.attr_init()
	def __str__(self): return '{}: {}'.format(self.dtype, self.value)

Boardings, Alightings, Load = (
	ft.partial(Data, dtype) for dtype in
	[DataType.boardings, DataType.alightings, DataType.load] )


# Out-of-band "no data" values, as used in legacy CSV files.
# Two different ones, as min/max folds start from these.
no_max_data = -1
no_min_data = 2**31 - 1

def legacy_max(value): return no_max_data if value is None else value
def legacy_min(value): return no_min_data if value is None else value

def from_legacy(value):
	if value in (no_max_data, no_min_data): return None
	return value
