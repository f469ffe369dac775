from . import period, data, public
