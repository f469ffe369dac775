import itertools as it, operator as op, functools as ft
import os, logging, contextlib, tempfile, stat

import attr


class LogMessage:
	def __init__(self, fmt, a, k): self.fmt, self.a, self.k = fmt, a, k
	def __str__(self): return self.fmt.format(*self.a, **self.k) if self.a or self.k else self.fmt

class LogStyleAdapter(logging.LoggerAdapter):
	def __init__(self, logger, extra=None):
		super(LogStyleAdapter, self).__init__(logger, extra or {})
	def log(self, level, msg, *args, **kws):
		if not self.isEnabledFor(level): return
		log_kws = {} if 'exc_info' not in kws else dict(exc_info=kws.pop('exc_info'))
		msg, kws = self.process(msg, kws)
		self.logger._log(level, LogMessage(msg, args, kws), (), log_kws)

get_logger = lambda name: LogStyleAdapter(logging.getLogger(name))


def attr_struct(cls=None, vals_to_attrs=False, defaults=..., **kws):
	if not cls:
		return ft.partial( attr_struct,
			vals_to_attrs=vals_to_attrs, defaults=defaults, **kws )
	try:
		keys = cls.keys
		del cls.keys
	except AttributeError: keys = list()
	else:
		attr_kws = dict()
		if defaults is not ...: attr_kws['default'] = defaults
		if isinstance(keys, str): keys = keys.split()
		for k in keys: setattr(cls, k, attr.ib(**attr_kws))
	if vals_to_attrs:
		for k, v in list(vars(cls).items()):
			if k.startswith('_') or k in keys or callable(v): continue
			if isinstance(v, (classmethod, staticmethod, property)): continue
			setattr(cls, k, attr.ib(v))
	kws.setdefault('hash', not hasattr(cls, '__hash__'))
	kws.setdefault('slots', True)
	return attr.s(cls, **kws)

def attr_init(factory_or_default=attr.NOTHING, **attr_kws):
	if callable(factory_or_default): factory_or_default = attr.Factory(factory_or_default)
	return attr.ib(default=factory_or_default, **attr_kws)

attr_init_id = lambda **attr_kws:\
	attr_init(lambda seq=iter(range(2**40)): next(seq), **attr_kws)

# Non-owning back-reference to a parent object, kept out of repr/eq/hash
attr_init_parent = lambda: attr.ib(repr=False, eq=False, hash=False)


def same_type_and_id(v1, v2):
	return type(v1) is type(v2) and v1.id == v2.id

def index_of(seq, v):
	'Position of v in seq by equality, or None if it is not there.'
	for n, item in enumerate(seq):
		if item == v: return n


def max(iterable, default=..., _max=max, **kws):
	try: return _max(iterable, **kws)
	except ValueError:
		if default is ...: raise
		return default

def min(iterable, default=..., _min=min, **kws):
	try: return _min(iterable, **kws)
	except ValueError:
		if default is ...: raise
		return default

def fold_min(values):
	'Minimum of non-None values, or None if there are none.'
	return min(filter(lambda v: v is not None, values), default=None)

def fold_max(values):
	'Maximum of non-None values, or None if there are none.'
	return max(filter(lambda v: v is not None, values), default=None)


@contextlib.contextmanager
def safe_replacement(path, *open_args, mode=None, **open_kws):
	path = str(path)
	if mode is None:
		try: mode = stat.S_IMODE(os.lstat(path).st_mode)
		except OSError: pass
	open_kws.update( delete=False,
		dir=os.path.dirname(path) or '.', prefix=os.path.basename(path)+'.' )
	if not open_args: open_kws['mode'] = 'w'
	with tempfile.NamedTemporaryFile(*open_args, **open_kws) as tmp:
		try:
			if mode is not None: os.fchmod(tmp.fileno(), mode)
			yield tmp
			if not tmp.closed: tmp.flush()
			os.rename(tmp.name, path)
		finally:
			try: os.unlink(tmp.name)
			except OSError: pass
