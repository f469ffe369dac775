import itertools as it, operator as op, functools as ft
from pathlib import Path
import time

from . import csv_files, vis, utils as u, types as t


def calc_timer(func, *args, log=u.get_logger('mass.timer'), timer_name=None, **kws):
	if not timer_name:
		func_base = func if not isinstance(func, ft.partial) else func.func
		timer_name = '.'.join([func_base.__module__.strip('__'), func_base.__qualname__])
	log.debug('[{}] Starting...', timer_name)
	td = time.monotonic()
	data = func(*args, **kws)
	td = time.monotonic() - td
	log.debug('[{}] Finished in: {:.1f}s', timer_name, td)
	return data


def init_system( routes_path, services_path=None,
		conf=None, timer_func=None, log=u.get_logger('mass.init') ):
	'''Build SystemObjects from route file and (optionally) service file.
		Service file can only refer to routes/paths/stops from the route one.'''
	if not conf: conf = csv_files.CSVConf()

	import_routes, import_services = csv_files.import_routes, csv_files.import_services
	if timer_func:
		import_routes, import_services = (
			ft.partial(timer_func, func) for func in [import_routes, import_services] )

	objects = t.public.SystemObjects()
	import_routes(Path(routes_path), objects, conf)
	if services_path: import_services(Path(services_path), objects, conf)

	log.debug(
		'Loaded system objects: routes={:,}, paths={:,},'
			' waypoints={:,} (stops={:,}), services={:,} (service-stops={:,})',
		*objects.stats() )
	return objects
