### Import/export of routes and services as flat CSV tables

import itertools as it, operator as op, functools as ft
from collections import namedtuple, OrderedDict
from pathlib import Path
import csv, contextlib

from . import utils as u, types as t


log = u.get_logger('mass.csv')


class FileFormatError(Exception): pass


@u.attr_struct(vals_to_attrs=True)
class CSVConf:

	encoding = 'utf-8-sig'
	delimiter = ','

	check_headers = True # raise FileFormatError on header mismatch, otherwise just warn
	skip_bogus_lines = True # log/skip lines that can't be parsed or applied, instead of raising

	# Order waypoints of each path by pathSeq column instead of their order in the file
	sort_by_path_seq = True


RouteRow = namedtuple( 'RouteRow', 'routeId routeName pathId'
	' pathSeq pathName wayPointType pointLat pointLon stopName stopId' )
ServiceRow = namedtuple( 'ServiceRow', 'routeId pathId serviceId'
	' origin destination days time stopId boardings alightings load' )

# Placeholder in stopId column for non-stop waypoints.
# Unrelated to "no data" values in ServiceRow, even though it is the same number.
waypoint_station_id = -1

service_data_columns = OrderedDict([
	('boardings', t.data.DataType.boardings),
	('alightings', t.data.DataType.alightings),
	('load', t.data.DataType.load) ])

day_codes = OrderedDict([
	('WK', t.period.weekdays), ('SA', t.period.saturdays),
	('SU', t.period.sundays), ('WE', t.period.weekends) ])

time_codes = OrderedDict(
	(code, getattr(t.period.TimePeriod, name)) for code, name in zip(
		['EA', 'AM', 'BS', 'PM', 'NI'], t.period.time_period_names ) )


def parse_days(days_str):
	'Parse either one of day_codes or "+"-separated day abbreviations (e.g. "Mo+We").'
	days_str = days_str.strip()
	if days_str in day_codes: return day_codes[days_str]
	return tuple(map(t.period.Day.parse, days_str.split('+')))

def parse_time_period(tp_str):
	'Parse either one of time_codes or "HH:MM-HH:MM" interval.'
	tp_str = tp_str.strip()
	if tp_str in time_codes: return time_codes[tp_str]
	return t.period.TimePeriod.parse(tp_str)

def period_codes(period):
	'Return (days, time) strings for Period, using short codes where possible.'
	if not period.days: raise FileFormatError('Period without days: {!r}'.format(period))
	days_str = next(( code for code, days in day_codes.items()
		if t.period.days_equal(period.days, days) ), None)
	if not days_str: days_str = '+'.join(map(str, period.days))
	tp_str = next(( code for code, tp in time_codes.items()
		if tp == period.time_period ), None)
	if not tp_str: tp_str = '{0.start}-{0.end}'.format(period.time_period)
	return days_str, tp_str


@contextlib.contextmanager
def open_src(src, conf):
	if hasattr(src, 'read'): yield src
	else:
		with Path(src).open(encoding=conf.encoding, newline='') as src: yield src

@contextlib.contextmanager
def open_dst(dst, conf):
	if hasattr(dst, 'write'): yield dst
	else:
		with u.safe_replacement(dst, encoding=conf.encoding, newline='') as dst: yield dst

def bogus_line(conf, src_name, n, line, err):
	if not conf.skip_bogus_lines:
		raise FileFormatError('Bogus CSV line {} ({}): {!r} - {}'.format(n, src_name, line, err))
	log.warning('Skipping bogus CSV line {} ({}): {!r} - {}', n, src_name, line, err)

def iter_csv_tuples(src, tuple_t, conf):
	'''Yield (line_number, tuple_t) for rows of CSV file with header matching tuple_t fields.
		Trailing empty columns, as produced by some tools, are ignored.'''
	with open_src(src, conf) as src:
		src_name = getattr(src, 'name', '<stream>')
		log.debug('Processing csv file: {}', src_name)
		src_csv, fields_n = csv.reader(src, delimiter=conf.delimiter), len(tuple_t._fields)
		try: fields = list(v.strip() for v in next(src_csv))
		except StopIteration: raise FileFormatError('Empty CSV file: {}'.format(src_name)) from None
		if fields[:fields_n] != list(tuple_t._fields):
			err = 'CSV header mismatch ({}): {} != {}'.format(
				src_name, ','.join(fields), ','.join(tuple_t._fields) )
			if conf.check_headers: raise FileFormatError(err)
			log.warning(err)
		for line in src_csv:
			if not any(v.strip() for v in line): continue
			while len(line) > fields_n and not line[-1].strip(): line.pop()
			try: row = tuple_t(*(v.strip() for v in line))
			except TypeError:
				bogus_line(conf, src_name, src_csv.line_num, line, 'wrong number of columns')
				continue
			yield src_csv.line_num, row

def write_csv(dst, tuple_t, rows, conf):
	n, dst_name = 0, getattr(dst, 'name', dst)
	with open_dst(dst, conf) as dst:
		dst_csv = csv.writer(dst, delimiter=conf.delimiter, lineterminator='\n')
		dst_csv.writerow(tuple_t._fields)
		for n, row in enumerate(rows, 1): dst_csv.writerow(row)
	log.debug('Wrote {:,} csv line(s) to: {}', n, dst_name)
	return n


### Routes

ImportWayPoint = namedtuple('ImportWayPoint', 'path_seq wp_type lat lon name station_id')

@u.attr_struct
class ImportWayPointSet:
	route_id = u.attr_init()
	route_name = u.attr_init()
	path_id = u.attr_init()
	path_name = u.attr_init()
	waypoints = u.attr_init(list)

def import_routes(src, objects, conf=None):
	'''Add/update Routes and RoutePaths in SystemObjects from route file.
		Waypoints of each RoutePath mentioned in the file get replaced.
		Existing Services on such paths get relinked to new Stops by station_id,
			or dropped with a warning if their origin/destination are gone or out of order.
		Returns number of imported waypoints.'''
	conf, wp_sets = conf or CSVConf(), OrderedDict()
	src_name = getattr(src, 'name', src)
	for n, row in iter_csv_tuples(src, RouteRow, conf):
		try:
			route_id, path_id, path_seq = map(int, [row.routeId, row.pathId, row.pathSeq])
			wp_type = t.public.WayPointType(int(row.wayPointType))
			lat, lon = map(float, [row.pointLat, row.pointLon])
			station_id = int(row.stopId) if wp_type is t.public.WayPointType.stop else None
		except ValueError as err:
			bogus_line(conf, src_name, n, list(row), err)
			continue
		wp_set = wp_sets.get((route_id, path_id))
		if not wp_set:
			wp_set = wp_sets[route_id, path_id] =\
				ImportWayPointSet(route_id, row.routeName, path_id, row.pathName)
		wp_set.waypoints.append(ImportWayPoint(path_seq, wp_type, lat, lon, row.stopName, station_id))

	wp_count = 0
	for wp_set in wp_sets.values():
		route = objects.get_route(wp_set.route_id)
		if not route: route = objects.add_route(t.public.Route(wp_set.route_id, wp_set.route_name))
		path = route.get_route_path(wp_set.path_id)
		if not path:
			path = route.add_path(t.public.RoutePath(route, wp_set.path_name, wp_set.path_id))
		elif path.services:
			log.debug( 'Replacing waypoints of route path'
				' with {} existing service(s): {!r}', len(path.services), path )
		path.delete_all_waypoints()
		waypoints = wp_set.waypoints
		if conf.sort_by_path_seq: waypoints = sorted(waypoints, key=op.attrgetter('path_seq'))
		for wp in waypoints:
			if wp.wp_type is t.public.WayPointType.stop:
				wp = t.public.Stop(path, wp.lat, wp.lon, wp.name, wp.station_id)
			else: wp = t.public.WayPoint(path, wp.lat, wp.lon)
			path.add_waypoint(wp)
		wp_count += len(waypoints)
		for svc in list(path.services):
			try: svc.relink_stops()
			except t.public.InvalidRangeError as err:
				log.warning('Dropping service {!r} on route path {!r}: {}', svc, path, err)
				path.remove_service(svc)

	log.debug('Imported {:,} waypoint(s) for {:,} route path(s)', wp_count, len(wp_sets))
	return wp_count

def iter_route_rows(objects):
	'One RouteRow for every WayPoint, in route/path/waypoint order.'
	for route in objects.routes:
		for path in route.paths:
			for path_seq, wp in enumerate(path.waypoints, 1):
				name, station_id = (wp.name, wp.station_id)\
					if wp.is_stop else ('', waypoint_station_id)
				yield RouteRow(
					str(route.route_id), route.name, str(path.path_id), str(path_seq),
					path.name, str(wp.wp_type.value), str(float(wp.lat)), str(float(wp.lon)),
					name, str(station_id) )

def export_routes(dst, objects, conf=None):
	return write_csv(dst, RouteRow, iter_route_rows(objects), conf or CSVConf())


### Services

def import_services(src, objects, conf=None):
	'''Create Services and add data to their ServiceStops from service file.
		Routes, paths and stops must already be in SystemObjects.
		Data value of -1 means "no data" and is skipped.
		Returns number of rows that were applied.'''
	conf, row_count = conf or CSVConf(), 0
	src_name = getattr(src, 'name', src)
	path = svc = None
	for n, row in iter_csv_tuples(src, ServiceRow, conf):
		line = list(row)
		try:
			route_id, path_id, service_id, origin_id, destination_id, station_id = map(int,
				[row.routeId, row.pathId, row.serviceId, row.origin, row.destination, row.stopId] )
			values = list(int(getattr(row, k)) for k in service_data_columns)
			period = t.period.Period(parse_days(row.days), parse_time_period(row.time))
		except ValueError as err:
			bogus_line(conf, src_name, n, line, err)
			continue

		if not path or (path.route.route_id, path.path_id) != (route_id, path_id):
			route, svc = objects.get_route(route_id), None
			path = route and route.get_route_path(path_id)
			if not path:
				bogus_line(conf, src_name, n, line, 'unknown route/path')
				continue

		if not svc or svc.service_id != service_id:
			svc = path.get_service(service_id)
			if not svc:
				origin, destination = map(path.get_stop, [origin_id, destination_id])
				if not (origin and destination):
					bogus_line(conf, src_name, n, line, 'unknown origin/destination stop')
					continue
				try: svc = t.public.Service(service_id, period, origin, destination, path)
				except t.public.InvalidRangeError as err:
					bogus_line(conf, src_name, n, line, err)
					continue
				path.add_service(svc)

		svc_stop = svc.get_service_stop(station_id)
		if not svc_stop:
			bogus_line(conf, src_name, n, line, 'stop is not on service')
			continue
		for dtype, value in zip(service_data_columns.values(), values):
			value = t.data.from_legacy(value)
			if value is not None: svc_stop.add_data(t.data.Data(dtype, value))
		row_count += 1

	log.debug('Imported {:,} service stop row(s)', row_count)
	return row_count

def iter_service_rows(objects):
	'One ServiceRow for every ServiceStop, in route/path/service order.'
	for route in objects.routes:
		for path in route.paths:
			for svc in path.services:
				days_str, tp_str = period_codes(svc.period)
				for svc_stop in svc.service_stops:
					values = ( t.data.legacy_max(svc_stop.get_value(dtype))
						for dtype in service_data_columns.values() )
					yield ServiceRow(
						str(route.route_id), str(path.path_id), str(svc.service_id),
						str(svc.origin.station_id), str(svc.destination.station_id),
						days_str, tp_str, str(svc_stop.stop.station_id), *map(str, values) )

def export_services(dst, objects, conf=None):
	return write_csv(dst, ServiceRow, iter_service_rows(objects), conf or CSVConf())
