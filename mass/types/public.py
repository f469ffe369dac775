import itertools as it, operator as op, functools as ft
from collections import namedtuple
import enum

from .. import utils as u


class SystemObjectsError(Exception): pass

class InvalidRangeError(SystemObjectsError, ValueError):
	'Start/end waypoints are not on the path or are in the wrong order there.'

class WayPointNotFound(SystemObjectsError, LookupError): pass


### Route geometry - waypoints and stops

class WayPointType(enum.Enum):
	'Values match wayPointType column in route files.'
	waypoint, stop = range(2)

@u.attr_struct(repr=False, eq=False)
class WayPoint:
	'Geometry vertex along a RoutePath with no passenger-facing meaning.'

	wp_type = WayPointType.waypoint

	path = u.attr_init_parent()
	lat = u.attr_init()
	lon = u.attr_init()
	id = u.attr_init_id(init=False)

	@property
	def location(self): return self.lat, self.lon
	@property
	def is_stop(self): return self.wp_type is WayPointType.stop

	def __hash__(self): return hash(self.id)
	def __eq__(self, wp): return u.same_type_and_id(self, wp)
	def __repr__(self): return '<WayPoint {} ({}, {})>'.format(self.id, self.lat, self.lon)

@u.attr_struct(repr=False, eq=False)
class Stop(WayPoint):
	'''WayPoint where passengers board/alight.
		station_id is only unique within RoutePath, not globally.'''

	wp_type = WayPointType.stop

	name = u.attr_init()
	station_id = u.attr_init()

	def status_message(self):
		return '{}   {}   {}-{}'.format(
			self.station_id, self.name, self.path.route, self.path.name[:1] )

	def __repr__(self): return '<Stop {} [{}]>'.format(self.station_id, self.name)


### Services and their per-stop data

@u.attr_struct(repr=False, eq=False)
class ServiceStop:
	'''Data recorded for one Stop of a Service.
		Duplicate data types are not checked for, first one added is returned.'''

	stop = u.attr_init()
	data = u.attr_init(list)
	id = u.attr_init_id(init=False)

	def add_data(self, data): self.data.append(data)

	def get_data(self, dtype):
		for data in self.data:
			if data.dtype is dtype: return data

	def get_value(self, dtype):
		data = self.get_data(dtype)
		return data.value if data else None

	@staticmethod
	def find_min_data(dtype, service_stops):
		return u.fold_min(svc_stop.get_value(dtype) for svc_stop in service_stops)

	@staticmethod
	def find_max_data(dtype, service_stops):
		return u.fold_max(svc_stop.get_value(dtype) for svc_stop in service_stops)

	def __hash__(self): return hash(self.id)
	def __eq__(self, svc_stop): return u.same_type_and_id(self, svc_stop)
	def __repr__(self): # mostly to avoid recursion via stop.path
		return '<ServiceStop {} [{}]>'.format(
			self.stop.station_id, ' '.join(map(str, self.data)) )


@u.attr_struct(repr=False, eq=False)
class Service:
	'''Scheduled run of a RoutePath within a Period, from origin to destination Stop.
		ServiceStops are created for all Stops in that range on construction,
			and raise InvalidRangeError if origin/destination are not on the path in that order.'''

	service_id = u.attr_init()
	period = u.attr_init()
	origin = u.attr_init()
	destination = u.attr_init()
	path = u.attr_init_parent()
	service_stops = u.attr_init(list, init=False)
	id = u.attr_init_id(init=False)

	def __attrs_post_init__(self):
		self.service_stops.extend(map(
			ServiceStop, self.path.stops_between(self.origin, self.destination) ))

	@property
	def stops(self): return list(map(op.attrgetter('stop'), self.service_stops))

	def get_service_stop(self, stop):
		'Find ServiceStop by Stop or its station_id.'
		if isinstance(stop, Stop): stop = stop.station_id
		for svc_stop in self.service_stops:
			if svc_stop.stop.station_id == stop: return svc_stop

	def min_data(self, dtype): return ServiceStop.find_min_data(dtype, self.service_stops)
	def max_data(self, dtype): return ServiceStop.find_max_data(dtype, self.service_stops)

	def service_path(self):
		'All WayPoints between origin and destination, including non-stop ones.'
		return self.path.sub_path(self.origin, self.destination)

	def relink_stops(self):
		'''Re-resolve origin/destination and ServiceStops against current path
				Stops by their station_id, keeping data recorded for ones that match.
			Raises InvalidRangeError and leaves Service unchanged
				if origin/destination are not on the path in that order anymore.'''
		origin, destination = (
			self.path.get_stop(stop.station_id) for stop in [self.origin, self.destination] )
		if origin is None or destination is None:
			raise InvalidRangeError(
				'Service origin/destination not on path {!r}: {!r} - {!r}'.format(
					self.path.name, self.origin, self.destination ) )
		stops = self.path.stops_between(origin, destination)
		data = dict((svc_stop.stop.station_id, svc_stop.data) for svc_stop in self.service_stops)
		self.origin, self.destination = origin, destination
		self.service_stops[:] = list(
			ServiceStop(stop, list(data.get(stop.station_id, list()))) for stop in stops )

	@staticmethod
	def find_min_data(dtype, services):
		return u.fold_min(svc.min_data(dtype) for svc in services)

	@staticmethod
	def find_max_data(dtype, services):
		return u.fold_max(svc.max_data(dtype) for svc in services)

	def __hash__(self): return hash(self.id)
	def __eq__(self, svc): return u.same_type_and_id(self, svc)
	def __repr__(self):
		return '<Service {} {} [{} - {}]>'.format(
			self.service_id, ' '.join(map(str, self.period.days)),
			self.period.time_period, len(self.service_stops) )


### Routes

@u.attr_struct(repr=False, eq=False)
class RoutePath:
	'''One directional variant of a Route - ordered WayPoints/Stops and Services on them.
		All lookups of waypoints here are by their id, not lat/lon or other values.'''

	route = u.attr_init_parent()
	name = u.attr_init()
	path_id = u.attr_init()
	waypoints = u.attr_init(list)
	services = u.attr_init(list)
	id = u.attr_init_id(init=False)

	@property
	def stops(self): return list(filter(op.attrgetter('is_stop'), self.waypoints))

	def get_stop(self, station_id):
		for stop in self.stops:
			if stop.station_id == station_id: return stop

	def get_service(self, service_id):
		for svc in self.services:
			if svc.service_id == service_id: return svc

	def service_with_period(self, period):
		for svc in self.services:
			if svc.period == period: return svc

	def min_data(self, dtype): return Service.find_min_data(dtype, self.services)
	def max_data(self, dtype): return Service.find_max_data(dtype, self.services)

	def sub_path(self, start, end):
		'Inclusive list of waypoints from start to end.'
		n_start, n_end = (u.index_of(self.waypoints, wp) for wp in [start, end])
		if n_start is None or n_end is None:
			raise InvalidRangeError( 'Waypoint(s) not on path {!r}: {}'.format(
				self.name, ', '.join(repr(wp) for wp, n in
					[(start, n_start), (end, n_end)] if n is None) ))
		if n_start > n_end:
			raise InvalidRangeError( 'Start waypoint is after'
				' end one on path {!r}: {!r} [{}] > {!r} [{}]'.format(
					self.name, start, n_start, end, n_end ) )
		return self.waypoints[n_start:n_end+1]

	def stops_between(self, start, end):
		return list(filter(op.attrgetter('is_stop'), self.sub_path(start, end)))

	def _index(self, wp):
		n = u.index_of(self.waypoints, wp)
		if n is None: raise WayPointNotFound(self.name, wp)
		return n

	def add_waypoint(self, wp):
		self.waypoints.append(wp)
		return wp

	def insert_waypoint(self, wp, wp_after):
		self.waypoints.insert(self._index(wp_after) + 1, wp)
		return wp

	def replace_waypoint(self, wp_old, wp_new):
		self.waypoints[self._index(wp_old)] = wp_new
		return wp_new

	def delete_waypoint(self, wp): del self.waypoints[self._index(wp)]
	def delete_all_waypoints(self): self.waypoints.clear()

	def add_service(self, svc):
		self.services.append(svc)
		return svc

	def remove_service(self, svc): self.services.remove(svc)

	def __lt__(self, path): return self.name < path.name
	def __hash__(self): return hash(self.id)
	def __eq__(self, path): return u.same_type_and_id(self, path)
	def __str__(self): return self.name
	def __repr__(self):
		return '<RoutePath {}:{} [{}] waypoints={} services={}>'.format(
			self.route, self.path_id, self.name, len(self.waypoints), len(self.services) )


@u.attr_struct(repr=False, eq=False)
class Route:
	'''Numbered/named transit line, with RoutePaths kept sorted by name.
		route_id uniqueness is not checked here, see SystemObjects.check_other_routes_for_id().'''

	route_id = u.attr_init()
	name = u.attr_init()
	paths = u.attr_init(list)
	id = u.attr_init_id(init=False)

	def __attrs_post_init__(self): self.paths.sort()

	def get_route_path(self, path_id):
		for path in self.paths:
			if path.path_id == path_id: return path

	def add_path(self, path):
		self.paths.append(path)
		self.paths.sort()
		return path

	def remove_path(self, path): self.paths.remove(path)

	def __lt__(self, route): return self.route_id < route.route_id
	def __hash__(self): return hash(self.id)
	def __eq__(self, route): return u.same_type_and_id(self, route)
	def __str__(self): return str(self.route_id)
	def __repr__(self):
		return '<Route {} [{}] paths={}>'.format(self.route_id, self.name, len(self.paths))


class SystemObjects:
	'''In-memory database of all Routes and everything under these.
		Routes are kept sorted by route_id.
		Nothing here is thread-safe - all access should be serialized by the caller.'''

	_stats_t = namedtuple( 'Stats',
		'routes paths waypoints stops services service_stops' )

	def __init__(self): self.routes = list()

	def route_exists(self, route_id): return self.get_route(route_id) is not None

	def check_other_routes_for_id(self, route):
		'Whether some other Route (not this one) has the same route_id.'
		for rte in self.routes:
			if rte != route and rte.route_id == route.route_id: return True
		return False

	def get_route(self, route_id):
		for route in self.routes:
			if route.route_id == route_id: return route

	def all_routes(self): return self.routes

	def all_route_paths(self):
		return list(it.chain.from_iterable(route.paths for route in self.routes))

	def all_services(self):
		return list(it.chain.from_iterable(path.services for path in self.all_route_paths()))

	def services_with_constraint(self, paths, period):
		'''Services on one of the specified RoutePaths with Period equal to specified one.
			Returns empty list if either constraint is None or empty.'''
		if not paths or period is None: return list()
		paths = set(paths)
		return list( svc for svc in self.all_services()
			if svc.path in paths and svc.period == period )

	def find_min_data(self, dtype, services=None):
		if services is None: services = self.all_services()
		return Service.find_min_data(dtype, services)

	def find_max_data(self, dtype, services=None):
		if services is None: services = self.all_services()
		return Service.find_max_data(dtype, services)

	def add_route(self, route):
		self.routes.append(route)
		self.routes.sort()
		return route

	def remove_route(self, route): self.routes.remove(route)

	def stats(self):
		paths = self.all_route_paths()
		services = list(it.chain.from_iterable(path.services for path in paths))
		return self._stats_t(
			len(self.routes), len(paths),
			sum(len(path.waypoints) for path in paths),
			sum(len(path.stops) for path in paths),
			len(services), sum(len(svc.service_stops) for svc in services) )

	def __len__(self): return len(self.routes)
	def __iter__(self): return iter(self.routes)
