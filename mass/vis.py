# Visualization tools - color scales for data values and graphviz dumps

import itertools as it, operator as op, functools as ft
from collections import OrderedDict
import contextlib

from . import utils as u, types as t


log = u.get_logger('mass.vis')

print_fmt = lambda tpl, *a, file=None, end='\n', **k:\
	print(tpl.format(*a,**k), file=file, end=end)

dot_str = lambda n: '"{}"'.format(n.replace('"', '\\"'))
dot_html = lambda n: '<{}>'.format(n)
dot_color = lambda rgb: '"#{:02x}{:02x}{:02x}"'.format(*rgb)


@u.attr_struct(vals_to_attrs=True)
class ScaleConf:

	# Use value_min/value_max for the scale instead of min/max of displayed data
	fixed = False
	value_min = 0
	value_max = 100

	no_data_color = 17, 177, 255
	path_color = 0, 0, 0 # lines for point-type data, which don't get colored


def color_scale():
	'List of (r, g, b) tuples going from green to yellow to red.'
	return list(it.chain(
		((r, 255, 0) for r in range(256)),
		((255, g, 0) for g in range(255, -1, -1)) ))

default_scale = color_scale()

def interpolate_color(value, value_min, value_max, scale=None):
	scale = scale or default_scale
	if value < value_min: return scale[0]
	if value > value_max: return scale[-1]
	pct = (value - value_min) / (value_max - value_min + 1)
	return scale[int(pct * len(scale))]

def scale_bounds(dtype, services, conf=None):
	'''Return (min, max) tuple for coloring data of specified type on services,
		or None if there's no such data there (and scale is not fixed).'''
	conf = conf or ScaleConf()
	if conf.fixed: return conf.value_min, conf.value_max
	bounds = ( t.public.Service.find_min_data(dtype, services),
		t.public.Service.find_max_data(dtype, services) )
	return None if None in bounds else bounds

def point_colors(service_stops, dtype, bounds, conf=None):
	'Color for each ServiceStop, according to data of specified type on it.'
	conf, colors = conf or ScaleConf(), list()
	for svc_stop in service_stops:
		value = svc_stop.get_value(dtype)
		if value is None or not bounds: colors.append(conf.no_data_color)
		else: colors.append(interpolate_color(value, *bounds))
	return colors

def segment_colors(service, dtype, bounds, conf=None):
	'''Color for each WayPoint on the service path,
			to draw line from that waypoint to the next one with.
		Only segment-type data gets colored, from the last stop at or before waypoint.'''
	conf, waypoints = conf or ScaleConf(), service.service_path()
	if dtype.kind is not t.data.DataKind.segment: return [conf.path_color] * len(waypoints)
	stop_colors = dict(zip( service.stops,
		point_colors(service.service_stops, dtype, bounds, conf) ))
	colors, color = list(), conf.no_data_color
	for wp in waypoints:
		color = stop_colors.get(wp, color)
		colors.append(color)
	return colors


@contextlib.contextmanager
def dot_graph(dst, dot_opts, indent=2):
	print_fmt('digraph {{', file=dst)
	if isinstance(indent, int): indent = ' '*indent
	p = lambda tpl, *a, end='\n', **k:\
		print_fmt(indent + tpl, *a, file=dst, end=end, **k)
	p('### Defaults')
	for target, opts in (dot_opts or dict()).items():
		p('{} [ {} ]', target, ', '.join('{}={}'.format(k, v) for k, v in opts.items()))
	yield p
	print_fmt('}}', file=dst)


def dot_for_routes(routes, dst, dot_opts=None):
	'Stop graph for all route paths, with stops merged by route/station id.'
	stop_names, stop_labels, stop_edges = OrderedDict(), dict(), OrderedDict()
	for route in routes:
		for path in route.paths:
			stop_prev = None
			for n, stop in enumerate(path.stops):
				k = route.route_id, stop.station_id
				stop_names[k] = 'stop-{}-{}'.format(*k)
				stop_labels.setdefault(k, (stop.name, list()))[1].append(
					'{}:{}[{}]'.format(route.route_id, path.name, n) )
				if stop_prev: stop_edges.setdefault(stop_prev, list()).append(k)
				stop_prev = k

	with dot_graph(dst, dot_opts) as p:

		p('')
		p('### Labels')
		for k, (name, path_names) in stop_labels.items():
			label = '<b>{}</b>{}'.format(name, '<br/>- '.join([''] + sorted(set(path_names))))
			p('{} [label={}]', dot_str(stop_names[k]), dot_html(label))

		p('')
		p('### Edges')
		for k_src, edges in stop_edges.items():
			for k_dst in OrderedDict.fromkeys(edges):
				p('{} -> {}', *map(dot_str, [stop_names[k_src], stop_names[k_dst]]))


def dot_for_service(service, dtype, dst, conf=None, dot_opts=None):
	'Stops of a single service, colored according to data of specified type.'
	conf = conf or ScaleConf()
	bounds = scale_bounds(dtype, [service], conf)
	if not bounds: log.debug('No {} data on service, using no-data color: {!r}', dtype, service)
	fill = point_colors(service.service_stops, dtype, bounds, conf)
	lines = dict(zip(service.service_path(), segment_colors(service, dtype, bounds, conf)))

	with dot_graph(dst, dot_opts) as p:

		p('')
		p('### Stops')
		for svc_stop, color in zip(service.service_stops, fill):
			value = svc_stop.get_value(dtype)
			label = '<b>{}</b><br/>{}: {}'.format(
				svc_stop.stop.name, dtype, '-' if value is None else value )
			p( '{} [label={}, style=filled, fillcolor={}]',
				dot_str('stop-{}'.format(svc_stop.stop.station_id)),
				dot_html(label), dot_color(color) )

		p('')
		p('### Edges')
		for stop_src, stop_dst in zip(service.stops, service.stops[1:]):
			p( '{} -> {} [color={}]',
				*map(dot_str, [ 'stop-{}'.format(stop_src.station_id),
					'stop-{}'.format(stop_dst.station_id) ]),
				dot_color(lines[stop_src]) )
