#!/usr/bin/env python3

import itertools as it, operator as op, functools as ft
from pathlib import Path
import os, sys

import mass


log = mass.u.get_logger('mass.cli')


def conf_update(parser, conf, opt_name, yaml_data):
	import yaml
	for k, v in (yaml.safe_load(yaml_data) or dict()).items():
		if not hasattr(conf, k):
			parser.error('Unrecognized {} option: {!r} (value: {!r})'.format(opt_name, k, v))
		setattr(conf, k, v)

def print_stats(services, dtype, dst=None):
	fmt = lambda v: '-' if v is None else v
	print('Services: {}'.format(len(services)), file=dst)
	print('{} min: {}'.format(dtype, fmt(mass.t.public.Service.find_min_data(dtype, services))), file=dst)
	print('{} max: {}'.format(dtype, fmt(mass.t.public.Service.find_max_data(dtype, services))), file=dst)


def main(args=None):
	conf_csv, conf_scale = mass.csv_files.CSVConf(), mass.vis.ScaleConf()

	import argparse
	parser = argparse.ArgumentParser(
		description='Load transit route/service data from CSV files and query/export it.')
	parser.add_argument('routes_csv',
		help='Route file with one waypoint per line, with following columns: {}.'
			.format(', '.join(mass.csv_files.RouteRow._fields)))

	group = parser.add_argument_group('Input options')
	group.add_argument('-s', '--services', metavar='path',
		help='Service file to load data from, with following columns: {}.'
				.format(', '.join(mass.csv_files.ServiceRow._fields))
			+ ' Should only refer to routes/paths/stops from the route file.')
	group.add_argument('--csv-conf', metavar='yaml-data',
		help='Override values for CSVConf as a YAML mapping.'
			' Example: {skip_bogus_lines: false, delimiter: ";"}')

	group = parser.add_argument_group('Misc/debug options')
	group.add_argument('--scale-conf', metavar='yaml-data',
		help='Override values for data color scale as a YAML mapping.'
			' Example: {fixed: true, value_min: 0, value_max: 50}')
	group.add_argument('--dot-opts', metavar='yaml-data',
		help='Options for graphviz graph/nodes/edges to use with all'
			' dot-* commands, as a YAML mappings. Example: {graph: {rankdir: LR}}')
	group.add_argument('--debug', action='store_true', help='Verbose operation mode.')

	cmds = parser.add_subparsers(title='Commands', dest='call')


	cmd = cmds.add_parser('routes',
		help='List all routes and paths with their stop/service counts.')


	cmd = cmds.add_parser('stats',
		help='Show min/max value of specified data type for matching services.')
	cmd.add_argument('data_type',
		help='Data type name, one of: {}.'.format(
			', '.join(dt.name for dt in mass.t.data.DataType)))
	cmd.add_argument('-r', '--route', action='append', metavar='route[:path]',
		help='Route id or route:path id pair to limit services to. Can be used multiple times.'
			' Default is to use all services if neither this nor --days/--time are specified.')
	cmd.add_argument('-d', '--days', metavar='code',
		help='Days code (e.g. WK, SA, SU, WE or Mo+Tu) for service period constraint.'
			' Requires --time as well.')
	cmd.add_argument('-t', '--time', metavar='code',
		help='Time period code (e.g. EA, AM, BS, PM, NI or HH:MM-HH:MM)'
			' for service period constraint. Requires --days as well.')


	cmd = cmds.add_parser('export-routes', help='Write all routes to a route file.')
	cmd.add_argument('path', help='File to write data to.')

	cmd = cmds.add_parser('export-services', help='Write all service data to a service file.')
	cmd.add_argument('path', help='File to write data to.')


	cmd = cmds.add_parser('dot-routes',
		help='Dump stop graph for all routes (in graphviz dot format) to a file.')
	cmd.add_argument('path', help='File to write graph to.')

	cmd = cmds.add_parser('dot-service',
		help='Dump stops of specified service, colored'
			' by specified data type (in graphviz dot format) to a file.')
	cmd.add_argument('route_id', type=int, help='Route id of the service.')
	cmd.add_argument('path_id', type=int, help='Route path id of the service.')
	cmd.add_argument('service_id', type=int, help='Service id.')
	cmd.add_argument('data_type', help='Data type name to color stops/lines by.')
	cmd.add_argument('path', help='File to write graph to.')


	opts = parser.parse_args(sys.argv[1:] if args is None else args)

	mass.u.logging.basicConfig(
		format='%(asctime)s :: %(name)s %(levelname)s :: %(message)s',
		datefmt='%Y-%m-%d %H:%M:%S',
		level=mass.u.logging.DEBUG if opts.debug else mass.u.logging.WARNING )

	if opts.csv_conf: conf_update(parser, conf_csv, 'csv conf', opts.csv_conf)
	if opts.scale_conf: conf_update(parser, conf_scale, 'scale conf', opts.scale_conf)
	dot_opts = dict()
	if opts.dot_opts:
		import yaml
		dot_opts = yaml.safe_load(opts.dot_opts)

	dtype = getattr(opts, 'data_type', None)
	if dtype:
		try: dtype = mass.t.data.DataType.parse(dtype)
		except ValueError: parser.error('Unknown data type: {!r}'.format(opts.data_type))

	try:
		objects = mass.init_system( opts.routes_csv,
			opts.services, conf=conf_csv, timer_func=mass.calc_timer )
	except mass.csv_files.FileFormatError as err:
		parser.error('Failed to load input data: {}'.format(err))

	if not opts.call or opts.call == 'routes':
		for route in objects.routes:
			print('Route {} [{}]:'.format(route.route_id, route.name))
			for path in route.paths:
				print( '  path {} [{}]: waypoints={}, stops={}, services={}'.format(
					path.path_id, path.name, len(path.waypoints), len(path.stops), len(path.services) ))

	elif opts.call == 'stats':
		if bool(opts.days) != bool(opts.time):
			parser.error('Both --days and --time must be specified for period constraint.')
		if not (opts.route or opts.days): services = objects.all_services()
		else:
			paths = list()
			for route_path in opts.route or list():
				try:
					route_id, _, path_id = route_path.partition(':')
					route_id, path_id = int(route_id), path_id and int(path_id)
				except ValueError: parser.error('Invalid route[:path]: {!r}'.format(route_path))
				route = objects.get_route(route_id)
				if not route: parser.error('Unknown route: {!r}'.format(route_path))
				if path_id == '': paths.extend(route.paths)
				else:
					path = route.get_route_path(path_id)
					if not path: parser.error('Unknown route path: {!r}'.format(route_path))
					paths.append(path)
			if not opts.route: paths = objects.all_route_paths()
			if opts.days:
				try:
					period = mass.t.period.Period(
						mass.csv_files.parse_days(opts.days),
						mass.csv_files.parse_time_period(opts.time) )
				except ValueError as err: parser.error('Failed to parse period: {}'.format(err))
				services = objects.services_with_constraint(paths, period)
				log.debug( 'Matched {:,} service(s) with'
					' {!r} on {:,} path(s)', len(services), period, len(paths) )
			else: services = list(it.chain.from_iterable(path.services for path in paths))
		print_stats(services, dtype)

	elif opts.call == 'export-routes':
		mass.csv_files.export_routes(opts.path, objects, conf_csv)

	elif opts.call == 'export-services':
		mass.csv_files.export_services(opts.path, objects, conf_csv)

	elif opts.call == 'dot-routes':
		with mass.u.safe_replacement(opts.path) as dst:
			mass.vis.dot_for_routes(objects.routes, dst, dot_opts=dot_opts)

	elif opts.call == 'dot-service':
		route = objects.get_route(opts.route_id)
		path = route and route.get_route_path(opts.path_id)
		svc = path and path.get_service(opts.service_id)
		if not svc:
			parser.error('Service not found: route={} path={} service={}'.format(
				opts.route_id, opts.path_id, opts.service_id ))
		with mass.u.safe_replacement(opts.path) as dst:
			mass.vis.dot_for_service(svc, dtype, dst, conf=conf_scale, dot_opts=dot_opts)

	else: parser.error('Action not implemented: {}'.format(opts.call))

if __name__ == '__main__': sys.exit(main())
