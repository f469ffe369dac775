import itertools as it, operator as op, functools as ft
from pathlib import Path
import unittest, tempfile, contextlib, importlib.util, io

from . import _common as c


def load_cli():
	spec = importlib.util.spec_from_file_location(
		'mass_data_cli', str(c.path_project / 'mass-data.py') )
	cli = importlib.util.module_from_spec(spec)
	spec.loader.exec_module(cli)
	return cli


class CLITests(unittest.TestCase):

	@classmethod
	def setUpClass(cls):
		cls.cli = load_cli()
		cls.tmp_dir = tempfile.TemporaryDirectory(prefix='mass.test.')
		cls.path_tmp = Path(cls.tmp_dir.name)
		cls.path_routes, cls.path_services = (
			cls.path_tmp / name for name in ['routes.csv', 'services.csv'] )
		objects = c.build_system()
		c.mass.csv_files.export_routes(cls.path_routes, objects)
		c.mass.csv_files.export_services(cls.path_services, objects)

	@classmethod
	def tearDownClass(cls): cls.tmp_dir.cleanup()

	def run_cli(self, *args, services=True, routes=None):
		opts = [str(routes or self.path_routes)]
		if services: opts.extend(['-s', str(self.path_services)])
		out = io.StringIO()
		with contextlib.redirect_stdout(out): self.cli.main(opts + list(args))
		return out.getvalue().splitlines()

	def test_routes(self):
		lines = self.run_cli('routes')
		self.assertEqual(lines[0], 'Route 10 [Blue Line]:')
		self.assertEqual(lines[1], '  path 1 [Northbound]: waypoints=6, stops=4, services=2')
		self.assertEqual(lines[-1], '  path 1 [Eastbound]: waypoints=3, stops=3, services=1')
		self.assertEqual(self.run_cli(services=False)[1:], list(
			line.replace('services=2', 'services=0').replace('services=1', 'services=0')
			for line in lines[1:] ))

	def test_stats(self):
		self.assertEqual(
			self.run_cli('stats', 'boardings'),
			['Services: 4', 'Boardings min: 1', 'Boardings max: 20'] )
		self.assertEqual(
			self.run_cli('stats', 'load', '-r', '10:1'),
			['Services: 2', 'Load min: 2', 'Load max: 11'] )
		self.assertEqual(
			self.run_cli('stats', 'Load', '-r', '10', '-d', 'WK', '-t', 'BS'),
			['Services: 2', 'Load min: 3', 'Load max: 7'] )
		self.assertEqual(
			self.run_cli('stats', 'alightings', '-d', 'SU', '-t', 'BS'),
			['Services: 0', 'Alightings min: -', 'Alightings max: -'] )

	def test_usage_errors(self):
		with contextlib.redirect_stderr(io.StringIO()):
			for args in [
					('stats', 'riders'),
					('stats', 'load', '-d', 'WK'),
					('stats', 'load', '-r', '30'),
					('stats', 'load', '-r', 'abc'),
					('stats', 'load', '-r', '10:x'),
					('stats', 'load', '-r', '10:5'),
					('stats', 'load', '-d', 'XX', '-t', 'BS'),
					('dot-service', '10', '1', '5', 'load', str(self.path_tmp / 'x.dot')),
					('--csv-conf', '{no_such_option: 1}', 'routes') ]:
				with self.assertRaises(SystemExit, msg=args): self.run_cli(*args)
		self.assertFalse((self.path_tmp / 'x.dot').exists())

	def test_invalid_route_message(self):
		err = io.StringIO()
		with contextlib.redirect_stderr(err), self.assertRaises(SystemExit):
			self.run_cli('stats', 'load', '-r', 'abc')
		self.assertIn("Invalid route[:path]: 'abc'", err.getvalue())

	def test_export(self):
		path_routes, path_services = (
			self.path_tmp / name for name in ['routes-export.csv', 'services-export.csv'] )
		self.run_cli('export-routes', str(path_routes))
		self.run_cli('export-services', str(path_services))
		self.assertEqual(path_routes.read_bytes(), self.path_routes.read_bytes())
		self.assertEqual(path_services.read_bytes(), self.path_services.read_bytes())

	def test_csv_conf(self):
		path_src, path_dst = (
			self.path_tmp / name for name in ['routes-sc.csv', 'routes-sc-export.csv'] )
		c.mass.csv_files.export_routes(
			path_src, c.build_system(), c.mass.csv_files.CSVConf(delimiter=';') )
		self.run_cli( '--csv-conf', '{delimiter: ";"}',
			'export-routes', str(path_dst), routes=path_src, services=False )
		self.assertEqual(path_dst.read_bytes(), path_src.read_bytes())
		with path_dst.open(encoding='utf-8-sig') as src:
			self.assertEqual(src.readline().count(';'), 9)
		with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
			self.run_cli('routes', routes=path_src, services=False) # header mismatch

	def test_dot(self):
		path_dot = self.path_tmp / 'routes.dot'
		self.run_cli('--dot-opts', '{node: {shape: box}}', 'dot-routes', str(path_dot))
		dot = path_dot.read_text()
		self.assertTrue(dot.startswith('digraph {'))
		self.assertIn('node [ shape=box ]', dot)

		path_dot = self.path_tmp / 'service.dot'
		self.run_cli( '--scale-conf', '{fixed: true, value_min: 0, value_max: 10}',
			'dot-service', '10', '1', '1', 'load', str(path_dot) )
		self.assertEqual(path_dot.read_text().count('fillcolor='), 4)
