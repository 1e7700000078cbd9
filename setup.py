#!/usr/bin/env python

from setuptools import setup, find_packages

setup(name="pyhumminbird",
      packages = find_packages(where='src'),
      package_dir = {'': 'src'},
      version = "0.1",
      description = "A Python interface to Humminbird fishfinder waypoint, route and track files",
      keywords = 'gps gis humminbird fishfinder',
      python_requires = '>=3.9',
      install_requires = ['rawutil', 'gpxpy', 'tabulate', 'tqdm'],
      extras_require = {'test': ['pytest']},
      entry_points = {
          'console_scripts': ['pyhumminbird=pyhumminbird.pyhumminbird:main'],
      },
    )
