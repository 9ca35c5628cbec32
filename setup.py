import setuptools
from setuptools import setup

PROJECT = "orientstats"
DESCRIPTION = "Clustering and Fisher statistics of orientation data"
LONG_DESCRIPTION = "k-medoid classification of structural orientation data "\
    "with Fisher spherical statistics, goodness-of-fit tests and "\
    "counting-cone density contouring"
DEPENDENCIES = [
        'numpy',
        'matplotlib',
        'scipy>=1.11',
        'astropy']


setup(
  name='orientstats',
  version='0.1.0',
  packages = ['orientstats'],
  install_requires = DEPENDENCIES,
  extras_require = {'test': ['pytest']},
  python_requires = '>=3.9',
  description = DESCRIPTION,
  long_description = LONG_DESCRIPTION)
