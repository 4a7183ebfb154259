"""
Command-line tools for backpaws.

``program`` is the invoke Program behind the ``backpaws-tools`` console script.
"""

from invoke import Collection, Program

from .. import __version__
from . import tasks

namespace = Collection.from_module(tasks)

program = Program(namespace=namespace, name="backpaws-tools", binary="backpaws-tools", version=__version__)
