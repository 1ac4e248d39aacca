"""
Pipeline Package

This package orchestrates a single derivation, from command line
arguments and the passphrase stream to the hex line on the output stream.
"""

from .driver import run_pipeline, parse_positive_int, decode_salt
from .cli import main, build_parser

__all__ = ['run_pipeline', 'parse_positive_int', 'decode_salt', 'main', 'build_parser']
