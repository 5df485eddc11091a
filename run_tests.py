#!/usr/bin/env python3
"""
Test runner for hapscore.

Runs the unittest suites in tests/, or a single test module.
"""

import os
import sys
import unittest
import argparse
import logging

from hapscore.utils.logging import setup_logging

TEST_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'tests')


def discover_and_run_tests(test_dir=None, pattern='test_*.py', verbosity=1):
    """Discover and run tests in the specified directory."""
    test_dir = test_dir or TEST_DIR
    logging.info(f"Discovering tests in {test_dir} with pattern {pattern}")
    suite = unittest.TestLoader().discover(test_dir, pattern=pattern)
    return unittest.TextTestRunner(verbosity=verbosity).run(suite)


def run_specific_test(test_path, verbosity=1):
    """Run a specific test file."""
    logging.info(f"Running test file: {test_path}")
    return discover_and_run_tests(os.path.dirname(os.path.abspath(test_path)),
                                  os.path.basename(test_path), verbosity)


def main():
    """Main function to run tests."""
    parser = argparse.ArgumentParser(description='Run tests for hapscore')
    parser.add_argument('--test-dir', help='Directory containing tests')
    parser.add_argument('--pattern', default='test_*.py', help='Pattern to match test files')
    parser.add_argument('--test-file', help='Run a specific test file')
    parser.add_argument('--verbosity', type=int, default=2, help='Verbosity level (1-3)')
    parser.add_argument('--debug', action='store_true', help='Enable debug output')
    args = parser.parse_args()

    setup_logging(debug=args.debug, verbose=not args.debug)

    if args.test_file:
        result = run_specific_test(args.test_file, verbosity=args.verbosity)
    else:
        result = discover_and_run_tests(args.test_dir, args.pattern, verbosity=args.verbosity)

    if result.wasSuccessful():
        logging.info("All tests passed!")
        return 0
    logging.error("Some tests failed.")
    return 1


if __name__ == '__main__':
    sys.exit(main())
