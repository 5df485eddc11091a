#!/usr/bin/env python3
"""
hapscore - Phased Haplotype Scoring Tool

Main command-line interface for comparing phased variant calls against a
haploid reference haplotype.
"""

import argparse
import sys
import os
import logging

from hapscore.analysis.comparison import Approach, compare_two_vcf_phased, group_calls_by_ploidy
from hapscore.analysis.metrics import calc_accuracy
from hapscore.models.variant import DISCORDANT, PHASING_ERROR
from hapscore.parsers.vcf_parser import get_samples
from hapscore.reporting.text_report import TextReportWriter
from hapscore.utils.logging import setup_logging

DEFAULT_ERROR_ITEMS = [DISCORDANT, PHASING_ERROR]


def _input_name(fname):
    name = os.path.basename(fname)
    for ext in ('.gz', '.vcf'):
        if name.endswith(ext):
            name = name[:-len(ext)]
    return name


def parse_named_file(value):
    """Parse a NAME=FILE argument; plain file names are named after the file."""
    if '=' in value:
        name, fname = value.split('=', 1)
        if not name or not fname:
            raise argparse.ArgumentTypeError(f"Invalid input '{value}', expected NAME=FILE")
        return name, fname
    return _input_name(value), value


def build_calls(inputs, call_intervals=None):
    """Build call input dictionaries from NAME=FILE pairs."""
    intervals = dict(call_intervals or [])
    calls = []
    for name, fname in inputs:
        if not os.path.exists(fname):
            raise FileNotFoundError(f"Input VCF file not found: {fname}")
        calls.append({'name': name, 'file': fname, 'intervals': intervals.get(name)})
    unknown = set(intervals) - {c['name'] for c in calls}
    if unknown:
        raise ValueError(f"Call intervals given for unknown inputs: {', '.join(sorted(unknown))}")
    return calls


def main(args=None):
    """Main function to run a phased haplotype comparison."""
    parser = argparse.ArgumentParser(
        description='Score phased variant calls against a haploid reference haplotype.')
    parser.add_argument('inputs', nargs='+', type=parse_named_file, metavar='NAME=FILE',
                        help='Input VCF files, optionally prefixed with a name')

    exp_group = parser.add_argument_group('Experiment Options')
    exp_group.add_argument('--ref', '-r', required=True, help='Reference genome FASTA file')
    exp_group.add_argument('--approach', choices=[a.value for a in Approach], default=Approach.COMPARE.value,
                           help='Comparison approach (default: compare)')
    exp_group.add_argument('--sample', help='Sample name (default: first sample of the first input)')
    exp_group.add_argument('--intervals', help='BED file of regions available for comparison')
    exp_group.add_argument('--call-intervals', action='append', type=parse_named_file, metavar='NAME=BED',
                           help='BED file of regions compared for one input (repeatable)')
    exp_group.add_argument('--error-items', nargs='+', default=DEFAULT_ERROR_ITEMS,
                           help='Categories counted as errors in the accuracy score')

    output_group = parser.add_argument_group('Output Options')
    output_group.add_argument('--out-dir', '-o', help='Directory for per-category VCF files '
                                                     '(default: next to the input)')
    output_group.add_argument('--summary', help='Summary report file (default: stdout)')
    output_group.add_argument('--format', '-f', choices=['text', 'rdf'], default='text',
                              help='Summary report format (default: text)')
    output_group.add_argument('--rdf-format', choices=['turtle', 'n3', 'xml', 'json-ld', 'ntriples'],
                              default='turtle', help='RDF serialization format (default: turtle)')
    output_group.add_argument('--base-uri', default='http://example.org/genomics/',
                              help='Base URI for RDF output')

    debug_group = parser.add_argument_group('Debug Options')
    debug_group.add_argument('--debug', action='store_true', help='Enable debug output')
    debug_group.add_argument('--verbose', action='store_true', help='Enable verbose output without full debug')
    debug_group.add_argument('--log-file', help='Write log to this file')

    args = parser.parse_args(args)
    setup_logging(args.debug, args.log_file, args.verbose)

    try:
        calls = build_calls(args.inputs, args.call_intervals)
        sample = args.sample
        if not sample:
            samples = get_samples(calls[0]['file'])
            sample = samples[0] if samples else _input_name(calls[0]['file'])
        exp = {
            'sample': sample,
            'ref': args.ref,
            'intervals': args.intervals,
            'approach': args.approach,
        }
        logging.info(f"Comparing {len(calls)} inputs for sample {sample}")

        phased_calls = group_calls_by_ploidy(calls)
        result = compare_two_vcf_phased(phased_calls, exp, args.out_dir)

        accuracy = None
        if result.get('metrics'):
            accuracy = calc_accuracy(result['metrics'], args.error_items)
            logging.info(f"Accuracy: {accuracy:.2f}")

        if args.format == 'rdf':
            from hapscore.reporting.rdf_report import create_rdf_summary_report, output_rdf_report
            graph = create_rdf_summary_report(result, accuracy, base_uri=args.base_uri)
            output_rdf_report(graph, args.summary, args.rdf_format)
        else:
            TextReportWriter(args.summary).write_report(result, accuracy)

        return 0

    except Exception as e:
        logging.error(f"Error during phased comparison: {e}")
        if args.debug:
            import traceback
            logging.error(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
