#!/usr/bin/env python3
"""
Tests for the text summary reports.
"""

import os
import tempfile
import unittest
from io import StringIO
from unittest.mock import patch
from hapscore.reporting import text_report


def sample_result():
    return {
        'sample': 'NA12878',
        'exp': {'approach': 'grade', 'intervals': 'regions.bed'},
        'c1': {'name': 'calls', 'file': 'calls.vcf'},
        'c2': {'name': 'ref', 'file': 'ref.vcf'},
        'c_files': {'concordant': 'out/NA12878-calls-ref-concordant.vcf'},
        'metrics': {
            'haplotype_blocks': 3,
            'total_bases': {'percent': 94.736, 'compared': 18, 'total': 19},
            'nonmatch_het_alt': 1,
            'concordant': {'snp': 5, 'indel': 1},
            'ref-concordant': {'snp': 2, 'indel': 0},
            'discordant': {'snp': 1, 'indel': 0, 'unknown': 2},
            'phasing-error': {'snp': 0, 'indel': 1},
        },
    }


class TextReportTests(unittest.TestCase):
    """Test cases for text reporting functionality."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = self.temp_dir.name

    def tearDown(self):
        """Clean up after tests."""
        self.temp_dir.cleanup()

    @patch('sys.stdout', new_callable=StringIO)
    def test_write_report_to_stdout(self, mock_stdout):
        """Test writing a grading summary."""
        text_report.TextReportWriter().write_report(sample_result(), accuracy=40.0)
        output = mock_stdout.getvalue()

        self.assertIn("# Phased Haplotype Comparison for Sample: NA12878", output)
        self.assertIn("Approach: grade", output)
        self.assertIn("calls: calls.vcf", output)
        self.assertIn("Haplotype Blocks: 3", output)
        self.assertIn("Compared Bases: 18 of 19 (94.74%)", output)
        self.assertIn("Accuracy: 40.00", output)
        self.assertIn("concordant: out/NA12878-calls-ref-concordant.vcf", output)

        rows = {line.split()[0]: line.split()[1:] for line in output.splitlines()
                if line.startswith(('concordant ', 'discordant ', 'phasing-error ', 'Category'))}
        self.assertEqual(rows['Category'], ['snp', 'indel', 'unknown'])
        self.assertEqual(rows['discordant'], ['1', '0', '2'])
        self.assertEqual(rows['phasing-error'], ['0', '1', '0'])

    def test_write_report_to_file(self):
        outfile = os.path.join(self.output_dir, "summary.txt")
        result = sample_result()
        del result['metrics']
        text_report.TextReportWriter(outfile).write_report(result)

        with open(outfile) as f:
            content = f.read()
        self.assertIn("## Output Files", content)
        self.assertNotIn("Accuracy", content)
        self.assertNotIn("Phasing Metrics", content)

    def test_base_writer_is_abstract(self):
        with self.assertRaises(NotImplementedError):
            text_report.ReportWriter().write_report({})


if __name__ == '__main__':
    unittest.main()
