"""
Text summary reports for phased comparisons.
"""

import sys
from typing import Dict, List, Optional

from hapscore.models.variant import CONCORDANT, REF_CONCORDANT, DISCORDANT, PHASING_ERROR

SUMMARY_CATEGORIES = [CONCORDANT, REF_CONCORDANT, DISCORDANT, PHASING_ERROR]


class ReportWriter:
    """Base class for report generation."""

    def __init__(self, output=None):
        """
        Initialize the report writer.

        Args:
            output: Output file path or None for stdout
        """
        self.output = output
        self.out = None

    def open(self):
        """Open the output file."""
        self.out = open(self.output, 'w') if self.output else sys.stdout

    def close(self):
        """Close the output file if it was opened."""
        if self.out and self.out != sys.stdout:
            self.out.close()

    def write_report(self, result: Dict, accuracy: Optional[float] = None):
        """
        Write a report.

        Args:
            result: Result dictionary from compare_two_vcf_phased
            accuracy: Accuracy score, when grading
        """
        raise NotImplementedError("Subclasses must implement write_report")


def _category_rows(metrics: Dict) -> List[str]:
    categories = SUMMARY_CATEGORIES + sorted(k for k, v in metrics.items()
                                             if isinstance(v, dict) and k not in SUMMARY_CATEGORIES
                                             and k != 'total_bases')
    var_types = ['snp', 'indel']
    for category in categories:
        var_types.extend(t for t in metrics.get(category, {}) if t not in var_types)

    rows = ["Category".ljust(20) + "".join(t.rjust(10) for t in var_types)]
    for category in categories:
        counts = metrics.get(category, {})
        rows.append(category.ljust(20) + "".join(str(counts.get(t, 0)).rjust(10) for t in var_types))
    return rows


class TextReportWriter(ReportWriter):
    """Generate text summary reports."""

    def write_report(self, result: Dict, accuracy: Optional[float] = None):
        self.open()
        try:
            sample = result.get('sample')
            exp = result.get('exp', {})
            self.out.write(f"# Phased Haplotype Comparison for Sample: {sample}\n")
            self.out.write("#" + "=" * 79 + "\n\n")

            self.out.write("## Inputs\n")
            self.out.write("-" * 80 + "\n")
            self.out.write(f"Approach: {exp.get('approach', 'compare')}\n")
            for key in ('c1', 'c2'):
                info = result.get(key)
                if info:
                    self.out.write(f"{info['name']}: {info['file']}\n")
            if exp.get('intervals'):
                self.out.write(f"Intervals: {exp['intervals']}\n")
            self.out.write("\n")

            metrics = result.get('metrics')
            if metrics:
                bases = metrics.get('total_bases', {})
                self.out.write("## Phasing Metrics\n")
                self.out.write("-" * 80 + "\n")
                self.out.write(f"Haplotype Blocks: {metrics.get('haplotype_blocks', 0)}\n")
                self.out.write(f"Compared Bases: {bases.get('compared', 0)} of {bases.get('total', 0)} "
                               f"({bases.get('percent', 0.0):.2f}%)\n")
                self.out.write(f"Non-matching Het Alt: {metrics.get('nonmatch_het_alt', 0)}\n\n")
                for row in _category_rows(metrics):
                    self.out.write(row + "\n")
                self.out.write("\n")

            if accuracy is not None:
                self.out.write(f"Accuracy: {accuracy:.2f}\n\n")

            self.out.write("## Output Files\n")
            self.out.write("-" * 80 + "\n")
            for category, fname in result.get('c_files', {}).items():
                self.out.write(f"{category}: {fname}\n")
        finally:
            self.close()
