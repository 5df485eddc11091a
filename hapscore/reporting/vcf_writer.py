"""
VCF output of comparison results, split into one file per comparison category.
"""

import logging
import os
from typing import Dict, Iterable, List, Optional

import cyvcf2

from hapscore.models.variant import ComparisonRecord, VariantRecord, NO_CALL


def get_vcf_header(vcf_file: str) -> List[str]:
    """Retrieve the header lines of a VCF file."""
    vcf = cyvcf2.VCF(vcf_file)
    try:
        return vcf.raw_header.rstrip('\n').split('\n')
    finally:
        vcf.close()


def merge_headers(header: List[str], other: List[str]) -> List[str]:
    """Add metadata lines from another header that are missing from the first."""
    present = set(header)
    extra = [line for line in other if line.startswith('##') and line not in present]
    meta = [line for line in header if line.startswith('##')]
    columns = [line for line in header if not line.startswith('##')]
    return meta + extra + columns


def format_record(vc: VariantRecord) -> str:
    """Format a VariantRecord as a VCF data line."""
    alleles = [vc.ref_allele] + list(vc.alt_alleles)
    fields = [vc.chrom, str(vc.start), vc.id or '.', vc.ref_allele,
              ','.join(vc.alt_alleles) or '.', '.', '.', '.']
    if vc.genotypes:
        fields.append('GT')
        for g in vc.genotypes:
            indexes = [str(alleles.index(a)) if a in alleles else NO_CALL for a in g.alleles]
            fields.append(('|' if g.phased else '/').join(indexes))
    return '\t'.join(fields)


def record_line(vc: VariantRecord) -> str:
    """VCF line for a record, reproducing the original input line when available."""
    if vc.raw is not None:
        return str(vc.raw).rstrip('\n')
    return format_record(vc)


class ConcordanceWriter:
    """Write variants to multiple VCF files keyed by comparison category."""

    def __init__(self, tmpl_file: str, out_files: Dict[str, str], merge_file: Optional[str] = None):
        """
        Initialize the writer.

        Args:
            tmpl_file: VCF file providing the output header
            out_files: Dictionary of category to output file path
            merge_file: Optional VCF whose header metadata is merged in
        """
        self.tmpl_file = tmpl_file
        self.out_files = out_files
        self.merge_file = merge_file
        self.handles = {}
        self.counts = {}

    def open(self):
        """Open all output files and write headers."""
        header = get_vcf_header(self.tmpl_file)
        if self.merge_file:
            header = merge_headers(header, get_vcf_header(self.merge_file))
        try:
            for category, fname in self.out_files.items():
                out = open(fname, 'w')
                self.handles[category] = out
                self.counts[category] = 0
                out.write('\n'.join(header) + '\n')
        except Exception:
            self.close()
            raise

    def write(self, category: str, vc: VariantRecord):
        self.handles[category].write(record_line(vc) + '\n')
        self.counts[category] += 1

    def close(self):
        """Close all output files."""
        for out in self.handles.values():
            out.close()
        self.handles = {}


def write_concordance_output(vc_info: Iterable[List[ComparisonRecord]], to_capture: List[str],
                             sample_name: str, base_info: Dict, other_info: Dict,
                             out_dir: Optional[str] = None) -> Dict[str, str]:
    """
    Write concordant and discordant variants to VCF output files.

    Args:
        vc_info: Per-block comparison lists
        to_capture: Comparison categories to write
        sample_name: Sample name used in output file names
        base_info: Input providing the header template ({name, file})
        other_info: Other input, merged into the header ({name, file})
        out_dir: Output directory; defaults to the directory of the base file

    Returns:
        Dictionary of category to output file path
    """
    base_dir = out_dir if out_dir else os.path.dirname(os.path.abspath(base_info['file']))
    os.makedirs(base_dir, exist_ok=True)
    out_files = {x: os.path.join(base_dir, f"{sample_name}-{base_info['name']}-{other_info['name']}-{x}.vcf")
                 for x in to_capture}

    writer = ConcordanceWriter(base_info['file'], out_files, merge_file=other_info['file'])
    try:
        writer.open()
        for block in vc_info:
            for cmp in block:
                if cmp.comparison in out_files and cmp.vc is not None:
                    writer.write(cmp.comparison, cmp.vc)
    finally:
        writer.close()

    for category, n in writer.counts.items():
        logging.info(f"Wrote {n} {category} variants to {out_files[category]}")
    return out_files
