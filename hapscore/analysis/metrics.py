"""
Summary metrics for phased haplotype comparisons.
"""

import logging
import os
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

import numpy as np

from hapscore.models.variant import (
    ComparisonRecord, CONCORDANT, REF_CONCORDANT, DISCORDANT, PHASING_ERROR
)
from hapscore.parsers.bed_parser import get_seq_dict, parse_bed

# Accuracy penalty per error, by variant type
ERROR_PENALTIES = {'snp': 1, 'indel': 2}


def count_bases(intervals) -> int:
    """Total size of 1-based inclusive intervals, counting overlaps repeatedly."""
    if not intervals:
        return 0
    spans = np.array([(start, end) for _, start, end in intervals], dtype=np.int64)
    return int(np.sum(spans[:, 1] - spans[:, 0] + 1))


def merge_intervals(intervals) -> Dict[str, np.ndarray]:
    """
    Merge overlapping and adjacent intervals per chromosome.

    Returns:
        Dictionary of chromosome to an (n, 2) array of sorted, disjoint
        1-based inclusive intervals
    """
    by_chrom = defaultdict(list)
    for chrom, start, end in intervals:
        by_chrom[chrom].append((start, end))

    merged = {}
    for chrom, spans in by_chrom.items():
        arr = np.array(sorted(spans), dtype=np.int64)
        running_end = np.maximum.accumulate(arr[:, 1])
        breaks = np.concatenate(([True], arr[1:, 0] > running_end[:-1] + 1))
        group_starts = np.flatnonzero(breaks)
        merged[chrom] = np.column_stack((arr[group_starts, 0],
                                         np.maximum.reduceat(arr[:, 1], group_starts)))
    return merged


def intersection_size(intervals1, intervals2) -> int:
    """Number of bases covered by both interval sets."""
    merged1 = merge_intervals(intervals1)
    merged2 = merge_intervals(intervals2)
    size = 0
    for chrom, a in merged1.items():
        b = merged2.get(chrom)
        if b is None:
            continue
        i = j = 0
        while i < len(a) and j < len(b):
            lo = max(a[i, 0], b[j, 0])
            hi = min(a[i, 1], b[j, 1])
            if lo <= hi:
                size += int(hi - lo + 1)
            if a[i, 1] < b[j, 1]:
                i += 1
            else:
                j += 1
    return size


def count_comparison_bases(total_bed: Optional[str], call_bed: Optional[str], ref_file: Optional[str]) -> Dict:
    """
    Provide counts for comparison: entire region plus user specified regions.

    Args:
        total_bed: BED file with all regions available for comparison
        call_bed: BED file with regions compared for the calls, or None
        ref_file: Reference FASTA used to validate contigs

    Returns:
        Dictionary with percent, compared and total base counts
    """
    if total_bed is None:
        return {'percent': 0.0, 'compared': 0, 'total': 0}

    seq_dict = get_seq_dict(ref_file) if ref_file else None
    total_intervals = parse_bed(total_bed, seq_dict)
    total = count_bases(total_intervals)
    if call_bed is None or os.path.abspath(call_bed) == os.path.abspath(total_bed):
        compared = total
    else:
        compared = intersection_size(total_intervals, parse_bed(call_bed, seq_dict))

    percent = 100.0 * compared / total if total else 0.0
    return {'percent': percent, 'compared': compared, 'total': total}


def blank_count_dict():
    return {'snp': 0, 'indel': 0}


def get_phasing_metrics(vc_info: Iterable[List[ComparisonRecord]], exp_interval_file: Optional[str],
                        call_interval_file: Optional[str], ref_file: Optional[str]) -> Dict:
    """
    Collect summary metrics for concordant/discordant and phasing calls.

    Args:
        vc_info: Per-block comparison lists as produced by score_phased_calls,
            ending with the trailing unit for expected variants after the last block
        exp_interval_file: BED file of regions available for comparison
        call_interval_file: BED file of regions compared for the calls
        ref_file: Reference FASTA

    Returns:
        Dictionary of counts by comparison category and variant type
    """
    blocks = list(vc_info)
    records = [x for block in blocks for x in block]

    metrics = {
        'haplotype_blocks': max(len(blocks) - 1, 0),
        'total_bases': count_comparison_bases(exp_interval_file, call_interval_file, ref_file),
        'nonmatch_het_alt': sum(1 for x in records
                                if x.comparison in (CONCORDANT, REF_CONCORDANT) and x.nomatch_het_alt),
        CONCORDANT: blank_count_dict(),
        REF_CONCORDANT: blank_count_dict(),
        DISCORDANT: blank_count_dict(),
        PHASING_ERROR: blank_count_dict(),
    }
    for x in records:
        counts = metrics.setdefault(x.comparison, blank_count_dict())
        counts[x.variant_type] = counts.get(x.variant_type, 0) + 1

    logging.info(f"Summarized {len(records)} comparisons in {metrics['haplotype_blocks']} haplotype blocks")
    return metrics


def calc_accuracy(metrics: Dict, error_items: Iterable[str]) -> float:
    """
    Calculate an overall accuracy score from summary metrics.

    Errors are weighted by variant type: 1 for SNPs and 2 for indels.
    The score is 100 * (compared bases - weighted errors) / compared bases.
    """
    error_score = sum(metrics.get(item, {}).get(var_type, 0) * penalty
                      for item in error_items
                      for var_type, penalty in ERROR_PENALTIES.items())
    total_bases = metrics.get('total_bases', {}).get('compared', 1)
    if not total_bases:
        logging.warning("No compared bases available, reporting zero accuracy")
        return 0.0
    return float(100.0 * (total_bases - error_score) / total_bases)
