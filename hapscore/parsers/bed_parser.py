"""
Parser for BED region files and reference sequence dictionaries.
"""

import logging
import os
import time
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from Bio import SeqIO
from intervaltree import IntervalTree

from hapscore.models.variant import VariantRecord


def get_seq_dict(ref_file: str) -> Dict[str, int]:
    """
    Retrieve contig names and lengths for a reference genome.

    Uses the samtools `.fai` index when present, otherwise reads the FASTA file.

    Args:
        ref_file: Path to the reference FASTA file

    Returns:
        Ordered dictionary of contig name to length
    """
    seq_dict = {}
    fai_file = ref_file + '.fai'
    if os.path.exists(fai_file):
        with open(fai_file, 'r') as f:
            for line in f:
                fields = line.rstrip('\n').split('\t')
                if len(fields) >= 2:
                    seq_dict[fields[0]] = int(fields[1])
        return seq_dict

    start_time = time.time()
    for record in SeqIO.parse(ref_file, 'fasta'):
        seq_dict[record.id] = len(record.seq)
    elapsed = time.time() - start_time
    logging.info(f"Read {len(seq_dict)} contigs from {ref_file} in {elapsed:.2f}s")
    return seq_dict


def parse_bed(bed_file: str, seq_dict: Optional[Dict[str, int]] = None) -> List[Tuple[str, int, int]]:
    """
    Parse a BED file into 1-based inclusive intervals.

    Args:
        bed_file: Path to the BED file (0-based, half-open coordinates)
        seq_dict: Optional contig lengths; intervals on unknown contigs are
            dropped and interval ends are clipped to the contig length

    Returns:
        List of (chrom, start, end) tuples in file order
    """
    intervals = []
    skipped = 0
    with open(bed_file, 'r') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith(('#', 'track', 'browser')):
                continue

            fields = line.split('\t')
            if len(fields) < 3:
                fields = line.split()
            if len(fields) < 3:
                logging.warning(f"Line {line_num}: Invalid BED record, missing fields")
                continue

            chrom = fields[0]
            start = int(fields[1]) + 1
            end = int(fields[2])
            if seq_dict is not None:
                if chrom not in seq_dict:
                    skipped += 1
                    continue
                end = min(end, seq_dict[chrom])
            if end < start:
                continue
            intervals.append((chrom, start, end))

    if skipped:
        logging.warning(f"Skipped {skipped} intervals in {bed_file} on contigs missing from the reference")
    return intervals


class BedSource:
    """Overlap queries over a set of genomic intervals."""

    def __init__(self, intervals: Iterable[Tuple[str, int, int]]):
        self.trees = defaultdict(IntervalTree)
        for i, (chrom, start, end) in enumerate(intervals):
            self.trees[chrom].addi(start, end + 1, i)

    def overlap(self, chrom: str, start: int, end: int) -> List[Tuple[str, int, int]]:
        """Intervals overlapping [start, end], ordered as listed in the file."""
        tree = self.trees.get(chrom)
        if tree is None:
            return []
        hits = sorted(tree.overlap(start, end + 1), key=lambda iv: iv.data)
        return [(chrom, iv.begin, iv.end - 1) for iv in hits]

    def enclosing(self, chrom: str, start: int, end: int) -> Optional[Tuple[str, int, int]]:
        """The first interval overlapping a record, if any."""
        hits = self.overlap(chrom, start, end)
        return hits[0] if hits else None

    def contains(self, chrom: str, start: int, end: int) -> bool:
        return bool(self.overlap(chrom, start, end))


def get_bed_source(bed_file: Optional[str], ref_file: Optional[str] = None) -> Optional[BedSource]:
    """Load a BED file into a queryable interval source."""
    if bed_file is None:
        return None
    seq_dict = get_seq_dict(ref_file) if ref_file else None
    return BedSource(parse_bed(bed_file, seq_dict))


class RegionRestrictedSource:
    """Expected variant source limited to variants overlapping regions of interest."""

    def __init__(self, source, regions: BedSource):
        self.source = source
        self.regions = regions

    def overlap(self, chrom: str, start: int, end: int) -> List[VariantRecord]:
        return [x for x in self.source.overlap(chrom, start, end)
                if self.regions.contains(x.chrom, x.start, x.end)]

    def chromosomes(self) -> List[str]:
        if not hasattr(self.source, 'chromosomes'):
            return []
        return [c for c in self.source.chromosomes() if c in self.regions.trees]


def restrict_to_regions(records: Iterable[VariantRecord], regions: Optional[BedSource]) -> Iterator[VariantRecord]:
    """Lazily drop records outside regions of interest."""
    for record in records:
        if regions is None or regions.contains(record.chrom, record.start, record.end):
            yield record
        else:
            logging.debug(f"Skipping {record.chrom}:{record.start} outside regions of interest")
