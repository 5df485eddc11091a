"""
In-memory interval index over variant records, keyed by chromosome.
"""

from collections import defaultdict
from itertools import count

from intervaltree import IntervalTree


class IntervalIndex:
    """
    Range index of variant records used to track unmatched calls.

    Records are stored with 1-based inclusive coordinates. Internally each
    chromosome has its own IntervalTree holding half-open [start, end + 1)
    intervals. An index is meant to live for the scoring of a single
    haplotype block and is modified in place as calls are matched.
    """

    def __init__(self, records=None, start_key="start", end_key="end"):
        self.start_key = start_key
        self.end_key = end_key
        self.trees = defaultdict(IntervalTree)
        self._serial = count()
        for record in records or []:
            self.add(record)

    def add(self, record):
        start = getattr(record, self.start_key)
        end = getattr(record, self.end_key)
        self.trees[record.chrom].addi(start, end + 1, (next(self._serial), record))

    def _sorted(self, intervals):
        return [iv.data[1] for iv in sorted(intervals, key=lambda iv: (iv.begin, iv.end, iv.data[0]))]

    def overlap(self, chrom, start, end):
        """Records on `chrom` overlapping the inclusive span [start, end]."""
        tree = self.trees.get(chrom)
        if tree is None or end < start:
            return []
        return self._sorted(tree.overlap(start, end + 1))

    def remove(self, chrom, start, end):
        """Remove records whose span is exactly [start, end]; returns the removed records."""
        tree = self.trees.get(chrom)
        if tree is None or start is None or end is None:
            return []
        matches = [iv for iv in tree.overlap(start, end + 1)
                   if iv.begin == start and iv.end == end + 1]
        for iv in matches:
            tree.remove(iv)
        return self._sorted(matches)

    def all_remaining(self):
        """All records still in the index, ordered by chromosome insertion then position."""
        remaining = []
        for tree in self.trees.values():
            remaining.extend(self._sorted(tree))
        return remaining

    def chromosomes(self):
        return [chrom for chrom, tree in self.trees.items() if tree]

    def min_start(self, chrom):
        tree = self.trees.get(chrom)
        return tree.begin() if tree else None

    def max_end(self, chrom):
        tree = self.trees.get(chrom)
        return tree.end() - 1 if tree else None

    def __len__(self):
        return sum(len(tree) for tree in self.trees.values())
