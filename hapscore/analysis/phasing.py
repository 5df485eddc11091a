"""
Phased haplotype comparisons between variant calls and a haploid reference.

The comparison logic is:

- Group calls into blocks based on phasing
- For each phased block:
  - Determine which set of haploid alleles to compare with the reference
  - For each position in this haploid:
    - Compare to the expected reference allele
    - If mismatched and the other allele matches the expected one, it is a phasing error
    - If mismatched and neither allele matches, it is a calling error
- Expected variants falling between phased blocks have no calls and are
  reported as discordant.
"""

import logging
from collections import Counter
from typing import Iterable, Iterator, List, Optional

from hapscore.analysis.interval_index import IntervalIndex
from hapscore.analysis.variant_analysis import get_variant_type
from hapscore.models.errors import MalformedInputError
from hapscore.models.variant import (
    ComparisonRecord, VariantRecord, VariantType,
    CONCORDANT, REF_CONCORDANT, DISCORDANT, PHASING_ERROR, NO_CALL
)

# Upper bound used to query the remainder of a chromosome
MAX_POSITION = 10 ** 10


# ## Find phased haplotypes

def _same_regions(prev_vc, vc, interval_source):
    """Both records fall in the same region of interest, or we cannot tell."""
    if interval_source is None:
        return True
    regions = [interval_source.enclosing(x.chrom, x.start, x.end) for x in (prev_vc, vc)]
    if any(r is None for r in regions):
        return True
    return regions[0] == regions[1]


def is_phased(vc: VariantRecord, prev_vc: VariantRecord, interval_source=None) -> bool:
    """
    Check if a single genotype record continues the haplotype block of the previous one:

    - the record has a single allele
    - the genotype is phased (VCF | notation)
    - the record overlaps the previous record (overlapping indels)
    """
    genotype = vc.genotype
    return (vc.chrom == prev_vc.chrom
            and _same_regions(prev_vc, vc, interval_source)
            and (len(genotype.alleles) == 1
                 or genotype.phased
                 or vc.start <= prev_vc.end))


def _check_single_sample(vc: VariantRecord):
    """Reject multi-sample records before they join a block."""
    if vc.num_samples != 1:
        raise MalformedInputError(
            f"Expected a single sample genotype, found {vc.num_samples}",
            chrom=vc.chrom, start=vc.start, record_id=vc.id
        )


def parse_phased_haplotypes(records: Iterable[VariantRecord], intervals=None) -> Iterator[List[VariantRecord]]:
    """
    Separate phased haplotypes provided in a diploid input genome.

    Splits at each phase break, lazily yielding lists of records grouped into
    haplotype blocks. Calling again on a re-iterable source restarts the scan.

    Args:
        records: Position ordered, single sample variant records
        intervals: Optional interval source bounding block continuity

    Yields:
        Lists of phase-linked variant records
    """
    block = []
    prev = None
    for vc in records:
        _check_single_sample(vc)
        if prev is not None and not is_phased(vc, prev, intervals):
            yield block
            block = []
        block.append(vc)
        prev = vc
    if block:
        yield block


# ## Compare phased variants

def highest_count(xs):
    """
    Retrieve the item with the highest count in the supplied list.
    Ties are broken by sorting the tied items and taking the first.
    """
    counts = Counter(xs)
    if not counts:
        return None
    top = max(counts.values())
    return sorted(x for x, n in counts.items() if n == top)[0]


def _allele_key(vc, allele):
    """Alleles are equal when both their bases and reference status match."""
    return (allele, allele == vc.ref_allele)


def matching_allele(vc: VariantRecord, ref_vcs: List[VariantRecord]) -> Optional[int]:
    """Determine the allele index where the call matches the haploid reference."""
    alleles = vc.alleles
    if len(alleles) == 1:
        return 0
    if not ref_vcs:
        return None
    keys = [_allele_key(vc, a) for a in alleles]
    indexes = []
    for e_vc in ref_vcs:
        expected = _allele_key(e_vc, e_vc.alleles[0])
        if expected in keys:
            indexes.append(keys.index(expected))
    return highest_count(indexes)


def _cmp_allele(i, vc):
    alleles = vc.alleles
    if i < len(alleles):
        return (vc.ref_allele, alleles[i])
    return None


def cmp_allele_to_expected(vc: Optional[VariantRecord], e_vc: Optional[VariantRecord], i: Optional[int]) -> str:
    """Compare the haploid allele of a called variant against the expected call."""
    e_allele = _cmp_allele(0, e_vc) if e_vc is not None else None
    call_hap = None
    if not (i is None or vc is None or i < 0):
        call_hap = _cmp_allele(i, vc)

    if call_hap is None:
        return DISCORDANT
    if call_hap[1] == call_hap[0] and (e_allele is None or e_allele == call_hap):
        return REF_CONCORDANT
    if e_allele is None:
        return DISCORDANT
    if e_allele == call_hap:
        return CONCORDANT
    if e_allele in [_cmp_allele(j, vc) for j in range(len(vc.alleles))]:
        return PHASING_ERROR
    return DISCORDANT


def nomatch_het_alt(vc: VariantRecord, e_vc: Optional[VariantRecord]) -> bool:
    """Determine if the call has a non-matching heterozygous alternative allele."""
    match_i = matching_allele(vc, [e_vc] if e_vc is not None else [])
    no_match = [a for j, a in enumerate(vc.alleles) if j != match_i]
    return (vc.genotype.gt_type == "HET"
            and not all(a == vc.ref_allele and a != NO_CALL for a in no_match))


def deleted_bases(vc: Optional[VariantRecord]):
    """Genomic positions removed by a deletion call."""
    if (vc is None or vc.var_type != VariantType.INDEL.value
            or len(vc.ref_allele) <= 1):
        return []
    return [(vc.chrom, pos) for pos in range(vc.start, vc.end + 1)]


def comparison_metrics(cmp_index: IntervalIndex, i: Optional[int], e_vc: VariantRecord) -> ComparisonRecord:
    """Compare an expected haploid variant to the call starting at the same position."""
    cmp_vc = next((x for x in cmp_index.overlap(e_vc.chrom, e_vc.start, e_vc.end)
                   if x.start == e_vc.start), None)
    return ComparisonRecord(
        comparison=cmp_allele_to_expected(cmp_vc, e_vc, i),
        variant_type=get_variant_type([cmp_vc, e_vc]),
        nomatch_het_alt=nomatch_het_alt(cmp_vc, e_vc) if cmp_vc is not None else False,
        start=e_vc.start if cmp_vc is None else cmp_vc.start,
        end=None if cmp_vc is None else cmp_vc.end,
        end_ref=e_vc.end,
        deleted=tuple(deleted_bases(cmp_vc)),
        vc=cmp_vc,
        ref_vc=e_vc
    )


def _in_deleted_region(deleted, vc):
    return (vc.chrom, vc.start) in deleted and (vc.chrom, vc.end) in deleted


def block_allele_index(expect_get, vcs: List[VariantRecord]) -> Optional[int]:
    """Pick the haplotype allele index used to score every call in a block."""
    indexes = [matching_allele(x, expect_get.overlap(x.chrom, x.start, x.end)) for x in vcs]
    return highest_count([i for i in indexes if i is not None and i >= 0])


def score_phased_region(expect_get, vcs: List[VariantRecord], after: Optional[int] = None) -> List[ComparisonRecord]:
    """
    Provide scoring metrics for a phased block against expected haplotype variants.

    - Fetch all expected variants in the phased block.
    - Iterate over expected variants comparing to the called variants, removing
      called variants from an interval index as they are matched and keeping
      coordinates of called deletions.
    - Add discordant variants for extra calls not in expected variants,
      avoiding calls inside deleted regions.

    Args:
        expect_get: Reference haplotype source supporting overlap queries
        vcs: Haplotype block of called variants
        after: Expected variants starting at or before this position were
            already scored with a previous block

    Returns:
        Comparison records sorted by start position
    """
    cmp_index = IntervalIndex(vcs)
    chrom = vcs[0].chrom
    cmp_allele_i = block_allele_index(expect_get, vcs)

    start = cmp_index.min_start(chrom)
    end = cmp_index.max_end(chrom)
    expected = sorted((e for e in expect_get.overlap(chrom, start, end)
                       if start <= e.start <= end and (after is None or e.start > after)),
                      key=lambda e: e.start)

    out = []
    deleted = set()
    for e_vc in expected:
        cmp = comparison_metrics(cmp_index, cmp_allele_i, e_vc)
        if cmp.vc is not None:
            cmp_index.remove(chrom, cmp.vc.start, cmp.vc.end)
        deleted.update(cmp.deleted)
        out.append(cmp)

    for vc in cmp_index.all_remaining():
        if _in_deleted_region(deleted, vc):
            continue
        out.append(ComparisonRecord(
            comparison=cmp_allele_to_expected(vc, None, cmp_allele_i),
            variant_type=get_variant_type([vc]),
            nomatch_het_alt=nomatch_het_alt(vc, None),
            start=vc.start,
            end=vc.end,
            vc=vc,
            ref_vc=None
        ))

    logging.debug(f"Scored block {chrom}:{start}-{end} with {len(vcs)} calls, "
                  f"{len(expected)} expected variants, allele index {cmp_allele_i}")
    return sorted(out, key=lambda x: x.start)


def _block_end(block):
    return max(x.end for x in block)


def _gap_expected(expect_get, chrom, after, before):
    """Expected variants on `chrom` starting strictly between two positions."""
    if before - after < 2:
        return []
    vcs = [e for e in expect_get.overlap(chrom, after + 1, before - 1)
           if after < e.start < before]
    return sorted(vcs, key=lambda e: e.start)


def _missing_call(e_vc):
    return ComparisonRecord(
        comparison=DISCORDANT,
        variant_type=get_variant_type([e_vc]),
        nomatch_het_alt=False,
        start=e_vc.start,
        end_ref=e_vc.end,
        vc=None,
        ref_vc=e_vc
    )


def get_intervene_expect(expect_get, prev_block, block) -> List[ComparisonRecord]:
    """
    Collect expected variants between two consecutive blocks, which have no calls.

    `prev_block` is None before the first block and `block` is None after the
    last one; in both cases the gap runs to the chromosome boundary.
    """
    vcs = []
    if prev_block is None and block is None:
        return []
    if prev_block is None:
        vcs = _gap_expected(expect_get, block[0].chrom, 0, block[0].start)
    elif block is None:
        vcs = _gap_expected(expect_get, prev_block[-1].chrom, _block_end(prev_block), MAX_POSITION)
    elif prev_block[-1].chrom != block[0].chrom:
        vcs = (_gap_expected(expect_get, prev_block[-1].chrom, _block_end(prev_block), MAX_POSITION)
               + _gap_expected(expect_get, block[0].chrom, 0, block[0].start))
    else:
        vcs = _gap_expected(expect_get, block[0].chrom, _block_end(prev_block), block[0].start)
    return [_missing_call(e_vc) for e_vc in vcs]


def score_phased_calls(call_records: Iterable[VariantRecord], expect_get, intervals=None) -> Iterator[List[ComparisonRecord]]:
    """
    Score called variants against expected haploid variants based on phased blocks.

    For each block, yields the expected variants in the region between the
    previous block and this one (reported as missing calls) followed by the
    standard scoring of the block. A final unit reports expected variants after
    the last block, plus those on chromosomes without any calls when the
    source can list its chromosomes.

    Args:
        call_records: Position ordered, single sample called variants
        expect_get: Reference haplotype source supporting overlap queries
        intervals: Optional interval source bounding block continuity

    Yields:
        Lists of comparison records, one list per haplotype block
    """
    prev = None
    visited = set()
    for block in parse_phased_haplotypes(call_records, intervals=intervals):
        chrom = block[0].chrom
        visited.add(chrom)
        after = None
        if prev is not None and prev[-1].chrom == chrom:
            after = _block_end(prev)
        out = get_intervene_expect(expect_get, prev, block)
        out.extend(score_phased_region(expect_get, block, after=after))
        prev = block
        yield out

    out = get_intervene_expect(expect_get, prev, None)
    if hasattr(expect_get, "chromosomes"):
        for chrom in expect_get.chromosomes():
            if chrom not in visited:
                logging.debug(f"No calls on {chrom}, reporting all expected variants as missing")
                out.extend(_missing_call(e_vc) for e_vc in _gap_expected(expect_get, chrom, 0, MAX_POSITION))
    yield out
