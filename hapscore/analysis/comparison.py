"""
Entry points for phased haploid VCF comparisons.

Two approaches are supported:

- grade: one haploid reference VCF is a fixed truth set and the other VCF
  holds contestant calls. Expected variants without any call are reported in
  a separate discordant-missing category, and summary metrics are collected.
- compare: both VCFs are treated symmetrically, reporting concordant variants
  plus discordant variants named after the input they come from.
"""

import logging
from dataclasses import replace
from enum import Enum
from itertools import islice
from typing import Dict, Iterable, Iterator, List, Optional

from hapscore.analysis.metrics import get_phasing_metrics
from hapscore.analysis.phasing import score_phased_calls
from hapscore.models.errors import InconsistentModeArityError
from hapscore.models.variant import (
    ComparisonRecord, CONCORDANT, DISCORDANT, DISCORDANT_MISSING, PHASING_ERROR
)
from hapscore.parsers.bed_parser import get_bed_source, restrict_to_regions, RegionRestrictedSource
from hapscore.parsers.vcf_parser import get_vcf_iterator, get_vcf_retriever
from hapscore.reporting.vcf_writer import write_concordance_output

MITOCHONDRIAL_CONTIGS = {"chrM", "MT", "M", "chrMT"}


class Approach(Enum):
    """Comparison approaches."""
    GRADE = "grade"
    COMPARE = "compare"


# ## Utility functions

def is_haploid(vcf_file: str, sample_size: int = 10) -> bool:
    """
    Is the provided VCF file a haploid genome (a single allele per genotype).

    Samples the first records of the file. Mitochondrial calls do not count as
    evidence for a haploid genome, so files with chrM calls in the sampled
    records are not reported as haploid.
    """
    def is_vc_haploid(vc):
        if vc.num_samples == 0 or vc.chrom in MITOCHONDRIAL_CONTIGS:
            return False
        return max(len(g.alleles) for g in vc.genotypes) == 1

    with get_vcf_iterator(vcf_file) as records:
        sampled = list(islice(records, sample_size))
    if not sampled:
        return False
    return all(is_vc_haploid(vc) for vc in sampled)


def group_calls_by_ploidy(calls: List[Dict]) -> Dict[bool, List[Dict]]:
    """Split call inputs into haploid references (True) and diploid calls (False)."""
    phased_calls = {True: [], False: []}
    for call in calls:
        haploid = is_haploid(call['file'])
        logging.info(f"Input {call['name']} ({call['file']}) is {'haploid' if haploid else 'diploid'}")
        phased_calls[haploid].append(call)
    return phased_calls


def _regions_for(call: Dict, exp: Dict):
    call_intervals = call.get('intervals') or exp.get('intervals')
    return call_intervals, get_bed_source(call_intervals, exp.get('ref'))


def _score_inputs(call_iter, expect_get, regions) -> Iterator[List[ComparisonRecord]]:
    if regions is not None:
        expect_get = RegionRestrictedSource(expect_get, regions)
    return score_phased_calls(restrict_to_regions(call_iter, regions), expect_get, intervals=regions)


# ## Grading

def convert_cmp_to_grade(cmp: ComparisonRecord) -> ComparisonRecord:
    """
    Convert a comparison into a grading category.
    Discordant comparisons where the contestant call is missing are written
    from the expected variant.
    """
    if cmp.comparison == DISCORDANT and cmp.vc is None:
        return replace(cmp, comparison=DISCORDANT_MISSING, vc=cmp.ref_vc)
    return cmp


def compare_grade(phased_calls: Dict[bool, List[Dict]], exp: Dict, out_dir: Optional[str] = None) -> Dict:
    """Grade a contestant call set against a single haploid reference."""
    refs = phased_calls.get(True, [])
    calls = phased_calls.get(False, [])
    if len(refs) != 1 or len(calls) != 1:
        raise InconsistentModeArityError(Approach.GRADE.value, len(refs), len(calls))
    ref, call = refs[0], calls[0]
    call_intervals, regions = _regions_for(call, exp)

    with get_vcf_retriever(ref['file']) as ref_get, get_vcf_iterator(call['file']) as call_iter:
        compared_calls = list(_score_inputs(call_iter, ref_get, regions))
        c_files = write_concordance_output(
            ([convert_cmp_to_grade(x) for x in block] for block in compared_calls),
            [CONCORDANT, DISCORDANT, DISCORDANT_MISSING, PHASING_ERROR],
            exp['sample'], call, ref, out_dir
        )
    return {
        'c_files': c_files,
        'metrics': get_phasing_metrics(compared_calls, exp.get('intervals'), call_intervals, exp.get('ref')),
        'c1': dict(call, intervals=call_intervals),
        'c2': ref,
        'sample': exp['sample'],
        'exp': exp,
    }


# ## Standard comparison

def convert_cmps_to_compare(cmps: Iterable[List[ComparisonRecord]], name1: str, name2: str) -> Iterator[List[ComparisonRecord]]:
    """
    Convert a stream of haploid comparisons into standard categories keyed by
    concordant and <name>-discordant.
    """
    dis_kw1, dis_kw2 = [f"{name}-discordant" for name in (name1, name2)]
    for block in cmps:
        out = []
        for x in block:
            ref_x = replace(x, vc=x.ref_vc, ref_vc=None)
            if x.comparison == CONCORDANT:
                out.append(ref_x)
            elif x.comparison in (DISCORDANT, PHASING_ERROR):
                out.append(replace(x, comparison=dis_kw2))
                out.append(replace(ref_x, comparison=dis_kw1))
        yield [x for x in out if x.vc is not None]


def compare_standard(phased_calls: Dict[bool, List[Dict]], exp: Dict, out_dir: Optional[str] = None) -> Dict:
    """Compare two call sets, at least one of which is a haploid reference."""
    haploid = phased_calls.get(True, [])
    diploid = phased_calls.get(False, [])
    if len(haploid) + len(diploid) != 2 or not haploid:
        raise InconsistentModeArityError(Approach.COMPARE.value, len(haploid), len(diploid))
    cmp1 = haploid[0]
    cmp2 = diploid[0] if diploid else haploid[1]
    to_capture = [CONCORDANT] + [f"{x['name']}-discordant" for x in (cmp1, cmp2)]
    cmp_intervals, regions = _regions_for(cmp2, exp)

    with get_vcf_retriever(cmp1['file']) as vcf1_get, get_vcf_iterator(cmp2['file']) as vcf2_iter:
        c_files = write_concordance_output(
            convert_cmps_to_compare(_score_inputs(vcf2_iter, vcf1_get, regions), cmp1['name'], cmp2['name']),
            to_capture, exp['sample'], cmp1, cmp2, out_dir
        )
    return {
        'c_files': c_files,
        'c1': cmp1,
        'c2': dict(cmp2, intervals=cmp_intervals),
        'sample': exp['sample'],
        'exp': exp,
    }


APPROACH_HANDLERS = {
    Approach.GRADE: compare_grade,
    Approach.COMPARE: compare_standard,
}


def compare_two_vcf_phased(phased_calls: Dict[bool, List[Dict]], exp: Dict, out_dir: Optional[str] = None) -> Dict:
    """
    Compare two VCF files including phasing with a haplotype reference.

    Args:
        phased_calls: Inputs grouped into haploid references (True) and calls (False)
        exp: Experiment settings: sample, ref, intervals and approach
        out_dir: Directory for per-category VCF output

    Returns:
        Dictionary with output files and, when grading, summary metrics
    """
    approach = Approach(exp.get('approach', Approach.COMPARE.value))
    logging.info(f"Running phased '{approach.value}' comparison for sample {exp.get('sample')}")
    return APPROACH_HANDLERS[approach](phased_calls, exp, out_dir)
