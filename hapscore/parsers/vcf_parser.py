"""
Parser for VCF files, providing record streams and indexed region retrieval.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional

import cyvcf2

from hapscore.analysis.interval_index import IntervalIndex
from hapscore.analysis.variant_analysis import infer_variant_type, infer_genotype_type
from hapscore.models.variant import Genotype, VariantRecord, NO_CALL


def _format_values(variant, field, fields):
    """Per-sample values of a FORMAT field, or None when the record lacks it."""
    if field not in fields:
        return None
    return variant.format(field)


def from_variant(variant, samples: List[str]) -> VariantRecord:
    """
    Convert a cyvcf2 Variant into a VariantRecord.

    Args:
        variant: cyvcf2 Variant object
        samples: Sample names from the VCF header

    Returns:
        VariantRecord keeping the original variant for output writing
    """
    ref = variant.REF
    alts = list(variant.ALT)
    all_alleles = [ref] + alts

    genotypes = []
    if samples:
        fields = set(variant.FORMAT or [])
        depths = _format_values(variant, 'DP', fields)
        quals = _format_values(variant, 'GQ', fields)
        for i, (sample, gt) in enumerate(zip(samples, variant.genotypes)):
            indexes, phased = gt[:-1], bool(gt[-1])
            alleles = [all_alleles[j] if 0 <= j < len(all_alleles) else NO_CALL for j in indexes]
            attributes = {}
            if depths is not None and depths[i][0] >= 0:
                attributes['DP'] = int(depths[i][0])
            # Missing float values are NaN and fail the comparison
            if quals is not None and quals[i][0] >= 0:
                attributes['GQ'] = float(quals[i][0])
            genotypes.append(Genotype(
                sample_name=sample,
                alleles=alleles,
                phased=phased,
                gt_type=infer_genotype_type(alleles, ref),
                attributes=attributes
            ))

    return VariantRecord(
        chrom=variant.CHROM,
        start=variant.POS,
        end=variant.end,
        ref_allele=ref,
        alt_alleles=alts,
        var_type=infer_variant_type(ref, alts),
        id=variant.ID,
        genotypes=genotypes,
        raw=variant
    )


def get_samples(vcf_file: str) -> List[str]:
    """Retrieve sample names from a VCF header."""
    vcf = cyvcf2.VCF(vcf_file)
    try:
        return list(vcf.samples)
    finally:
        vcf.close()


@contextmanager
def get_vcf_iterator(vcf_file: str) -> Iterator[Iterator[VariantRecord]]:
    """
    Open a VCF file and provide a lazy iterator of VariantRecords.

    The underlying file handle is closed when the context exits, including
    on errors raised while consuming the records.
    """
    logging.info(f"Reading VCF file: {vcf_file}")
    vcf = cyvcf2.VCF(vcf_file)
    samples = list(vcf.samples)
    try:
        yield (from_variant(v, samples) for v in vcf)
    finally:
        vcf.close()


def _has_index(vcf_file):
    return any(os.path.exists(vcf_file + ext) for ext in ('.tbi', '.csi'))


class VcfRetriever:
    """
    Region retrieval of variants from one or more VCF files, with clean handle closing.

    Files with a tabix or CSI index are queried directly; other files are
    loaded once into an in-memory interval index.
    """

    def __init__(self, *vcf_files: Optional[str]):
        self.fnames = [f for f in vcf_files if f is not None]
        self.sources = []
        # Handles stay open until close(), since records keep their cyvcf2 variant
        self.handles = []
        for fname in self.fnames:
            vcf = cyvcf2.VCF(fname)
            self.handles.append(vcf)
            if _has_index(fname):
                self.sources.append((vcf, list(vcf.samples)))
            else:
                self.sources.append((self._load_index(vcf, fname), None))

    @staticmethod
    def _load_index(vcf, vcf_file):
        start_time = time.time()
        samples = list(vcf.samples)
        index = IntervalIndex(from_variant(v, samples) for v in vcf)
        elapsed = time.time() - start_time
        logging.info(f"Indexed {len(index)} variants from {vcf_file} in {elapsed:.2f}s")
        return index

    def overlap(self, chrom: str, start: int, end: int) -> List[VariantRecord]:
        """Variants in all files overlapping the inclusive span [start, end]."""
        out = []
        for source, samples in self.sources:
            if isinstance(source, IntervalIndex):
                out.extend(source.overlap(chrom, start, end))
            elif chrom in source.seqnames:
                region = f"{chrom}:{max(start, 1)}-{end}"
                out.extend(from_variant(v, samples) for v in source(region))
        return out

    def chromosomes(self) -> List[str]:
        chroms = []
        for source, _ in self.sources:
            names = source.chromosomes() if isinstance(source, IntervalIndex) else source.seqnames
            chroms.extend(c for c in names if c not in chroms)
        return chroms

    def close(self):
        for vcf in self.handles:
            vcf.close()
        self.handles = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def get_vcf_retriever(*vcf_files: Optional[str]) -> VcfRetriever:
    """Indexed variant retrieval for zero to multiple files."""
    return VcfRetriever(*vcf_files)
