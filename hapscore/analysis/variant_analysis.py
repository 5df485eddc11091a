"""
Variant analysis functions for classifying variants and genotypes.
"""

import re

from hapscore.models.variant import VariantType, NO_CALL

SYMBOLIC_ALLELE = re.compile(r"^<.*>$|[\[\]]|^\*$|^\.[ACGTN]+$|^[ACGTN]+\.$", re.IGNORECASE)


def is_symbolic(allele):
    """Check for symbolic, breakend or spanning-deletion alternate alleles."""
    return bool(SYMBOLIC_ALLELE.search(allele))


def infer_variant_type(ref, alts):
    """
    Infer the VCF variant type from reference and alternate alleles.

    Args:
        ref: Reference allele sequence
        alts: List of alternate allele sequences

    Returns:
        Variant type name (see VariantType)
    """
    alts = [a for a in alts if a and a != NO_CALL]
    if not alts:
        return VariantType.NO_VARIATION.value

    types = set()
    for alt in alts:
        if is_symbolic(alt):
            types.add(VariantType.SYMBOLIC)
        elif len(ref) == len(alt):
            types.add(VariantType.SNP if len(ref) == 1 else VariantType.MNP)
        else:
            types.add(VariantType.INDEL)

    if len(types) > 1:
        return VariantType.MIXED.value
    return types.pop().value


def infer_genotype_type(alleles, ref):
    """Classify zygosity of called alleles: HOM_REF, HET, HOM_VAR, MIXED or NO_CALL."""
    called = [a for a in alleles if a != NO_CALL]
    if not called:
        return "NO_CALL"
    if len(called) < len(alleles):
        return "MIXED"
    if len(set(called)) > 1:
        return "HET"
    return "HOM_REF" if called[0] == ref else "HOM_VAR"


def get_variant_type(vcs):
    """
    Retrieve the type of a set of variants involved in a comparison.

    - `indel`: insertions or deletions, including those of more than 1bp
    - `snp`: single nucleotide changes
    - `unknown`: other classes of variation (MNPs, structural)
    """
    def is_indel(x):
        return x.var_type in (VariantType.MIXED.value, VariantType.INDEL.value)

    def is_multi_indel(x):
        return is_indel(x) and not all(len(a) in (0, 1) for a in [x.ref_allele] + list(x.alt_alleles))

    present = [x for x in vcs if x is not None]
    if any(is_multi_indel(x) for x in present):
        return "indel"
    if any(is_indel(x) for x in present):
        return "indel"
    if all(x.var_type == VariantType.SNP.value for x in present):
        return "snp"
    return "unknown"
