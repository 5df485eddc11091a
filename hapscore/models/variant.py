"""
Data models for variant records and haplotype comparison results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum

from hapscore.models.errors import MalformedInputError


class VariantType(Enum):
    """Enumeration of VCF variant types."""
    NO_VARIATION = "NO_VARIATION"
    SNP = "SNP"
    MNP = "MNP"
    INDEL = "INDEL"
    SYMBOLIC = "SYMBOLIC"
    MIXED = "MIXED"


# Comparison categories
CONCORDANT = "concordant"
REF_CONCORDANT = "ref-concordant"
DISCORDANT = "discordant"
DISCORDANT_MISSING = "discordant-missing"
PHASING_ERROR = "phasing-error"

NO_CALL = "."


@dataclass
class Genotype:
    """Called alleles for one sample at one variant position."""
    sample_name: str
    alleles: List[str]
    phased: bool = False
    gt_type: str = "NO_CALL"
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VariantRecord:
    """Represents a single VCF variant record."""
    chrom: str
    start: int
    end: int
    ref_allele: str
    alt_alleles: List[str] = field(default_factory=list)
    var_type: str = VariantType.NO_VARIATION.value
    id: Optional[str] = None
    genotypes: List[Genotype] = field(default_factory=list)
    raw: Any = field(default=None, repr=False, compare=False)

    @property
    def num_samples(self) -> int:
        return len(self.genotypes)

    @property
    def genotype(self) -> Genotype:
        """The single sample genotype; comparisons are only defined for one sample."""
        if len(self.genotypes) != 1:
            raise MalformedInputError(
                f"Expected a single sample genotype, found {len(self.genotypes)}",
                chrom=self.chrom, start=self.start, record_id=self.id
            )
        return self.genotypes[0]

    @property
    def alleles(self) -> List[str]:
        return self.genotype.alleles


@dataclass(frozen=True)
class ComparisonRecord:
    """Result of scoring one position against the expected haplotype."""
    comparison: str
    variant_type: str
    nomatch_het_alt: bool = False
    start: Optional[int] = None
    end: Optional[int] = None
    end_ref: Optional[int] = None
    deleted: Tuple[Tuple[str, int], ...] = ()
    vc: Optional[VariantRecord] = None
    ref_vc: Optional[VariantRecord] = None
