#!/usr/bin/env python3
"""
Tests for the variant analysis functionality.
"""

import unittest
from hapscore.analysis import variant_analysis
from hapscore.models.variant import VariantRecord, VariantType


class VariantAnalysisTests(unittest.TestCase):
    """Test cases for variant analysis functionality."""

    def test_infer_variant_type(self):
        """Test inferring VCF variant types from alleles."""
        self.assertEqual(variant_analysis.infer_variant_type("A", ["G"]), "SNP")
        self.assertEqual(variant_analysis.infer_variant_type("AC", ["GT"]), "MNP")
        self.assertEqual(variant_analysis.infer_variant_type("ACGT", ["A"]), "INDEL")  # Deletion
        self.assertEqual(variant_analysis.infer_variant_type("A", ["ACGT"]), "INDEL")  # Insertion
        self.assertEqual(variant_analysis.infer_variant_type("A", ["G", "AT"]), "MIXED")
        self.assertEqual(variant_analysis.infer_variant_type("A", ["<DEL>"]), "SYMBOLIC")
        self.assertEqual(variant_analysis.infer_variant_type("A", []), "NO_VARIATION")
        self.assertEqual(variant_analysis.infer_variant_type("A", ["."]), "NO_VARIATION")

    def test_is_symbolic(self):
        self.assertTrue(variant_analysis.is_symbolic("<INS>"))
        self.assertTrue(variant_analysis.is_symbolic("G]17:198982]"))
        self.assertTrue(variant_analysis.is_symbolic("*"))
        self.assertFalse(variant_analysis.is_symbolic("ACGT"))

    def test_infer_genotype_type(self):
        """Test classifying zygosity of called alleles."""
        self.assertEqual(variant_analysis.infer_genotype_type(["A", "G"], "A"), "HET")
        self.assertEqual(variant_analysis.infer_genotype_type(["A", "A"], "A"), "HOM_REF")
        self.assertEqual(variant_analysis.infer_genotype_type(["G", "G"], "A"), "HOM_VAR")
        self.assertEqual(variant_analysis.infer_genotype_type(["G"], "A"), "HOM_VAR")
        self.assertEqual(variant_analysis.infer_genotype_type([".", "."], "A"), "NO_CALL")
        self.assertEqual(variant_analysis.infer_genotype_type([".", "G"], "A"), "MIXED")

    def test_get_variant_type(self):
        """Test summarizing variant types across compared records."""
        snp = VariantRecord("chr1", 10, 10, "A", ["G"], VariantType.SNP.value)
        mnp = VariantRecord("chr1", 10, 11, "AC", ["GT"], VariantType.MNP.value)
        deletion = VariantRecord("chr1", 10, 13, "ACGT", ["A"], VariantType.INDEL.value)
        mixed = VariantRecord("chr1", 10, 10, "A", ["G", "T"], VariantType.MIXED.value)

        self.assertEqual(variant_analysis.get_variant_type([snp, snp]), "snp")
        self.assertEqual(variant_analysis.get_variant_type([snp, None]), "snp")
        self.assertEqual(variant_analysis.get_variant_type([snp, deletion]), "indel")
        self.assertEqual(variant_analysis.get_variant_type([mixed]), "indel")
        self.assertEqual(variant_analysis.get_variant_type([snp, mnp]), "unknown")


if __name__ == '__main__':
    unittest.main()
