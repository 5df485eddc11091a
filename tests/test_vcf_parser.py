#!/usr/bin/env python3
"""
Tests for the VCF parser.
"""

import os
import tempfile
import unittest
from hapscore.models.errors import MalformedInputError
from hapscore.parsers import vcf_parser

# Check if pysam is available for bgzip and tabix
try:
    import pysam
    PYSAM_AVAILABLE = True
except ImportError:
    PYSAM_AVAILABLE = False

VCF_HEADER = [
    "##fileformat=VCFv4.2",
    "##contig=<ID=chr1,length=60>",
    "##contig=<ID=chr2,length=10>",
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
    '##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Read depth">',
    '##FORMAT=<ID=GQ,Number=1,Type=Integer,Description="Genotype quality">',
]


def write_vcf(path, samples, rows):
    """Write a small VCF file with the given data rows."""
    with open(path, 'w') as f:
        f.write("\n".join(VCF_HEADER) + "\n")
        f.write("\t".join(["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT"] + samples) + "\n")
        for row in rows:
            f.write("\t".join(str(x) for x in row) + "\n")


class VcfParserTests(unittest.TestCase):
    """Test cases for reading VCF records."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = self.temp_dir.name

        self.vcf_file = os.path.join(self.output_dir, "calls.vcf")
        write_vcf(self.vcf_file, ["NA12878"], [
            ("chr1", 10, "rs1", "A", "G", 50, "PASS", ".", "GT:DP", "0|1:20"),
            ("chr1", 20, ".", "ACGT", "A", 50, "PASS", ".", "GT", "1/1"),
            ("chr1", 30, ".", "C", "T,G", 50, "PASS", ".", "GT:GQ", "1|2:35"),
            ("chr2", 5, ".", "T", "C", 50, "PASS", ".", "GT", "./."),
        ])

        self.multi_file = os.path.join(self.output_dir, "multi.vcf")
        write_vcf(self.multi_file, ["S1", "S2"], [
            ("chr1", 10, ".", "A", "G", 50, "PASS", ".", "GT", "0|1", "1|1"),
        ])

    def tearDown(self):
        """Clean up after tests."""
        self.temp_dir.cleanup()

    def read_records(self, vcf_file):
        with vcf_parser.get_vcf_iterator(vcf_file) as records:
            return list(records)

    def test_get_samples(self):
        self.assertEqual(vcf_parser.get_samples(self.vcf_file), ["NA12878"])
        self.assertEqual(vcf_parser.get_samples(self.multi_file), ["S1", "S2"])

    def test_records(self):
        """Test converting VCF lines into variant records."""
        snp, deletion, multi, nocall = self.read_records(self.vcf_file)

        self.assertEqual((snp.chrom, snp.start, snp.end), ("chr1", 10, 10))
        self.assertEqual(snp.id, "rs1")
        self.assertEqual(snp.var_type, "SNP")
        self.assertEqual(snp.alleles, ["A", "G"])
        self.assertTrue(snp.genotype.phased)
        self.assertEqual(snp.genotype.gt_type, "HET")
        self.assertEqual(snp.genotype.attributes.get('DP'), 20)
        self.assertNotIn('GQ', snp.genotype.attributes)

        self.assertEqual((deletion.start, deletion.end), (20, 23))
        self.assertEqual(deletion.var_type, "INDEL")
        self.assertEqual(deletion.alleles, ["A", "A"])
        self.assertFalse(deletion.genotype.phased)
        self.assertEqual(deletion.genotype.gt_type, "HOM_VAR")
        # No DP or GQ in the record FORMAT
        self.assertEqual(deletion.genotype.attributes, {})

        self.assertEqual(multi.alt_alleles, ["T", "G"])
        self.assertEqual(multi.alleles, ["T", "G"])
        self.assertEqual(multi.genotype.attributes, {'GQ': 35.0})

        self.assertEqual(nocall.alleles, [".", "."])
        self.assertEqual(nocall.genotype.gt_type, "NO_CALL")

    def test_records_keep_original_line(self):
        with vcf_parser.get_vcf_iterator(self.vcf_file) as records:
            snp = next(records)
            self.assertTrue(str(snp.raw).startswith("chr1\t10\trs1\tA\tG"))

    def test_multi_sample_genotype(self):
        vc = self.read_records(self.multi_file)[0]
        self.assertEqual(vc.num_samples, 2)
        with self.assertRaises(MalformedInputError):
            vc.genotype

    def test_retriever_overlap(self):
        """Test region queries over an unindexed VCF."""
        with vcf_parser.get_vcf_retriever(self.vcf_file) as retriever:
            hits = retriever.overlap("chr1", 21, 25)
            self.assertEqual([x.start for x in hits], [20])
            self.assertEqual([x.start for x in retriever.overlap("chr1", 1, 100)], [10, 20, 30])
            self.assertEqual(retriever.overlap("chrX", 1, 100), [])
            self.assertEqual(retriever.chromosomes(), ["chr1", "chr2"])

    def test_retriever_multiple_files(self):
        other = os.path.join(self.output_dir, "other.vcf")
        write_vcf(other, ["NA12878"], [
            ("chr1", 40, ".", "G", "A", 50, "PASS", ".", "GT", "1"),
        ])
        with vcf_parser.get_vcf_retriever(self.vcf_file, None, other) as retriever:
            self.assertEqual([x.start for x in retriever.overlap("chr1", 25, 45)], [30, 40])

    @unittest.skipIf(not PYSAM_AVAILABLE, "pysam not available")
    def test_retriever_indexed_file(self):
        """Test region queries through a tabix index."""
        indexed = os.path.join(self.output_dir, "indexed.vcf")
        write_vcf(indexed, ["NA12878"], [
            ("chr1", 10, "rs1", "A", "G", 50, "PASS", ".", "GT:DP", "0|1:20"),
            ("chr1", 20, ".", "ACGT", "A", 50, "PASS", ".", "GT", "1/1"),
            ("chr1", 30, ".", "C", "T,G", 50, "PASS", ".", "GT:GQ", "1|2:35"),
            ("chr2", 5, ".", "T", "C", 50, "PASS", ".", "GT", "1|0"),
        ])
        indexed_gz = pysam.tabix_index(indexed, preset="vcf", force=True, keep_original=True)
        self.assertTrue(os.path.exists(indexed_gz + ".tbi"))

        with vcf_parser.get_vcf_retriever(indexed_gz) as retriever:
            self.assertNotIsInstance(retriever.sources[0][0], vcf_parser.IntervalIndex)
            hits = retriever.overlap("chr1", 21, 25)
            self.assertEqual([x.start for x in hits], [20])
            self.assertEqual(hits[0].end, 23)
            self.assertEqual([x.start for x in retriever.overlap("chr1", 1, 100)], [10, 20, 30])
            chr2 = retriever.overlap("chr2", 5, 5)
            self.assertEqual([x.alleles for x in chr2], [["C", "T"]])
            self.assertEqual(retriever.overlap("chrX", 1, 100), [])
            self.assertEqual(retriever.chromosomes(), ["chr1", "chr2"])

            # Indexed and unindexed sources combine
            other = vcf_parser.VcfRetriever(indexed_gz, self.vcf_file)
            try:
                self.assertEqual([x.start for x in other.overlap("chr1", 25, 35)], [30, 30])
            finally:
                other.close()


if __name__ == '__main__':
    unittest.main()
