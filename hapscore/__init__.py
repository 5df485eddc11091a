"""
hapscore - Phased haplotype scoring of variant calls against a haploid reference.
"""

__version__ = "0.1.0"
