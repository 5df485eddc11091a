"""
RDF summary reports for phased comparisons.
"""

import sys
import uuid
from datetime import datetime
from typing import Dict, Optional

from rdflib import Graph, Literal, Namespace, RDF, RDFS, URIRef, XSD


class ComparisonNamespaces:
    """Provides namespaces for comparison summaries in RDF."""

    def __init__(self, base_uri="http://example.org/genomics/"):
        self.base = Namespace(base_uri)
        self.so = Namespace("http://purl.obolibrary.org/obo/SO_")
        self.dc = Namespace("http://purl.org/dc/terms/")
        self.sio = Namespace("http://semanticscience.org/resource/")

        self.sample = Namespace(f"{base_uri}sample/")
        self.callset = Namespace(f"{base_uri}callset/")
        self.metric = Namespace(f"{base_uri}metric/")

    def bind_to_graph(self, g):
        """Bind all namespaces to a graph."""
        g.bind("rdf", RDF)
        g.bind("rdfs", RDFS)
        g.bind("xsd", XSD)
        g.bind("so", self.so)
        g.bind("dc", self.dc)
        g.bind("sio", self.sio)
        g.bind("sample", self.sample)
        g.bind("callset", self.callset)
        g.bind("metric", self.metric)
        g.bind("base", self.base)

    def get_so_term(self, variant_type):
        """Map summary variant types to Sequence Ontology terms."""
        so_mapping = {
            "snp": "0001483",      # SNV
            "indel": "1000032",    # delins
        }
        return self.so[so_mapping.get(variant_type, "0001059")]


def _safe_id(name: str) -> str:
    return str(name).replace(' ', '_').replace('/', '_')


def create_rdf_summary_report(result: Dict, accuracy: Optional[float] = None,
                              base_uri="http://example.org/genomics/") -> Graph:
    """
    Create an RDF graph summarizing a phased comparison.

    Args:
        result: Result dictionary from compare_two_vcf_phased
        accuracy: Accuracy score, when grading
        base_uri: Base URI for the RDF graph

    Returns:
        RDF graph object
    """
    g = Graph()
    ns = ComparisonNamespaces(base_uri)
    ns.bind_to_graph(g)

    report_uri = URIRef(f"{base_uri}report/{uuid.uuid4()}")
    g.add((report_uri, RDF.type, ns.base.ComparisonReport))
    g.add((report_uri, ns.dc.created, Literal(datetime.now().isoformat(), datatype=XSD.dateTime)))
    g.add((report_uri, ns.base.approach, Literal(result.get('exp', {}).get('approach', 'compare'))))

    sample_name = result.get('sample')
    if sample_name:
        sample_uri = ns.sample[_safe_id(sample_name)]
        g.add((sample_uri, RDF.type, ns.sio.Sample))
        g.add((sample_uri, RDFS.label, Literal(sample_name)))
        g.add((report_uri, ns.sio.refersTo, sample_uri))

    for key in ('c1', 'c2'):
        info = result.get(key)
        if not info:
            continue
        call_uri = ns.callset[_safe_id(info['name'])]
        g.add((call_uri, RDF.type, ns.base.CallSet))
        g.add((call_uri, RDFS.label, Literal(info['name'])))
        g.add((call_uri, ns.base.file, Literal(info['file'])))
        g.add((report_uri, ns.base.hasCallSet, call_uri))

    for category, fname in result.get('c_files', {}).items():
        out_uri = URIRef(f"{report_uri}/output/{_safe_id(category)}")
        g.add((out_uri, RDFS.label, Literal(category)))
        g.add((out_uri, ns.base.file, Literal(fname)))
        g.add((report_uri, ns.base.hasOutput, out_uri))

    metrics = result.get('metrics')
    if metrics:
        g.add((report_uri, ns.metric.haplotypeBlocks,
               Literal(metrics.get('haplotype_blocks', 0), datatype=XSD.integer)))
        g.add((report_uri, ns.metric.nonmatchHetAlt,
               Literal(metrics.get('nonmatch_het_alt', 0), datatype=XSD.integer)))
        bases = metrics.get('total_bases', {})
        g.add((report_uri, ns.metric.totalBases, Literal(bases.get('total', 0), datatype=XSD.integer)))
        g.add((report_uri, ns.metric.comparedBases, Literal(bases.get('compared', 0), datatype=XSD.integer)))

        for category, counts in metrics.items():
            if not isinstance(counts, dict) or category == 'total_bases':
                continue
            for var_type, n in counts.items():
                count_uri = URIRef(f"{report_uri}/count/{_safe_id(category)}/{_safe_id(var_type)}")
                g.add((count_uri, RDF.type, ns.metric.CategoryCount))
                g.add((count_uri, ns.metric.category, Literal(category)))
                g.add((count_uri, ns.metric.variantType, ns.get_so_term(var_type)))
                g.add((count_uri, ns.metric.variantCount, Literal(n, datatype=XSD.integer)))
                g.add((report_uri, ns.metric.hasCount, count_uri))

    if accuracy is not None:
        g.add((report_uri, ns.metric.accuracy, Literal(accuracy, datatype=XSD.double)))

    return g


def output_rdf_report(graph, output=None, format='turtle'):
    """
    Output an RDF graph in the specified format.

    Args:
        graph: RDF graph object
        output: Output file (default: stdout)
        format: RDF serialization format (default: turtle)
    """
    format_map = {
        'turtle': 'turtle',
        'ttl': 'turtle',
        'n3': 'n3',
        'xml': 'xml',
        'rdf': 'xml',
        'jsonld': 'json-ld',
        'json-ld': 'json-ld',
        'nt': 'nt',
        'ntriples': 'nt'
    }
    rdf_format = format_map.get(format.lower(), 'turtle')

    if output:
        graph.serialize(destination=output, format=rdf_format)
    else:
        output_str = graph.serialize(format=rdf_format)
        sys.stdout.write(output_str.decode('utf-8') if isinstance(output_str, bytes) else output_str)
