"""
Exceptions raised by the comparison engine.
"""


class MalformedInputError(ValueError):
    """A variant record does not satisfy the single-sample comparison contract."""

    def __init__(self, message, chrom=None, start=None, record_id=None):
        location = ""
        if chrom is not None:
            location = f" ({chrom}:{start}{' ' + record_id if record_id else ''})"
        super().__init__(f"{message}{location}")
        self.chrom = chrom
        self.start = start
        self.record_id = record_id


class InconsistentModeArityError(ValueError):
    """The number of truth and call inputs does not fit the comparison approach."""

    def __init__(self, approach, n_haploid, n_calls):
        super().__init__(
            f"Approach '{approach}' cannot run with {n_haploid} haploid reference "
            f"input(s) and {n_calls} call input(s)"
        )
        self.approach = approach
        self.n_haploid = n_haploid
        self.n_calls = n_calls
