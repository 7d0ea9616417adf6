"""
GenoRef: indexed random access to reference sequence files

This package provides tools for:
- Building and reusing samtools-compatible FASTA indexes (.fai)
- Fetching whole sequences or subranges from multi-gigabyte
  FASTA/FASTQ files with a single seek
- Writing line-wrapped FASTA files

Errors are raised as subclasses of GenorefError (see genoref.exceptions).
"""

__version__ = "0.1.0"
__author__ = "GenoRef Contributors"

from genoref.io import (
    FastaIndex,
    FastaIndexEntry,
    FastaReference,
    FastaRecord,
    write_fasta,
)

from genoref.exceptions import (
    GenorefError,
    FastaIOError,
    IndexFormatError,
    SequenceNotFoundError,
    InvalidRangeError,
    AmbiguousNameError,
)

__all__ = [
    # Indexed access
    "FastaIndex",
    "FastaIndexEntry",
    "FastaReference",
    # Writing
    "FastaRecord",
    "write_fasta",
    # Errors
    "GenorefError",
    "FastaIOError",
    "IndexFormatError",
    "SequenceNotFoundError",
    "InvalidRangeError",
    "AmbiguousNameError",
]
