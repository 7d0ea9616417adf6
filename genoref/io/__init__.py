"""
Indexed FASTA file access.

This module provides:
- FastaIndex: build, load and write samtools-style .fai indexes
- FastaReference: random access to sequences through an index
- write_fasta: write line-wrapped FASTA files
"""

from genoref.io.index import (
    FastaIndex,
    FastaIndexEntry,
    INDEX_EXTENSION,
)

from genoref.io.reference import FastaReference

from genoref.io.fasta import (
    FastaRecord,
    write_fasta,
)

__all__ = [
    "FastaIndex",
    "FastaIndexEntry",
    "INDEX_EXTENSION",
    "FastaReference",
    "FastaRecord",
    "write_fasta",
]
