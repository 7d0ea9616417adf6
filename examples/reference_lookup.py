#!/usr/bin/env python3
"""
Example: Random access to a reference with GenoRef

This example writes a small wrapped FASTA file, opens it (which builds
and saves the .fai index), and then:
- Lists the indexed sequences
- Fetches whole sequences and subranges across line breaks
- Resolves a sequence by the first word of its name
- Shows the errors raised for bad requests
"""

import logging
import sys
import tempfile
from pathlib import Path
sys.path.insert(0, '..')

from genoref import (
    FastaRecord,
    FastaReference,
    write_fasta,
    AmbiguousNameError,
    InvalidRangeError,
    SequenceNotFoundError,
)


def demo(workdir: Path):
    """Build a reference and query it."""
    print("\n" + "=" * 60)
    print("INDEXED REFERENCE ACCESS")
    print("=" * 60)

    fasta = workdir / "demo.fa"
    records = [
        FastaRecord("chr1 demo chromosome", "ACGT" * 30),
        FastaRecord("chr2 demo chromosome", "GATTACA" * 5),
        FastaRecord("chrM", "TTAGGG"),
        FastaRecord("chrUn scaffold_a", "CCCCGG"),
        FastaRecord("chrUn scaffold_b", "AAATTT"),
    ]
    write_fasta(records, fasta, line_width=10)

    with FastaReference(fasta) as ref:
        print(f"\nIndex written to {ref.index_path}")
        print(ref.index_path.read_text())

        for entry in ref.index:
            print(f"   {entry.name}: {entry.length} bp, {entry.line_blen} per line")

        name = ref.sequence_name_starting_with("chr2")
        print(f"\nchr2 resolves to {name!r}")
        print(f"   full:     {ref.get_sequence(name)}")
        print(f"   [8, 14):  {ref.get_subsequence(name, 8, 6)}")

        print("\nErrors:")
        for request in (
            lambda: ref.get_sequence("chr3"),
            lambda: ref.get_subsequence("chrM", -1, 5),
            lambda: ref.sequence_name_starting_with("chrUn"),
        ):
            try:
                request()
            except (SequenceNotFoundError, InvalidRangeError, AmbiguousNameError) as exc:
                print(f"   {type(exc).__name__}: {exc}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    with tempfile.TemporaryDirectory() as tmp:
        demo(Path(tmp))
