"""
FASTA writer producing line-wrapped files ready for indexing.

Every record is written with the same line width, which is exactly the
layout FastaIndex describes: `line_blen` equals the width used here.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union


@dataclass
class FastaRecord:
    """
    A named sequence to be written.

    Attributes:
        name: Header text written after '>' (may include a description)
        sequence: The nucleotide/protein sequence
    """
    name: str
    sequence: str

    def __len__(self) -> int:
        return len(self.sequence)

    def to_fasta(self, line_width: int = 60) -> str:
        """Format as FASTA text with wrapped sequence lines, newline-terminated."""
        if line_width < 1:
            raise ValueError(f"line_width must be at least 1, got {line_width}")
        lines = [f">{self.name}"]
        for i in range(0, len(self.sequence), line_width):
            lines.append(self.sequence[i:i + line_width])
        return "\n".join(lines) + "\n"


def write_fasta(
    records: Union[FastaRecord, Iterable[FastaRecord]],
    filepath: Union[str, Path],
    line_width: int = 60
) -> None:
    """
    Write sequences to a FASTA file.

    Args:
        records: Single record or iterable of FastaRecord objects
        filepath: Output file path
        line_width: Number of characters per sequence line

    Example:
        >>> write_fasta([FastaRecord("chr1", "ACGT" * 100)], "ref.fa")
    """
    if isinstance(records, FastaRecord):
        records = [records]
    if line_width < 1:
        raise ValueError(f"line_width must be at least 1, got {line_width}")

    with open(filepath, "w", encoding="utf-8", newline="\n") as f:
        for record in records:
            f.write(record.to_fasta(line_width))
