"""
FASTA index (.fai) building, loading and writing.

The index records, for every sequence in a FASTA or FASTQ file, where its
first base sits in the file and how its lines are wrapped. The on-disk
format is the samtools faidx convention: one line per sequence with five
tab-separated fields

    name  length  offset  line_blen  line_len

sorted by offset, so other tools can read the files written here and
vice versa.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, List, Optional, Union

from genoref.exceptions import FastaIOError, IndexFormatError, SequenceNotFoundError

logger = logging.getLogger(__name__)


# File format markers and encodings
INDEX_EXTENSION = ".fai"
HEADER_MARKERS = (b">", b"@")  # FASTA / FASTQ record headers
COMMENT_MARKER = b";"
QUALITY_MARKER = b"+"  # FASTQ quality block
LINE_TERMINATOR = b"\n"
NAME_ENCODING = "utf-8"
NAME_ERRORS = "surrogateescape"  # undecodable header bytes round-trip
SEQUENCE_ENCODING = "latin-1"  # one byte per character
FAI_FIELDS = 5


@dataclass(frozen=True)
class FastaIndexEntry:
    """
    Location and line geometry of one sequence in a FASTA file.

    Attributes:
        name: Full header text after the '>' or '@' marker
        length: Number of sequence characters, line breaks excluded
        offset: Byte offset of the first sequence character (-1 if unset)
        line_blen: Sequence characters per line
        line_len: Bytes per line, terminator included (line_blen + 1)
    """
    name: str = ""
    length: int = 0
    offset: int = -1
    line_blen: int = 0
    line_len: int = 0

    def __str__(self) -> str:
        return "\t".join(
            str(field) for field in
            (self.name, self.length, self.offset, self.line_blen, self.line_len)
        )

    def to_fai_line(self) -> str:
        """Format as a newline-terminated .fai line."""
        return f"{self}\n"

    @classmethod
    def from_fai_line(
        cls,
        line: str,
        path: Union[str, Path] = "<string>",
        line_number: int = 0
    ) -> "FastaIndexEntry":
        """
        Parse one line of a .fai file.

        The four numeric fields are split off the right, so a name that
        itself contains tabs is read back whole.

        Args:
            line: Line text, with or without its terminator
            path: Index file the line came from (for error messages)
            line_number: 1-based line number (for error messages)

        Raises:
            IndexFormatError: If the line is not five fields, a numeric
                field is not an integer, or a non-empty sequence has no
                line width
        """
        content = line.rstrip("\n")
        fields = content.rsplit("\t", FAI_FIELDS - 1)
        if len(fields) != FAI_FIELDS:
            raise IndexFormatError(
                path, line_number, content,
                f"expected {FAI_FIELDS} fields, found {len(fields)}"
            )

        name, length, offset, line_blen, line_len = fields
        try:
            entry = cls(
                name=name,
                length=int(length),
                offset=int(offset),
                line_blen=int(line_blen),
                line_len=int(line_len),
            )
        except ValueError as exc:
            raise IndexFormatError(path, line_number, content, str(exc)) from exc

        if entry.length > 0 and entry.line_blen < 1:
            raise IndexFormatError(
                path, line_number, content,
                f"line_blen must be at least 1 for a sequence of length {entry.length}"
            )
        return entry


def _line_length(line: bytes) -> int:
    """Length of a raw line without its terminator."""
    if line.endswith(LINE_TERMINATOR):
        return len(line) - 1
    return len(line)


def _skip_quality(lines: Iterator[bytes], expected: int) -> int:
    """
    Consume the quality lines of a FASTQ record.

    Reads at least one line, then keeps going until `expected` quality
    characters have been seen. Returns the number of bytes consumed.
    """
    consumed = 0
    seen = 0
    for quality in lines:
        line_length = _line_length(quality)
        consumed += line_length + 1
        seen += line_length
        if seen >= expected:
            break
    return consumed


class FastaIndex:
    """
    Mapping from sequence name to FastaIndexEntry.

    Build one from a sequence file with FastaIndex.build(), or read an
    existing .fai file with FastaIndex.load(). If a name occurs twice in
    the source, the later record wins.

    Example:
        >>> index = FastaIndex.build("genome.fa")
        >>> index.write("genome.fa.fai")
        >>> index.entry("chr1").length
        248956422
    """

    def __init__(self, entries: Optional[Iterable[FastaIndexEntry]] = None):
        self._entries: Dict[str, FastaIndexEntry] = {}
        for entry in entries or ():
            self._entries[entry.name] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[FastaIndexEntry]:
        return iter(self.entries())

    def __repr__(self) -> str:
        return f"FastaIndex({len(self)} sequences)"

    def entries(self) -> List[FastaIndexEntry]:
        """All entries in file order (ascending offset)."""
        return sorted(self._entries.values(), key=lambda entry: entry.offset)

    def names(self) -> List[str]:
        """Sequence names in file order."""
        return [entry.name for entry in self.entries()]

    def entry(self, name: str) -> FastaIndexEntry:
        """
        Look up the entry for a sequence.

        Raises:
            SequenceNotFoundError: If no sequence has this name
        """
        try:
            return self._entries[name]
        except KeyError:
            raise SequenceNotFoundError(name) from None

    @classmethod
    def build(cls, path: Union[str, Path]) -> "FastaIndex":
        """
        Index a FASTA or FASTQ file with a single pass over its lines.

        Lines starting with ';' are comments. Lines starting with '>' or
        '@' open a new record. A '+' line starts a FASTQ quality block,
        which is skipped. Every other non-blank line is sequence data.
        A record's line width is taken from its first sequence line.

        Args:
            path: Path to the sequence file

        Returns:
            The populated index

        Raises:
            FastaIOError: If the file cannot be opened
        """
        path = Path(path)
        logger.info("indexing fasta reference %s", path)
        try:
            handle = open(path, "rb")
        except OSError as exc:
            logger.error("could not open reference file %s for indexing", path)
            raise FastaIOError(path, "could not open reference file for indexing") from exc

        index = cls()
        with handle:
            index._scan(handle)
        return index

    def _scan(self, handle: BinaryIO) -> None:
        name = ""
        length = 0
        offset = -1
        line_len = 0
        header_end = 0
        position = 0  # byte offset of the current line

        lines = iter(handle)
        for line in lines:
            line_length = _line_length(line)
            marker = line[:1]

            if line_length == 0:
                # blank line
                pass
            elif marker == COMMENT_MARKER:
                pass
            elif marker == QUALITY_MARKER:
                position += _skip_quality(lines, length)
            elif marker in HEADER_MARKERS:
                if name:
                    self._flush(name, length, offset, line_len, header_end)
                name = line[1:line_length].decode(NAME_ENCODING, NAME_ERRORS)
                length = 0
                offset = -1
                line_len = 0
                header_end = position + line_length + 1
            else:
                if offset == -1:
                    offset = position
                length += line_length
                # first sequence line fixes the width for the whole record
                if not line_len:
                    line_len = line_length + 1

            position += line_length + 1

        if name:
            self._flush(name, length, offset, line_len, header_end)

    def _flush(self, name: str, length: int, offset: int, line_len: int, header_end: int) -> None:
        if offset == -1:
            # header with no sequence lines
            offset = header_end
        self._entries[name] = FastaIndexEntry(
            name=name,
            length=length,
            offset=offset,
            line_blen=line_len - 1 if line_len else 0,
            line_len=line_len,
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> "FastaIndex":
        """
        Read a .fai index file.

        Args:
            path: Path to the index file

        Returns:
            The populated index

        Raises:
            FastaIOError: If the file cannot be opened
            IndexFormatError: If any line is not five well-typed fields
        """
        path = Path(path)
        try:
            handle = open(path, "r", encoding=NAME_ENCODING, errors=NAME_ERRORS)
        except OSError as exc:
            logger.error("could not open fasta index file %s", path)
            raise FastaIOError(path, "could not open fasta index file") from exc

        index = cls()
        with handle:
            for line_number, line in enumerate(handle, start=1):
                entry = FastaIndexEntry.from_fai_line(line, path, line_number)
                index._entries[entry.name] = entry
        return index

    def write(self, path: Union[str, Path]) -> None:
        """
        Write the index in .fai format, one entry per line by offset.

        The lines go to a temporary file beside `path`, which replaces
        `path` only once everything is written. A failed write leaves no
        index file behind.

        Raises:
            FastaIOError: If the file cannot be opened or written
        """
        path = Path(path)
        partial = path.with_name(path.name + ".tmp")
        logger.info("writing fasta index file %s", path)
        try:
            with open(partial, "w", encoding=NAME_ENCODING, errors=NAME_ERRORS, newline="\n") as f:
                for entry in self.entries():
                    f.write(entry.to_fai_line())
            os.replace(partial, path)
        except OSError as exc:
            logger.error("could not write index file %s", path)
            try:
                partial.unlink()
            except FileNotFoundError:
                pass
            raise FastaIOError(path, "could not write index file") from exc
