"""
Random access to sequences in an indexed FASTA file.

FastaReference opens a FASTA (or FASTQ) file together with its .fai
index, building and saving the index on first use, and then fetches whole
sequences or subranges with one seek and one read each.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from genoref.exceptions import (
    AmbiguousNameError,
    FastaIOError,
    InvalidRangeError,
    SequenceNotFoundError,
)
from genoref.io.index import (
    INDEX_EXTENSION,
    LINE_TERMINATOR,
    SEQUENCE_ENCODING,
    FastaIndex,
    FastaIndexEntry,
)

logger = logging.getLogger(__name__)

_NEWLINE = LINE_TERMINATOR[0]
_NAME_SEPARATOR = re.compile(r"[\t ]")


def _strip_terminators(raw: bytes) -> str:
    """Drop line terminators from a raw read and decode the rest."""
    buf = np.frombuffer(raw, dtype=np.uint8)
    return buf[buf != _NEWLINE].tobytes().decode(SEQUENCE_ENCODING)


class FastaReference:
    """
    An open FASTA file with its index.

    The index is read from `<path>.fai` when that file exists. Otherwise
    the FASTA file is scanned and the index is written there, so later
    opens skip the scan. An existing index is trusted as is: it is not
    checked against the FASTA file's modification time.

    A reference holds one file handle and is not safe to share between
    threads without external locking around each fetch.

    Args:
        path: Path to the FASTA/FASTQ file
        index_path: Where to read/write the index (default: path + ".fai")

    Raises:
        FastaIOError: If the FASTA file (or the index) cannot be opened
        IndexFormatError: If an existing index file is malformed

    Example:
        >>> with FastaReference("genome.fa") as ref:
        ...     ref.get_subsequence("chr1", 10000, 50)
    """

    def __init__(
        self,
        path: Union[str, Path],
        index_path: Optional[Union[str, Path]] = None
    ):
        self.path = Path(path)
        if index_path is None:
            index_path = Path(f"{self.path}{INDEX_EXTENSION}")
        self.index_path = Path(index_path)

        try:
            self._file = open(self.path, "rb")
        except OSError as exc:
            logger.error("could not open reference file %s", self.path)
            raise FastaIOError(self.path, "could not open reference file") from exc

        try:
            self._index = self._open_index()
        except Exception:
            self._file.close()
            raise

    @staticmethod
    def index_file_extension() -> str:
        """Suffix appended to the FASTA path to locate its index."""
        return INDEX_EXTENSION

    def _open_index(self) -> FastaIndex:
        if self.index_path.exists():
            return FastaIndex.load(self.index_path)

        logger.info("index file %s not found, generating...", self.index_path)
        index = FastaIndex.build(self.path)
        index.write(self.index_path)
        return index

    @property
    def index(self) -> FastaIndex:
        return self._index

    @property
    def closed(self) -> bool:
        return self._file.closed

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "FastaReference":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"FastaReference('{self.path}', {len(self)} sequences)"

    def names(self) -> List[str]:
        """Sequence names in file order."""
        return self._index.names()

    def sequence_length(self, name: str) -> int:
        """Number of bases in a sequence."""
        return self._index.entry(name).length

    def _read(self, entry: FastaIndexEntry, start: int, length: int) -> str:
        """
        Read `length` bases starting at base `start` of an entry.

        The bytes covering the window are located arithmetically from the
        line width, so the read costs one seek however far `start` is
        into the sequence.
        """
        newlines_before = (start - 1) // entry.line_blen if start > 0 else 0
        newlines_by_end = (start + length - 1) // entry.line_blen
        newlines_inside = newlines_by_end - newlines_before

        self._file.seek(entry.offset + newlines_before + start)
        raw = self._file.read(length + newlines_inside)
        return _strip_terminators(raw)

    def get_sequence(self, name: str) -> str:
        """
        Fetch a whole sequence, without line breaks.

        Args:
            name: Full sequence name as stored in the index

        Returns:
            String of exactly `entry.length` characters

        Raises:
            SequenceNotFoundError: If the name is not in the index
        """
        entry = self._index.entry(name)
        if entry.length == 0:
            return ""

        chunks = [self._read(entry, 0, entry.length)]
        collected = len(chunks[0])
        # records wrapped wider after their first line need more lines
        while collected < entry.length:
            line = self._file.readline()
            if not line:
                break
            chunk = _strip_terminators(line)
            chunks.append(chunk)
            collected += len(chunk)
        return "".join(chunks)[:entry.length]

    def get_subsequence(self, name: str, start: int, length: int) -> str:
        """
        Fetch `length` bases of a sequence starting at 0-based `start`.

        A window running past the end of the sequence is cut short at the
        end; a window starting at or after the end gives "".

        Args:
            name: Full sequence name as stored in the index
            start: 0-based position of the first base
            length: Number of bases (at least 1)

        Returns:
            The bases, without line breaks

        Raises:
            SequenceNotFoundError: If the name is not in the index
            InvalidRangeError: If start < 0 or length < 1

        Example:
            >>> ref.get_subsequence("seq1", 8, 4)
            'ACGT'
        """
        entry = self._index.entry(name)
        if start < 0 or length < 1:
            raise InvalidRangeError(
                f"cannot construct subsequence of {name!r} with negative offset "
                f"or length < 1 (start={start}, length={length})"
            )

        length = min(length, entry.length - start)
        if length <= 0:
            return ""
        return self._read(entry, start, length)

    def sequence_name_starting_with(self, prefix: str) -> str:
        """
        Find the full name of the sequence whose first word is `prefix`.

        Names are split on spaces and tabs, so "chr1" finds
        "chr1 AC:CM000663.2 LN:248956422".

        Raises:
            SequenceNotFoundError: If no name starts with this word
            AmbiguousNameError: If more than one name does
        """
        matches = [
            name for name in self._index.names()
            if _NAME_SEPARATOR.split(name, maxsplit=1)[0] == prefix
        ]
        if not matches:
            raise SequenceNotFoundError(prefix)
        if len(matches) > 1:
            logger.warning("%s is not unique in fasta index", prefix)
            raise AmbiguousNameError(prefix, matches)
        return matches[0]
