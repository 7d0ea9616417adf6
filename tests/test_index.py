import pytest

from genoref import FastaIndex, FastaIndexEntry, write_fasta, FastaRecord
from genoref.exceptions import FastaIOError, IndexFormatError, SequenceNotFoundError


def test_default_entry_is_cleared():
    entry = FastaIndexEntry()

    assert entry.name == ""
    assert entry.length == 0
    assert entry.offset == -1
    assert entry.line_blen == 0
    assert entry.line_len == 0


def test_entry_renders_as_tab_separated_fields():
    entry = FastaIndexEntry("chr1", 248956422, 6000000000, 60, 61)

    assert str(entry) == "chr1\t248956422\t6000000000\t60\t61"
    assert entry.to_fai_line() == "chr1\t248956422\t6000000000\t60\t61\n"


def test_entry_parses_fai_line():
    entry = FastaIndexEntry.from_fai_line("chr2 desc\t10\t5000000000\t4\t5\n")

    assert entry == FastaIndexEntry("chr2 desc", 10, 5000000000, 4, 5)


def test_build_scenario(scenario_fasta):
    index = FastaIndex.build(scenario_fasta)

    assert index.entry("seq1") == FastaIndexEntry("seq1", 12, 6, 10, 11)
    assert index.entry("seq2") == FastaIndexEntry("seq2", 4, 26, 4, 5)
    assert index.names() == ["seq1", "seq2"]
    assert len(index) == 2
    assert "seq1" in index
    assert "seq3" not in index


def test_build_keeps_full_header_as_name(write_file):
    path = write_file("desc.fa", ">chr1 AC:CM000663.2\tLN:8\nACGT\nACGT\n")

    index = FastaIndex.build(path)

    assert index.names() == ["chr1 AC:CM000663.2\tLN:8"]


def test_build_skips_comments(write_file):
    path = write_file("comments.fa", ";a comment\n>seq1\n;another\nACG\nTA\n")

    entry = FastaIndex.build(path).entry("seq1")

    # ";a comment\n" is 11 bytes, ">seq1\n" 6, ";another\n" 9
    assert entry.offset == 26
    assert entry.length == 5
    assert entry.line_blen == 3
    assert entry.line_len == 4


def test_build_fastq_skips_quality_lines(write_file):
    path = write_file(
        "reads.fq",
        "@read1\nACGT\n+\nIIII\n@read2\nGGCCA\n+read2\n@@@@@\n",
    )

    index = FastaIndex.build(path)

    assert index.entry("read1") == FastaIndexEntry("read1", 4, 7, 4, 5)
    # quality line starting with '@' is not mistaken for a header
    assert index.entry("read2") == FastaIndexEntry("read2", 5, 26, 5, 6)
    assert len(index) == 2


def test_build_first_line_sets_width(write_file):
    path = write_file("mixed.fa", ">seq1\nACGT\nACGTACGT\nAC\n")

    entry = FastaIndex.build(path).entry("seq1")

    assert entry.length == 14
    assert entry.line_blen == 4
    assert entry.line_len == 5


def test_build_header_without_sequence(write_file):
    path = write_file("empty.fa", ">empty\n>seq1\nAC\n")

    index = FastaIndex.build(path)

    assert index.entry("empty") == FastaIndexEntry("empty", 0, 7, 0, 0)
    assert index.entry("seq1").offset == 13


def test_build_ignores_blank_lines(write_file):
    path = write_file("blank.fa", ">seq1\n\nACGT\nAC\n\n")

    entry = FastaIndex.build(path).entry("seq1")

    assert entry == FastaIndexEntry("seq1", 6, 7, 4, 5)


def test_build_without_trailing_newline(write_file):
    path = write_file("notail.fa", ">seq1\nACGT\nAC")

    assert FastaIndex.build(path).entry("seq1") == FastaIndexEntry("seq1", 6, 6, 4, 5)


def test_build_duplicate_name_last_wins(write_file):
    path = write_file("dup.fa", ">seq1\nAAAA\n>seq1\nCC\n")

    index = FastaIndex.build(path)

    assert len(index) == 1
    assert index.entry("seq1") == FastaIndexEntry("seq1", 2, 17, 2, 3)


def test_build_missing_file_raises(tmp_path):
    with pytest.raises(FastaIOError) as excinfo:
        FastaIndex.build(tmp_path / "missing.fa")

    assert isinstance(excinfo.value, OSError)


def test_entry_lookup_missing_name(scenario_fasta):
    index = FastaIndex.build(scenario_fasta)

    with pytest.raises(SequenceNotFoundError) as excinfo:
        index.entry("chrZ")

    assert isinstance(excinfo.value, KeyError)
    assert excinfo.value.name == "chrZ"


def test_write_sorts_by_offset(tmp_path):
    index = FastaIndex([
        FastaIndexEntry("b", 4, 100, 4, 5),
        FastaIndexEntry("a", 8, 6, 4, 5),
        FastaIndexEntry("c", 2, 5000000000, 2, 3),
    ])
    path = tmp_path / "out.fai"

    index.write(path)

    assert path.read_text() == (
        "a\t8\t6\t4\t5\n"
        "b\t4\t100\t4\t5\n"
        "c\t2\t5000000000\t2\t3\n"
    )


def test_round_trip(tmp_path):
    records = [
        FastaRecord("chr1 primary", "ACGT" * 37),
        FastaRecord("chr2", "N" * 61),
        FastaRecord("chrM", "GATTACA"),
    ]
    fasta = tmp_path / "ref.fa"
    write_fasta(records, fasta, line_width=60)
    built = FastaIndex.build(fasta)
    built.write(tmp_path / "ref.fa.fai")

    loaded = FastaIndex.load(tmp_path / "ref.fa.fai")

    assert loaded.entries() == built.entries()


def test_indexing_is_idempotent(tmp_path):
    fasta = tmp_path / "ref.fa"
    write_fasta([FastaRecord("x", "AC" * 50), FastaRecord("y", "T" * 7)], fasta, line_width=13)

    FastaIndex.build(fasta).write(tmp_path / "first.fai")
    FastaIndex.build(fasta).write(tmp_path / "second.fai")

    assert (tmp_path / "first.fai").read_bytes() == (tmp_path / "second.fai").read_bytes()


def test_load_wide_offsets(write_file):
    path = write_file("big.fai", "chr1\t100\t4294967396\t60\t61\n")

    assert FastaIndex.load(path).entry("chr1").offset == 4294967396


@pytest.mark.parametrize("content, line_number", [
    ("chr1\t10\t6\t10\n", 1),
    ("chr1\t10\t6\t10\t11\nchr2\t4\t23\t4\t5\textra\n", 2),
    ("chr1\t10\t6\t10\t11\n\n", 2),
    ("chr1\tten\t6\t10\t11\n", 1),
    ("s\t4\t0\t0\t0\n", 1),
])
def test_load_malformed_line(write_file, content, line_number):
    path = write_file("bad.fai", content)

    with pytest.raises(IndexFormatError) as excinfo:
        FastaIndex.load(path)

    assert excinfo.value.line_number == line_number
    assert str(path) in str(excinfo.value)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FastaIOError):
        FastaIndex.load(tmp_path / "missing.fai")


def test_write_unwritable_destination_raises(tmp_path, scenario_fasta):
    index = FastaIndex.build(scenario_fasta)

    with pytest.raises(FastaIOError):
        index.write(tmp_path / "no-such-dir" / "out.fai")


def test_zero_width_entry_accepted_when_empty(write_file):
    path = write_file("empty.fai", "empty\t0\t7\t0\t0\n")

    assert FastaIndex.load(path).entry("empty") == FastaIndexEntry("empty", 0, 7, 0, 0)


def test_round_trip_name_with_tabs(write_file, tmp_path):
    fasta = write_file("tabs.fa", ">chr10\tdesc\tLN:2\nGG\n>chr2\nTT\n")
    built = FastaIndex.build(fasta)
    built.write(tmp_path / "tabs.fa.fai")

    loaded = FastaIndex.load(tmp_path / "tabs.fa.fai")

    assert loaded.entries() == built.entries()
    assert loaded.entry("chr10\tdesc\tLN:2") == FastaIndexEntry("chr10\tdesc\tLN:2", 2, 17, 2, 3)


def test_round_trip_undecodable_header(tmp_path):
    fasta = tmp_path / "latin.fa"
    fasta.write_bytes(b">chr\xff1\nACGT\n")
    built = FastaIndex.build(fasta)
    built.write(tmp_path / "latin.fa.fai")

    loaded = FastaIndex.load(tmp_path / "latin.fa.fai")

    assert loaded.entries() == built.entries()
    assert (tmp_path / "latin.fa.fai").read_bytes() == b"chr\xff1\t4\t7\t4\t5\n"


def test_failed_write_leaves_no_index_file(tmp_path, monkeypatch):
    index = FastaIndex([
        FastaIndexEntry("a", 4, 3, 4, 5),
        FastaIndexEntry("b", 4, 11, 4, 5),
    ])
    path = tmp_path / "out.fai"
    original = FastaIndexEntry.to_fai_line
    calls = []

    def fail_on_second_line(entry):
        calls.append(entry.name)
        if len(calls) == 2:
            raise OSError(28, "No space left on device")
        return original(entry)

    monkeypatch.setattr(FastaIndexEntry, "to_fai_line", fail_on_second_line)

    with pytest.raises(FastaIOError):
        index.write(path)

    assert list(tmp_path.iterdir()) == []


def test_failed_write_keeps_previous_index_file(tmp_path, monkeypatch):
    path = tmp_path / "out.fai"
    path.write_text("old\t1\t5\t1\t2\n")

    def fail(entry):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(FastaIndexEntry, "to_fai_line", fail)

    with pytest.raises(FastaIOError):
        FastaIndex([FastaIndexEntry("a", 4, 3, 4, 5)]).write(path)

    assert path.read_text() == "old\t1\t5\t1\t2\n"
