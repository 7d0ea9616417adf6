import pytest


SCENARIO_FASTA = ">seq1\nACGTACGTAC\nGT\n>seq2\nTTTT\n"


@pytest.fixture
def write_file(tmp_path):
    """Write text to a file under tmp_path and return its path."""
    def _write(name, content):
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return path
    return _write


@pytest.fixture
def scenario_fasta(write_file):
    return write_file("scenario.fa", SCENARIO_FASTA)
