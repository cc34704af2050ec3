import pytest


class MockAlignedSegment:
    """Stand-in for pysam.AlignedSegment with only the attributes the remapper reads."""

    def __init__(self, query_name, reference_start, cigartuples, flag=0, reference_id=0, mapping_quality=60,
                 query_sequence=None, query_qualities=None, tags=None):
        self.query_name = query_name
        self.flag = flag
        self.reference_id = reference_id
        self.reference_start = reference_start
        self.mapping_quality = mapping_quality
        self.cigartuples = cigartuples
        self.query_sequence = query_sequence
        self.query_qualities = query_qualities
        self._tags = tags or []

    def get_tags(self, with_value_type=False):
        if with_value_type:
            return list(self._tags)
        return [(tag, value) for tag, value, value_type in self._tags]


@pytest.fixture
def make_segment():
    return MockAlignedSegment


SAM_HEADER = (
    '@HD\tVN:1.6\tSO:unsorted\n'
    '@SQ\tSN:plasmid\tLN:{ref_len}\n'
)


def sam_line(name, flag, pos, cigar, seq, mapq=60, tags=('NM:i:0',)):
    """Format one SAM record. `pos` is 0-based."""
    return '\t'.join(
        [name, str(flag), 'plasmid', str(pos + 1), str(mapq), cigar, '*', '0', '0', seq, 'I' * len(seq)] + list(tags)
    ) + '\n'


@pytest.fixture
def write_sam(tmp_path):
    """Write a SAM file of alignments to a duplicated reference of length 2 * ref_len."""

    def _write_sam(lines, ref_len=100, name='aligned.sam'):
        path = tmp_path / name
        with open(path, 'w') as out_file:
            out_file.write(SAM_HEADER.format(ref_len=2 * ref_len))
            out_file.writelines(lines)
        return path

    return _write_sam
