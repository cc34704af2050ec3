"""
Remap alignments against a duplicated circular reference to the original reference.
"""

import logging
import pysam

from plasmodlib import cigar
from plasmodlib import plasmodutil
from plasmodlib.args import get_arg


logger = logging.getLogger(__name__)

# Output format to pysam write mode
WRITE_MODE = {
    'sam': 'w',
    'bam': 'wb'
}


class RemapStats:
    """
    Counts of records seen during one pass over an alignment stream.
    """

    def __init__(self):
        self.n_read = 0
        self.n_written = 0
        self.n_dropped = 0
        self.n_wrapped = 0

    def __str__(self):
        return 'read={}, written={}, dropped={}, wrapped={}'.format(
            self.n_read, self.n_written, self.n_dropped, self.n_wrapped
        )


def build_record(record, new_start, new_ops, header=None):
    """
    Build an output alignment from a remapped input alignment.

    The query name, sequence, and qualities are copied as they are, even if the CIGAR operations were reordered when
    the alignment was wrapped. Flag, reference, mapping quality, and tags are also carried over. Mate information and
    template length are not.

    :param record: Input alignment (`pysam.AlignedSegment` or an object with the same attributes).
    :param new_start: 0-based start position on the original reference.
    :param new_ops: List of CIGAR operations on the original reference.
    :param header: Header of the output file.

    :return: A new `pysam.AlignedSegment`.
    """

    out_record = pysam.AlignedSegment(header)

    out_record.query_name = record.query_name
    out_record.flag = record.flag
    out_record.reference_id = record.reference_id
    out_record.reference_start = new_start
    out_record.mapping_quality = record.mapping_quality
    out_record.cigartuples = [(int(op), length) for op, length in new_ops] if new_ops else None

    # Setting the sequence resets qualities, set qualities second
    out_record.query_sequence = record.query_sequence
    out_record.query_qualities = record.query_qualities

    out_record.set_tags(record.get_tags(with_value_type=True))

    return out_record


def remap_records(records, ref_len, gap_op, write, make_record=None):
    """
    Remap a stream of alignments to the original reference. Alignments that are not primary are dropped. Records are
    written in the order they are read.

    :param records: Iterable of input alignments.
    :param ref_len: Length of the original (not duplicated) reference.
    :param gap_op: Operation used to fill gaps in wrapped alignments (`cigar.CigarOp.DEL` or
        `cigar.CigarOp.REF_SKIP`).
    :param write: Function called with each output record.
    :param make_record: Function called as `make_record(record, new_start, new_ops)` to build an output record.
        Defaults to `build_record` without a header.

    :return: A `RemapStats` object.

    Raises:
        CircularSpanError: If an alignment does not fit on the duplicated reference.
    """

    if make_record is None:
        make_record = build_record

    stats = RemapStats()

    for record in records:
        stats.n_read += 1

        if not plasmodutil.is_primary(record.flag):
            logger.debug('Dropping non-primary alignment: %s', plasmodutil.describe_record(record))
            stats.n_dropped += 1
            continue

        ops = cigar.to_operations(record.cigartuples)

        try:
            new_start, new_ops = cigar.split(ref_len, record.reference_start, ops, gap_op)

        except cigar.CircularSpanError as ex:
            raise cigar.CircularSpanError(
                'Cannot remap alignment {}: {}'.format(plasmodutil.describe_record(record), ex)
            ) from ex

        # Wrapping always adds a gap operation
        if len(new_ops) != len(ops):
            stats.n_wrapped += 1
            logger.debug(
                'Wrapped alignment %s: %s -> %s', record.query_name, cigar.cigar_string(ops), cigar.cigar_string(new_ops)
            )

        write(make_record(record, new_start, new_ops))
        stats.n_written += 1

    return stats


def check_header(header, ref_len):
    """
    Warn about references in a header that are not twice the length of the original reference.

    :param header: `pysam.AlignmentHeader` of the input file.
    :param ref_len: Length of the original reference.

    :return: Number of references with an unexpected length.
    """

    n_mismatch = 0

    for name, length in zip(header.references, header.lengths):
        if length != 2 * ref_len:
            logger.warning(
                'Reference %s has length %d, expected %d for a duplicated reference of length %d',
                name, length, 2 * ref_len, ref_len
            )
            n_mismatch += 1

    return n_mismatch


def halve(ref_len, bam_path, use_del=None, out_path=None, out_format=None):
    """
    Remap all primary alignments in a file to the original circular reference and write them with the same header.

    :param ref_len: Length of the original (not duplicated) reference.
    :param bam_path: SAM, BAM, or CRAM file of reads aligned to the duplicated reference.
    :param use_del: Fill gaps with deletions (D) instead of reference skips (N). Defaults to the "use_del" option.
    :param out_path: Output file name, or "-" for standard output. Defaults to the "output" option.
    :param out_format: "sam" or "bam". Defaults to the "output_format" option.

    :return: A `RemapStats` object.

    Raises:
        ValueError: If `ref_len` is not positive or `out_format` is not recognized.
        CircularSpanError: If an alignment does not fit on the duplicated reference.
        OSError: If the input cannot be read or the output cannot be written.
    """

    # Fill in command-line defaults
    use_del = get_arg('use_del', default=use_del)
    out_path = get_arg('output', default=out_path)
    out_format = get_arg('output_format', default=out_format)

    if ref_len <= 0:
        raise ValueError('Reference length must be a positive integer: {}'.format(ref_len))

    if out_format not in WRITE_MODE:
        raise ValueError('Unrecognized output format: {}'.format(out_format))

    gap_op = cigar.gap_operation(use_del)

    logger.info('Remapping %s to a circular reference of length %d (gap operation %s)', bam_path, ref_len, gap_op.name)

    with pysam.AlignmentFile(bam_path, 'r') as in_file:
        check_header(in_file.header, ref_len)

        with pysam.AlignmentFile(out_path, WRITE_MODE[out_format], template=in_file) as out_file:
            stats = remap_records(
                in_file, ref_len, gap_op, out_file.write,
                lambda record, new_start, new_ops: build_record(record, new_start, new_ops, out_file.header)
            )

    logger.info('Finished remapping %s: %s', bam_path, stats)

    return stats
