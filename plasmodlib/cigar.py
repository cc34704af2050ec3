"""
CIGAR operations and the transform that folds an alignment against a duplicated circular reference back onto the
original reference.
"""

import collections
import enum


class CigarOp(enum.IntEnum):
    """
    CIGAR operation kinds. Values are the SAM/BAM operation codes, so they compare equal to the codes pysam returns in
    `AlignedSegment.cigartuples`.
    """

    MATCH = 0      # M
    INS = 1        # I
    DEL = 2        # D
    REF_SKIP = 3   # N
    SOFT_CLIP = 4  # S
    HARD_CLIP = 5  # H
    PAD = 6        # P
    EQUAL = 7      # =
    DIFF = 8       # X


# Operations that consume reference bases
REF_CONSUMING = frozenset({CigarOp.MATCH, CigarOp.DEL, CigarOp.REF_SKIP, CigarOp.EQUAL, CigarOp.DIFF})

# Operations that do not consume reference bases
NON_REF_CONSUMING = frozenset({CigarOp.INS, CigarOp.SOFT_CLIP, CigarOp.HARD_CLIP, CigarOp.PAD})

# Operations allowed to fill the unaligned part of the reference
GAP_OPS = frozenset({CigarOp.DEL, CigarOp.REF_SKIP})

# SAM characters for each operation
CIGAR_CHARS = 'MIDNSHP=X'

if REF_CONSUMING | NON_REF_CONSUMING != set(CigarOp) or REF_CONSUMING & NON_REF_CONSUMING:
    raise RuntimeError('Every CIGAR operation must be either reference-consuming or non-reference-consuming')


class CircularSpanError(ValueError):
    """
    An alignment does not fit the duplicated reference: it starts outside the doubled reference or covers more than
    one copy of the original reference.
    """
    pass


class Operation(collections.namedtuple('Operation', ('op', 'length'))):
    """
    One CIGAR operation. Unpacks like the `(op, length)` tuples pysam uses, so a list of these can be assigned directly
    to `AlignedSegment.cigartuples`.
    """

    __slots__ = ()

    def __new__(cls, op, length):

        if length < 0:
            raise ValueError('CIGAR operation length must not be negative: {}'.format(length))

        return super().__new__(cls, CigarOp(op), int(length))

    @property
    def consumes_ref(self):
        return self.op in REF_CONSUMING

    def __str__(self):
        return '{}{}'.format(self.length, CIGAR_CHARS[self.op])


def to_operations(cigar):
    """
    Convert pysam cigar tuples (or operations) to a list of `Operation` objects.

    :param cigar: Iterable of `(op, length)` pairs. `None` (no CIGAR) is an empty list.

    :return: A list of `Operation`.
    """

    if cigar is None:
        return []

    return [Operation(op, length) for op, length in cigar]


def cigar_string(ops):
    """
    Format operations as a SAM CIGAR string ("*" if there are no operations).
    """

    ops = to_operations(ops)

    if not ops:
        return '*'

    return ''.join(str(op) for op in ops)


def ref_occupancy(ops):
    """
    Get the number of reference bases covered by a list of CIGAR operations. Insertions, clips, and padding do not
    consume reference.

    :param ops: Iterable of `Operation` or pysam `(op, length)` tuples.

    :return: Number of reference bases consumed.
    """

    return sum(length for op, length in ops if op in REF_CONSUMING)


def new_operation(template, length):
    """
    Get a new operation of the same kind as `template` with a different length.

    :param template: Operation to copy the kind from.
    :param length: Length of the new operation.

    :return: A new `Operation`.
    """

    return Operation(template[0], length)


def gap_operation(use_del):
    """
    Get the operation used to fill the part of the reference an alignment does not cover after it is wrapped.

    :param use_del: `True` to fill gaps with deletions (D), `False` to fill with reference skips (N).

    :return: `CigarOp.DEL` or `CigarOp.REF_SKIP`.
    """

    return CigarOp.DEL if use_del else CigarOp.REF_SKIP


def split(ref_len, start, ops, gap_op=CigarOp.REF_SKIP):
    """
    Translate an alignment against a duplicated circular reference (length `2 * ref_len`) to the original reference.

    An alignment starting in the second copy only needs its position shifted. An alignment starting in the first copy
    and running into the second is cut at the boundary. Operations past the boundary belong to the start of the
    original reference and are placed first, followed by one gap operation covering the reference the alignment does
    not reach, followed by the operations before the boundary.

    Example (ref_len=100, start=90, 20M) yields position 0 and 10M80N10M.

    :param ref_len: Length of the original (not duplicated) reference.
    :param start: 0-based start position of the alignment on the duplicated reference.
    :param ops: CIGAR operations as `Operation` objects or pysam `(op, length)` tuples.
    :param gap_op: Operation to fill the gap with (`CigarOp.DEL` or `CigarOp.REF_SKIP`).

    :return: A tuple of the new 0-based start position and a list of `Operation`.

    Raises:
        ValueError: If `ref_len` is not positive or `gap_op` is not a deletion or reference skip.
        CircularSpanError: If the alignment does not start on the duplicated reference or covers more than one copy.
    """

    if ref_len <= 0:
        raise ValueError('Reference length must be a positive integer: {}'.format(ref_len))

    if gap_op not in GAP_OPS:
        raise ValueError('Gap operation must be a deletion or a reference skip: {}'.format(gap_op))

    if not 0 <= start < 2 * ref_len:
        raise CircularSpanError(
            'Alignment start {} is outside the duplicated reference (length {})'.format(start, 2 * ref_len)
        )

    ops = to_operations(ops)
    pos = start % ref_len

    # Second copy: the alignment cannot cross a boundary
    if start >= ref_len:
        return pos, ops

    # Ends at or before the boundary, trailing clips and insertions included
    if start + ref_occupancy(ops) <= ref_len:
        return start, ops

    direct = []   # Operations in the first copy (end of the original reference)
    wrapped = []  # Operations in the second copy (start of the original reference)

    for op in ops:
        occupancy = ref_occupancy((op,))

        if pos >= ref_len:
            wrapped.append(op)

        elif pos + occupancy < ref_len:
            direct.append(op)

        else:
            # Operation crosses the boundary, cut it
            first_len = ref_len - pos
            second_len = occupancy - first_len

            direct.append(new_operation(op, first_len))

            if second_len > 0:
                wrapped.append(new_operation(op, second_len))

        pos += occupancy

    gap_len = ref_len - ref_occupancy(wrapped) - ref_occupancy(direct)

    if gap_len < 0:
        raise CircularSpanError(
            'Alignment at {} ({}) covers {} reference bases, which is more than the reference length ({})'.format(
                start, cigar_string(ops), ref_occupancy(ops), ref_len
            )
        )

    return 0, wrapped + [Operation(gap_op, gap_len)] + direct
