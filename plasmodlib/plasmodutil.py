"""
Utility functions for use by any part the project.
"""

# SAM flag bits
FLAG_UNMAPPED = 0x4
FLAG_SECONDARY = 0x100
FLAG_QCFAIL = 0x200
FLAG_DUP = 0x400
FLAG_SUPPLEMENTARY = 0x800

# Any of these bits marks an alignment that is not the primary placement of a read
NONPRIMARY = FLAG_UNMAPPED | FLAG_SECONDARY | FLAG_QCFAIL | FLAG_DUP | FLAG_SUPPLEMENTARY


def is_primary(flag):
    """
    Determine if an alignment is the primary placement of a read.

    :param flag: SAM flag of the alignment.

    :return: `True` if no unmapped, secondary, QC-fail, duplicate, or supplementary bits are set.
    """

    return (flag & NONPRIMARY) == 0


def describe_record(record):
    """
    Get a short description of an alignment record for log and error messages.
    """

    return '{} (flag={}, pos={})'.format(
        getattr(record, 'query_name', None),
        getattr(record, 'flag', None),
        getattr(record, 'reference_start', None)
    )
