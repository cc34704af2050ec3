#!/usr/bin/env python3

"""
Apply a modulo function to alignments to account for the circular nature of a plasmid.

Before alignment, the plasmid reference is duplicated so that reads bridging the "end" of the plasmid can be aligned
by a standard aligner (bwa, minimap2). This tool translates the alignments back to coordinates on the original
reference. Only primary alignments are kept. Output is written to standard output unless --output is set.
"""

import argparse
import logging
import re
import sys

from plasmodlib.args import args_dict
from plasmodlib import cigar
from plasmodlib import remap


logger = logging.getLogger('plasmod')


def halve(args):
    """
    Remap alignments to the original circular reference.

    :param args: Command arguments.

    :return: 0 if the command ran successfully, and a non-zero code otherwise.
    """

    try:
        remap.halve(
            args.ref_len, args.bam_path,
            use_del=args.use_del,
            out_path=args.output,
            out_format=args.output_format
        )

    except cigar.CircularSpanError as ex:
        logger.error('Alignment does not fit the duplicated reference: %s', ex)
        return 1

    except (OSError, ValueError) as ex:
        logger.error('Failed to remap alignments: %s', ex)
        return 1

    return 0


def get_parser():
    """
    Get the command-line parser.
    """

    parser = argparse.ArgumentParser(description=__doc__.strip().split('\n')[0])
    parser.add_argument('--verbose', '-v', **args_dict['verbose'])
    parser.add_argument('--use-del', '-u', dest='use_del', **args_dict['use_del'])
    parser.add_argument('--output', '-o', **args_dict['output'])
    parser.add_argument('--output-format', '-O', dest='output_format', **args_dict['output_format'])
    parser.add_argument('ref_len', **args_dict['ref_len'])
    parser.add_argument('bam_path', **args_dict['bam_path'])
    parser.set_defaults(func=halve)

    return parser


def main(argv=None):

    cmd_args = get_parser().parse_args(argv)

    # Set logging, standard output is reserved for alignments
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if cmd_args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Report arguments if verbose
    if cmd_args.verbose:
        logger.debug('Python version: {0}'.format(re.sub(r'\s*\n\s*', ' - ', sys.version)))

        for key in sorted(vars(cmd_args).keys()):
            logger.debug('Argument: {} = {}'.format(key, getattr(cmd_args, key)))

    if cmd_args.ref_len <= 0:
        logger.error('Reference length must be a positive integer: {}'.format(cmd_args.ref_len))
        return 1

    return cmd_args.func(cmd_args)


# Main
if __name__ == '__main__':
    sys.exit(main())
