"""
Defines a dictionary of command-line options.
"""

args_dict = dict()


###########
# Options #
###########

#
# Input
#

# ref_len
args_dict['ref_len'] = {
    'type': int,
    'help': 'Length of the original circular reference (half the length of the duplicated reference the reads were '
            'aligned to).'
}

# bam_path
args_dict['bam_path'] = {
    'help': 'SAM, BAM, or CRAM file of reads aligned to the duplicated reference.'
}


#
# Output
#

# output
args_dict['output'] = {
    'default': '-',
    'help': 'Output file. Writes to standard output if "-".'
}

# output_format
args_dict['output_format'] = {
    'choices': ('sam', 'bam'),
    'default': 'sam',
    'help': 'Output format.'
}

# use_del
args_dict['use_del'] = {
    'action': 'store_true',
    'help': 'Use the delete operator (D) instead of the reference skip operator (N) to fill in gaps.'
}


#
# Uncategorized
#

# verbose
args_dict['verbose'] = {
    'action': 'store_true',
    'help': 'Print extra runtime information.'
}


#############
# Functions #
#############

def get_arg(key, args=None, default=None):
    """
    Get an argument from object `args` or the default value for an argument if it is not in `args`.

    :param key: Argument key (name).
    :param args: Argument object or `None` to always get the default argument.
    :param default: Default value if not in `args`. Uses hard-coded default if `None`.

    :return: Argument value.

    Raises:
        KeyError: If `key` is not in `args` and does not have a default value.
    """

    # Get argument from args
    if args is not None and hasattr(args, key):
        return getattr(args, key)

    # Get explicit default value
    if default is not None:
        return default

    # Get hard-coded default value
    if key not in args_dict:
        raise KeyError('No record for argument with key {}'.format(key))

    if 'default' in args_dict[key]:
        return args_dict[key]['default']

    if 'action' in args_dict[key] and args_dict[key]['action'] == 'store_true':
        # 'action' entries have an implicit default of False
        return False

    raise KeyError('No default value for argument with key {}'.format(key))
