import sys, time
import numbers
from textwrap import fill
import numpy as np
from . import config as ptconf

_T_START = time.time()


def logger(msg, level, verbose=ptconf.VERBOSE, warn=False, t_start=None):
    """
    Print log message *msg* to stdout.

    Parameters
    -----------

     msg : str
        String to print on the screen

     level : int
        Log-level. Only the messages with a level lower than the
        current verbose level will be shown.

     verbose : int
        Current verbosity, 0 silences everything but warnings at level 0

     warn : bool
        Warning flag. If True, the message will also be displayed
        when its level equals the verbose level.

     t_start : float, optional
        reference time for the time stamp, defaults to the import time of paleotime

    """
    lw=80
    if level<verbose or (warn and level<=verbose):
        dt = time.time() - (_T_START if t_start is None else t_start)
        outstr = '\n' if level<2 else ''
        initial_indent = format(dt, '4.2f')+'\t' + level*'-'
        subsequent_indent = " "*len(format(dt, '4.2f')) + "\t" + " "*level
        outstr += fill(msg, width=lw, initial_indent=initial_indent, subsequent_indent=subsequent_indent)
        print(outstr, file=sys.stdout)


def format_age(age):
    """
    format a number the way R prints it when pasting into strings,
    i.e. 15 significant digits and no trailing '.0' for whole numbers
    """
    return ptconf.AGE_FORMAT%float(age)


def is_single_number(x):
    """True for a finite, real, non-boolean scalar (including numpy scalars and size-one arrays)"""
    if isinstance(x, (bool, np.bool_)):
        return False
    if isinstance(x, numbers.Real):
        return bool(np.isfinite(x))
    if isinstance(x, np.ndarray) and x.size==1:
        return (np.issubdtype(x.dtype, np.number) and not np.issubdtype(x.dtype, np.bool_)
                and bool(np.isfinite(x).all()))
    return False
