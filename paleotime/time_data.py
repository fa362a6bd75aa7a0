import os
import numpy as np
import pandas as pd
from paleotime import config as ptconf
from paleotime import InvalidTimeDataError


def _whole_number_ids(column):
    """interval ids that are all whole numbers are stored as int so they match an integer index"""
    numeric = pd.to_numeric(column, errors='coerce')
    if numeric.notna().all() and np.all(numeric==np.round(numeric)):
        return numeric.astype(int)
    return column


class TimeList(object):
    """
    Occurrence data in the format of a paleotree timeList: a table of
    interval bounds and a table assigning each taxon to the intervals of
    its first and last appearance.
    """

    def __init__(self, intervals, taxa):
        """
        Parameters
        ----------

         intervals : pandas.DataFrame, array-like
            two columns with the older (start) and younger (end) bound of each
            interval. The index holds the interval ids, arrays are indexed
            from 1 to match timeLists written by paleotree.

         taxa : pandas.DataFrame, dict
            two columns with the ids of the first and last interval of each
            taxon, indexed by taxon name. A dict maps taxon names to
            (first, last) pairs.

        """
        if isinstance(intervals, pd.DataFrame):
            intervals = intervals.copy()
        else:
            values = np.asarray(intervals)
            if values.ndim!=2:
                raise InvalidTimeDataError("interval table must be two-dimensional")
            intervals = pd.DataFrame(values, index=np.arange(1, values.shape[0]+1))
        if intervals.shape[1]!=2:
            raise InvalidTimeDataError("interval table must have two columns (older and younger bound), got %d"
                                       %intervals.shape[1])
        intervals.columns = ['older', 'younger']
        try:
            self.intervals = intervals.apply(pd.to_numeric).astype(float)
        except (ValueError, TypeError) as e:
            raise InvalidTimeDataError("interval bounds must be numeric: %s"%e)

        if isinstance(taxa, dict):
            taxa = pd.DataFrame.from_dict(taxa, orient='index')
        elif isinstance(taxa, pd.DataFrame):
            taxa = taxa.copy()
        else:
            raise InvalidTimeDataError("taxon table needs taxon names, pass a DataFrame indexed by taxon or a dict")
        if taxa.shape[1]!=2:
            raise InvalidTimeDataError("taxon table must have two columns (first and last interval), got %d"
                                       %taxa.shape[1])
        taxa.columns = ['first_interval', 'last_interval']
        self.taxa = taxa.apply(_whole_number_ids)

    def __len__(self):
        return self.taxa.shape[0]

    def to_four_date(self):
        return time_list_to_four_date(self)


def time_list_to_four_date(time_list):
    """
    Convert a timeList to a four-date table.

    Parameters
    ----------

     time_list : TimeList
        interval and taxon tables

    Returns
    -------

     four_date : pandas.DataFrame
        one row per taxon with the columns fad_older, fad_younger,
        lad_older, lad_younger

    """
    if not isinstance(time_list, TimeList):
        raise TypeError("time_list must be a TimeList, got %s"%type(time_list).__name__)
    intervals, taxa = time_list.intervals, time_list.taxa
    unknown = ~(taxa['first_interval'].isin(intervals.index) & taxa['last_interval'].isin(intervals.index))
    if unknown.any():
        raise InvalidTimeDataError("taxa refer to intervals missing from the interval table: "
                                   + " ".join(map(str, taxa.index[unknown])))

    first = intervals.loc[taxa['first_interval']].to_numpy()
    last = intervals.loc[taxa['last_interval']].to_numpy()
    return pd.DataFrame(np.hstack([first, last]), index=taxa.index, columns=ptconf.FOUR_DATE_COLUMNS)


def as_tip_time_table(tip_times):
    """
    Coerce tip ages into a numeric table with one row per taxon.

    Parameters
    ----------

     tip_times : TimeList, tuple, list, pandas.DataFrame, pandas.Series, dict
        a TimeList or a pair of (intervals, taxa) tables, or a table indexed
        by taxon name with 1, 2 or 4 age columns: a point age, the bounds on
        a single occurrence, or the bounds on the first and last occurrence.
        A dict maps taxon names to a single age or a sequence of ages.

    Returns
    -------

     table : pandas.DataFrame
        float ages indexed by taxon name (as str)

    """
    if isinstance(tip_times, TimeList):
        table = time_list_to_four_date(tip_times)
    elif isinstance(tip_times, (list, tuple)):
        if len(tip_times)!=2:
            raise InvalidTimeDataError("tip times given as a list must be a timeList of length 2, got length %d"
                                       %len(tip_times))
        table = time_list_to_four_date(TimeList(*tip_times))
    elif isinstance(tip_times, dict):
        table = pd.DataFrame.from_dict({k: list(np.atleast_1d(v)) for k, v in tip_times.items()}, orient='index')
    elif isinstance(tip_times, pd.Series):
        table = tip_times.to_frame()
    elif isinstance(tip_times, pd.DataFrame):
        table = tip_times.copy()
    else:
        raise TypeError("tip times must be a TimeList, a pair of tables, a DataFrame or a dict, got %s"
                        %type(tip_times).__name__)

    try:
        table = table.apply(pd.to_numeric).astype(float)
    except (ValueError, TypeError) as e:
        raise InvalidTimeDataError("tip ages must be numeric: %s"%e)

    if table.shape[1] not in ptconf.ALLOWED_AGE_COLUMNS:
        raise InvalidTimeDataError("tip times must have 1 or 2 or 4 columns, got %d"%table.shape[1])
    if table.shape[0]==0:
        raise InvalidTimeDataError("tip times contain no taxa")
    if table.index.hasnans or any(str(x).strip()=="" for x in table.index):
        raise InvalidTimeDataError("every row of the tip times needs a taxon name")
    table.index = table.index.map(str)
    if table.index.has_duplicates:
        raise InvalidTimeDataError("taxon names appear more than once: "
                                   + " ".join(table.index[table.index.duplicated()].unique()))
    return table


def expand_to_four_dates(table):
    """
    Repeat the columns of an age table so every taxon has bounds on its
    first and last appearance: a point age is used four times, the bounds of
    a single occurrence are used for both appearances.
    """
    values = table.to_numpy(dtype=float)
    if values.shape[1]==1:
        values = np.repeat(values, 4, axis=1)
    elif values.shape[1]==2:
        values = np.hstack([values, values])
    elif values.shape[1]!=4:
        raise InvalidTimeDataError("tip times must have 1 or 2 or 4 columns, got %d"%values.shape[1])
    return pd.DataFrame(values, index=table.index, columns=ptconf.FOUR_DATE_COLUMNS)


def check_age_order(four_date):
    """
    Make sure the bounds on each appearance run from oldest to youngest.
    Ages are times before present, so the older bound must be larger.
    """
    missing = four_date.isna().any(axis=1)
    if missing.any():
        raise InvalidTimeDataError("tip times contain missing ages: check " + " ".join(four_date.index[missing]))

    for older, younger, tol in [('fad_older', 'fad_younger', ptconf.AGE_ORDER_TOLERANCE),
                                ('lad_older', 'lad_younger', 0)]:
        misordered = (four_date[younger] - four_date[older]) > tol
        if misordered.any():
            raise InvalidTimeDataError("dates in tip times do not appear to be correctly ordered from "
                                       "oldest to youngest: check " + " ".join(four_date.index[misordered]))
    return True


def _read_table(filename):
    if not os.path.isfile(filename):
        raise InvalidTimeDataError("file %s does not exist"%filename)
    # separator for the csv/tsv file. If csv, we'll strip extra whitespace around ','
    full_sep = '\t' if filename.endswith('.tsv') else r'\s*,\s*'
    try:
        return pd.read_csv(filename, sep=full_sep, engine='python', index_col=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise InvalidTimeDataError("could not read table %s: %s"%(filename, e))


def _name_column(df, name_col):
    if name_col:
        if name_col not in df.columns:
            raise InvalidTimeDataError("specified column for the taxon name does not exist. \n\tAvailable columns are: "
                                       + ", ".join(map(str, df.columns)) + "\n\tYou specified '%s'"%name_col)
        return name_col
    for col in df.columns:
        if str(col).lower() in ptconf.NAME_COLUMNS:
            return col
    return df.columns[0]


def parse_tip_times(filename, name_col=None, age_cols=None):
    """
    Read tip ages from a csv or tsv file.

    Parameters
    ----------

     filename : str
        table with a column of taxon names and 1, 2 or 4 age columns

     name_col : str, optional
        column with the taxon names. Defaults to the first column called
        'name', 'taxon', 'taxa', 'species' or 'genus', or else the first column.

     age_cols : list, optional
        columns with the ages, all other columns by default

    Returns
    -------

     table : pandas.DataFrame
        numeric ages indexed by taxon name

    """
    print("\nAttempting to parse tip ages...")
    df = _read_table(filename)
    index_col = _name_column(df, name_col)
    print("\tUsing column '%s' as taxon name. These names are used as-is in the calibrate lines."%index_col)

    if age_cols is None:
        age_cols = [c for c in df.columns if c!=index_col]
    else:
        unknown = [c for c in age_cols if c not in df.columns]
        if unknown:
            raise InvalidTimeDataError("age columns do not exist: %s. \n\tAvailable columns are: %s"
                                       %(", ".join(unknown), ", ".join(map(str, df.columns))))
    print("\tUsing column(s) %s as ages."%", ".join("'%s'"%c for c in age_cols))

    table = df.set_index(index_col)[list(age_cols)]
    table.index.name = None
    return as_tip_time_table(table)


def parse_time_list(intervals_file, taxa_file, name_col=None):
    """
    Read a timeList from two tables.

    Parameters
    ----------

     intervals_file : str
        interval bounds, either two columns (older, younger) with intervals
        numbered from 1 in file order, or three columns with an interval id first

     taxa_file : str
        taxon names with the ids of their first and last interval

    Returns
    -------

     time_list : TimeList

    """
    intervals = _read_table(intervals_file)
    if intervals.shape[1]==3:
        intervals = intervals.set_index(intervals.columns[0])
        intervals.index = _whole_number_ids(pd.Series(intervals.index)).to_numpy()
    elif intervals.shape[1]==2:
        intervals.index = np.arange(1, intervals.shape[0]+1)
    else:
        raise InvalidTimeDataError("interval file %s must have two or three columns"%intervals_file)

    taxa = _read_table(taxa_file)
    index_col = _name_column(taxa, name_col)
    taxa = taxa.set_index(index_col)
    taxa.index = taxa.index.map(str)
    return TimeList(intervals, taxa)
