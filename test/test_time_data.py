import numpy as np
import pandas as pd
import pytest


def small_time_list():
    from paleotime import TimeList
    intervals = [[12, 10], [10, 8], [8, 5]]
    taxa = pd.DataFrame({'first':[1, 2], 'last':[2, 3]}, index=['A', 'B'])
    return TimeList(intervals, taxa)


def test_time_list_to_four_date():
    from paleotime import time_list_to_four_date
    four_date = time_list_to_four_date(small_time_list())
    assert list(four_date.columns) == ['fad_older', 'fad_younger', 'lad_older', 'lad_younger']
    assert list(four_date.index) == ['A', 'B']
    assert np.allclose(four_date.loc['A'], [12, 10, 10, 8])
    assert np.allclose(four_date.loc['B'], [10, 8, 8, 5])


def test_time_list_with_interval_labels():
    from paleotime import TimeList
    intervals = pd.DataFrame({'start':[458.4, 453.0], 'end':[453.0, 445.2]}, index=['Sandbian', 'Katian'])
    time_list = TimeList(intervals, {'Orthograptus':('Sandbian', 'Katian')})
    four_date = time_list.to_four_date()
    assert np.allclose(four_date.loc['Orthograptus'], [458.4, 453.0, 453.0, 445.2])


def test_time_list_unknown_interval():
    from paleotime import TimeList, time_list_to_four_date, InvalidTimeDataError
    time_list = TimeList([[12, 10]], {'A':(1, 2)})
    with pytest.raises(InvalidTimeDataError, match="missing from the interval table: A"):
        time_list_to_four_date(time_list)


def test_as_tip_time_table():
    from paleotime import as_tip_time_table, InvalidTimeDataError
    table = as_tip_time_table({'A':5.5, 'B':3})
    assert table.shape == (2, 1)
    assert table.loc['A'].iloc[0] == 5.5

    table = as_tip_time_table(pd.DataFrame([['10', '8'], ['11', '9']], index=['A', 'B']))
    assert table.dtypes.iloc[0] == float

    table = as_tip_time_table(small_time_list())
    assert table.shape == (2, 4)

    with pytest.raises(InvalidTimeDataError, match="1 or 2 or 4 columns"):
        as_tip_time_table({'A':[3, 2, 1]})
    with pytest.raises(InvalidTimeDataError, match="numeric"):
        as_tip_time_table(pd.DataFrame([['ten', '8']], index=['A']))
    with pytest.raises(InvalidTimeDataError, match="length 2"):
        as_tip_time_table([1, 2, 3])
    with pytest.raises(TypeError):
        as_tip_time_table("A,10,8")


def test_expand_to_four_dates():
    from paleotime.time_data import expand_to_four_dates
    one = expand_to_four_dates(pd.DataFrame([[3.0]], index=['A']))
    assert np.allclose(one.loc['A'], [3, 3, 3, 3])
    two = expand_to_four_dates(pd.DataFrame([[4.0, 3.0]], index=['A']))
    assert np.allclose(two.loc['A'], [4, 3, 4, 3])


def test_check_age_order():
    from paleotime.time_data import check_age_order
    from paleotime import InvalidTimeDataError
    columns = ['fad_older', 'fad_younger', 'lad_older', 'lad_younger']
    # rounding noise within the first appearance bounds is tolerated
    ok = pd.DataFrame([[10, 10.00005, 6, 5]], index=['A'], columns=columns)
    assert check_age_order(ok)

    bad = pd.DataFrame([[10, 8, 6, 5], [10, 11, 6, 5]], index=['A', 'B'], columns=columns)
    with pytest.raises(InvalidTimeDataError, match="oldest to youngest: check B"):
        check_age_order(bad)
    bad = pd.DataFrame([[10, 8, 5, 5.00005]], index=['C'], columns=columns)
    with pytest.raises(InvalidTimeDataError, match="check C"):
        check_age_order(bad)
    missing = pd.DataFrame([[10, 8, np.nan, 5]], index=['D'], columns=columns)
    with pytest.raises(InvalidTimeDataError, match="missing ages: check D"):
        check_age_order(missing)


def test_parse_tip_times(tmp_path):
    from paleotime import parse_tip_times
    fname = tmp_path / "ages.csv"
    fname.write_text("genus, fad_max, fad_min\nRetiolites, 433.4, 430.5\nStomatograptus, 433.4, 427.4\n")
    table = parse_tip_times(str(fname))
    assert list(table.index) == ['Retiolites', 'Stomatograptus']
    assert list(table.columns) == ['fad_max', 'fad_min']
    assert np.allclose(table.loc['Stomatograptus'], [433.4, 427.4])


def test_parse_tip_times_columns(tmp_path):
    from paleotime import parse_tip_times, InvalidTimeDataError
    fname = tmp_path / "ages.tsv"
    fname.write_text("id\tlabel\tage\tcomment_age\nt1\tA\t5\t1\nt2\tB\t4\t2\n")
    table = parse_tip_times(str(fname), name_col='label', age_cols=['age'])
    assert list(table.index) == ['A', 'B']
    assert table.shape == (2, 1)
    with pytest.raises(InvalidTimeDataError, match="You specified 'taxon'"):
        parse_tip_times(str(fname), name_col='taxon')
    with pytest.raises(InvalidTimeDataError, match="does not exist"):
        parse_tip_times(str(tmp_path / "nothing.csv"))


def test_parse_time_list(tmp_path):
    from paleotime import parse_time_list
    intervals = tmp_path / "intervals.csv"
    intervals.write_text("interval,start,end\n1,12,10\n2,10,8\n3,8,5\n")
    taxa = tmp_path / "taxa.csv"
    taxa.write_text("taxon,first,last\nA,1,2\nB,2,3\n")
    time_list = parse_time_list(str(intervals), str(taxa))
    assert len(time_list) == 2
    four_date = time_list.to_four_date()
    assert np.allclose(four_date.loc['B'], [10, 8, 8, 5])

    # intervals numbered by their position in the file
    intervals.write_text("start,end\n12,10\n10,8\n8,5\n")
    four_date = parse_time_list(str(intervals), str(taxa)).to_four_date()
    assert np.allclose(four_date.loc['A'], [12, 10, 10, 8])


def test_parse_empty_file(tmp_path):
    from paleotime import parse_tip_times, InvalidTimeDataError
    fname = tmp_path / "ages.csv"
    fname.write_text("")
    with pytest.raises(InvalidTimeDataError, match="could not read table"):
        parse_tip_times(str(fname))
