import time
import numpy as np
from scipy import stats
from paleotime import config as ptconf
from paleotime import InvalidOptionError
from .time_data import as_tip_time_table, expand_to_four_dates, check_age_order
from .utils import logger, format_age, is_single_number


class TipCalibration(object):
    """
    Tip age calibrations for tip-dating analyses (sensu Zhang et al., 2016)
    in MrBayes, together with an offset exponential prior on the tree age.

    The ages are selected when the object is created, :py:meth:`block`
    formats them as MrBayes commands.
    """

    def __init__(self, tip_times, age_calibration_type, tree_age_offset, which_appearance='first',
                 min_tree_age=None, collapse_uniform=True, anchor_taxon=True, rng_seed=None,
                 verbose=ptconf.VERBOSE):
        """
        Parameters
        ----------

         tip_times : TimeList, tuple, pandas.DataFrame, dict
            tip ages, see :py:func:`paleotime.time_data.as_tip_time_table`. Tables
            have one row per taxon and 1, 2 or 4 columns: a precise point
            occurrence, uncertainty bounds on a single occurrence, or bounds on
            the first and the last occurrence. Precise first and last
            occurrences should not be passed as two columns, they would be
            read as the bounds of a single occurrence.

         age_calibration_type : str
            'fixedDateEarlier' fixes tips at the older bound of the selected
            appearance, 'fixedDateLatter' at the younger bound,
            'fixedDateRandom' at an age drawn uniformly between the bounds, and
            'uniformRange' (recommended) places a uniform prior between them.

         tree_age_offset : float
            the mean of the offset exponential tree age prior is the minimum
            tree age plus this offset

         which_appearance : str
            use the 'first' or the 'last' appearance of each taxon

         min_tree_age : float, None
            minimum tree age, defaults to the oldest tip age used. A user
            value must not be younger than the oldest tip.

         collapse_uniform : bool
            MrBayes does not accept uniform priors with identical bounds, tips
            with identical bounds get a fixed age instead

         anchor_taxon : bool, str
            with 'uniformRange', at least one tip needs a fixed age to place
            the trees on an absolute time-scale. If True and no tip was fixed
            by collapse_uniform, the first taxon is fixed at its older bound.
            A taxon name fixes that taxon, False fixes none.

         rng_seed : int, None
            seed of the random generator used by 'fixedDateRandom'

         verbose : int
            verbosity of the log messages

        """
        self.t_start = time.time()
        self.verbose = verbose
        self.tip_times = as_tip_time_table(tip_times)
        self.taxa = list(self.tip_times.index)

        if not isinstance(age_calibration_type, str):
            raise InvalidOptionError("age_calibration_type must be a single string")
        if age_calibration_type not in ptconf.CALIBRATION_TYPES:
            raise InvalidOptionError("age_calibration_type must be one of %s, got '%s'"
                                     %(", ".join(ptconf.CALIBRATION_TYPES), age_calibration_type))
        if not isinstance(which_appearance, str) or which_appearance not in ptconf.APPEARANCES:
            raise InvalidOptionError("which_appearance must be one of 'first' or 'last', got %r"%(which_appearance,))
        if not is_single_number(tree_age_offset):
            raise InvalidOptionError("tree_age_offset must be a single finite number, got %r"%(tree_age_offset,))
        if min_tree_age is not None and not is_single_number(min_tree_age):
            raise InvalidOptionError("min_tree_age must be a single finite number, got %r"%(min_tree_age,))
        if not isinstance(collapse_uniform, (bool, np.bool_)):
            raise TypeError("collapse_uniform must be True or False")

        self.age_calibration_type = age_calibration_type
        self.which_appearance = which_appearance
        self.tree_age_offset = float(tree_age_offset)
        self.collapse_uniform = bool(collapse_uniform)

        # a single point occurrence per taxon has no bounds to choose from
        if self.tip_times.shape[1]==1 and age_calibration_type!=ptconf.FIXED_EARLIER:
            raise InvalidOptionError("You appear to be supplying a single point occurrence per taxon. "
                                     "There isn't any uncertainty or upper bounds on ages, so "
                                     "age_calibration_type should be set to '%s'"%ptconf.FIXED_EARLIER)

        self._set_anchor(anchor_taxon)
        self.rng = np.random.default_rng(rng_seed)

        self._select_ages()
        self._set_calibrations()
        self._set_tree_age_prior(min_tree_age)


    def logger(self, msg, level, warn=False):
        logger(msg, level, verbose=self.verbose, warn=warn, t_start=self.t_start)


    @property
    def is_uniform(self):
        return self.age_calibration_type==ptconf.UNIFORM_RANGE


    def _set_anchor(self, anchor_taxon):
        """
        resolve the anchor taxon. pick_anchor is True when the anchor was
        chosen here rather than named by the user, in which case it is only
        fixed if no other tip ends up with a fixed age.
        """
        if isinstance(anchor_taxon, (bool, np.bool_)):
            self.pick_anchor = bool(anchor_taxon)
            if anchor_taxon and self.is_uniform:
                self.anchor_taxon = self.taxa[0]
            else:
                self.anchor_taxon = None
        elif isinstance(anchor_taxon, str):
            self.pick_anchor = False
            if anchor_taxon not in self.taxa:
                raise InvalidOptionError("anchor_taxon '%s' appears to be a taxon name, but was not found "
                                         "among the taxon names of the tip times"%anchor_taxon)
            self.anchor_taxon = anchor_taxon
        else:
            raise TypeError("anchor_taxon must be True, False or a taxon name, got %s"
                            %type(anchor_taxon).__name__)


    def _select_ages(self):
        """
        pick the bounds of the chosen appearance and reduce them to the ages
        required by the calibration type. self.ages has a single column 'age'
        for fixed calibrations and the columns 'older' and 'younger' otherwise.
        """
        four_date = expand_to_four_dates(self.tip_times)
        check_age_order(four_date)

        if self.which_appearance=='first':
            bounds = four_date[['fad_older', 'fad_younger']].copy()
        else:
            bounds = four_date[['lad_older', 'lad_younger']].copy()
        bounds.columns = ['older', 'younger']

        if self.age_calibration_type==ptconf.FIXED_EARLIER:
            ages = bounds[['older']]
        elif self.age_calibration_type==ptconf.FIXED_LATTER:
            ages = bounds[['younger']]
        elif self.age_calibration_type==ptconf.FIXED_RANDOM:
            width = (bounds['older'] - bounds['younger']).to_numpy()
            draws = stats.uniform.rvs(size=len(width), random_state=self.rng)
            ages = bounds[['younger']] + (width*draws)[:,None]
        else:
            ages = bounds

        if not self.is_uniform:
            ages = ages.copy()
            ages.columns = ['age']
        self.ages = ages


    def _set_calibrations(self):
        """
        build the list of (taxon, prior, ages) calibrations and the list of
        taxa whose uniform ages were turned into fixed ones
        """
        self.fixed_taxa = []
        self.calibrations = []
        if not self.is_uniform:
            for taxon, age in self.ages['age'].items():
                self.calibrations.append((taxon, 'fixed', (age,)))
            return

        if self.collapse_uniform:
            fix = list(self.ages['older']==self.ages['younger'])
        else:
            fix = [False]*len(self.taxa)

        if self.pick_anchor:
            if not any(fix):
                self.logger("anchorTaxon not user-defined, forcing %s to be a fixed tip age"%self.anchor_taxon,
                            1, warn=True)
                fix[self.taxa.index(self.anchor_taxon)] = True
        elif self.anchor_taxon is not None:
            fix[self.taxa.index(self.anchor_taxon)] = True

        for taxon, fixed, (older, younger) in zip(self.taxa, fix, self.ages[['older', 'younger']].to_numpy()):
            if fixed:
                self.calibrations.append((taxon, 'fixed', (older,)))
                self.fixed_taxa.append(taxon)
            else:
                self.calibrations.append((taxon, 'uniform', (younger, older)))
        self.logger("TipCalibration: %d uniform and %d fixed tip ages"
                    %(len(self.taxa)-len(self.fixed_taxa), len(self.fixed_taxa)), 2)


    def _set_tree_age_prior(self, min_tree_age):
        self.min_tip_age = float(self.ages.to_numpy().max())
        if min_tree_age is None:
            self.min_tree_age = self.min_tip_age
        else:
            # the minimum tree age can't be younger than the oldest tip
            if float(min_tree_age)*ptconf.MIN_TREE_AGE_TOLERANCE < self.min_tip_age:
                raise InvalidOptionError("User given min_tree_age (%s) is younger than the oldest tip age (%s)"
                                         %(format_age(min_tree_age), format_age(self.min_tip_age)))
            self.min_tree_age = float(min_tree_age)
        self.mean_tree_age = self.min_tree_age + self.tree_age_offset


    def date_lines(self):
        lines = []
        for taxon, prior, ages in self.calibrations:
            lines.append("calibrate %s = %s (%s);"%(taxon, prior, ", ".join(format_age(a) for a in ages)))
        if self.is_uniform:
            if self.fixed_taxa:
                lines.append("[These taxa had fixed tip ages: %s ]"%" ".join(self.fixed_taxa))
            else:
                lines.append(" ")
        return lines


    def tree_age_line(self):
        return "prset treeagepr = offsetexp(%s, %s);"%(format_age(self.min_tree_age), format_age(self.mean_tree_age))


    def block(self):
        """
        MrBayes commands: one calibration per tip, for uniform calibrations a
        comment listing the tips with fixed ages, an empty line and the
        tree age prior.
        """
        return self.date_lines() + ["", self.tree_age_line()]


    def write(self, fname):
        """overwrite the file *fname* with the calibration block"""
        with open(fname, 'w', encoding='utf-8') as fh:
            for line in self.block():
                fh.write(line+'\n')
        self.logger("TipCalibration: calibration block written to %s"%fname, 1)


def create_mrbayes_tip_calibrations(tip_times, age_calibration_type, tree_age_offset, which_appearance='first',
                                    min_tree_age=None, collapse_uniform=True, anchor_taxon=True, file=None,
                                    rng_seed=None, verbose=ptconf.VERBOSE):
    """
    Construct a block of tip age calibrations for tip-dating analyses in MrBayes.

    See :py:class:`TipCalibration` for the arguments. Beware: some
    combinations of arguments might not make sense for your data.

    Parameters
    ----------

     file : str, None
        file name that will be overwritten with the block

    Returns
    -------

     block : list
        the MrBayes commands as strings, also when they are written to *file*

    """
    calibration = TipCalibration(tip_times, age_calibration_type, tree_age_offset,
                                 which_appearance=which_appearance, min_tree_age=min_tree_age,
                                 collapse_uniform=collapse_uniform, anchor_taxon=anchor_taxon,
                                 rng_seed=rng_seed, verbose=verbose)
    if file is not None:
        calibration.write(file)
    return calibration.block()


def plot_tip_ages(calibration, ax=None, **kwargs):
    '''
    plot the tip age calibrations on a time axis.
    Args:
        calibration:    TipCalibration object
        ax:             axis object. will create new axis of none specified
        **kwargs:       passed down to the plot calls of the uniform ranges
    '''
    import matplotlib.pyplot as plt
    if ax is None:
        fig = plt.figure()
        ax = plt.subplot(111)

    style = {'lw':3, 'c':(0.5,0.5,0.5)}
    style.update(kwargs)
    for yi, (taxon, prior, ages) in enumerate(calibration.calibrations):
        if prior=='fixed':
            ax.plot(ages, [yi], 'o', c='k')
        else:
            ax.plot(ages, [yi, yi], **style)

    ax.axvline(calibration.min_tree_age, ls='--', c=(0.8,0.2,0.2), label='minimum tree age')
    ax.set_yticks(np.arange(len(calibration.calibrations)))
    ax.set_yticklabels([c[0] for c in calibration.calibrations])
    ax.set_xlabel('age (time before present)')
    if not ax.xaxis_inverted():
        ax.invert_xaxis()
    ax.legend()
    return ax
