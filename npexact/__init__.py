"""
npexact: exact and asymptotic null distributions for nonparametric tests.

Every rank-based or count-based nonparametric test ends the same way: a test
statistic and a handful of sample sizes must be turned into a p-value. For
small samples that p-value comes from a finite enumeration of the null
distribution (usually precomputed into a table); for large samples it comes
from a continuous limiting law, most often the Normal or Chi-square.

npexact packages both halves behind one engine:

- `npexact.stats.common`: special functions (log-gamma, regularized
  incomplete gamma and beta, Normal CDF and quantile), exact combinatorics and the
  midrank transform.
- `npexact.core.tables`: sparse keyed tables holding precomputed exact
  probabilities and critical values, with explicit undefined cells.
- `npexact.stats.distributions`: the continuous and discrete families used as
  asymptotic fallbacks.
- `npexact.stats.exact`: one distribution per test, each blending table lookup
  with an asymptotic approximation.
- `npexact.runtime.registry`: a registry that builds every table once and
  hands out read-only distributions.

Results are explicit: a lookup returns `Value`, `NotTabulated` or `Saturated`
instead of smuggling meaning through out-of-range floats.

Example
-------
>>> import npexact
>>> assert hasattr(npexact, "core")
>>> assert hasattr(npexact, "stats")
"""

from npexact import core, stats
from npexact.__version__ import __version__

__all__ = ["core", "stats", "__version__"]
