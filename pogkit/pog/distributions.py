"""
distributions
=============

Character-state distributions attached to graph nodes.

The inference collaborator supplies one of three kinds of payload for a
position, and callers discriminate them through the ``kind`` attribute:

  - ``'categorical'`` : :class:`Categorical`, probabilities over characters.
  - ``'mixture'`` : :class:`GaussianMixture`, a continuous state.
  - ``'point'`` : :class:`PointEstimate`, a single value.
"""

import re
from collections import Counter

import numpy as np

CATEGORICAL = 'categorical'
MIXTURE = 'mixture'
POINT = 'point'

KINDS = (CATEGORICAL, MIXTURE, POINT)

_MIXTURE_TOKEN = re.compile(r"^N\(([^,()]+),([^,()]+)\)\*(.+)$")


class Distribution:
    """ Base class of the tagged variant, ``kind`` names the concrete type. """
    kind = None

    def mode(self):
        raise NotImplementedError

    def describe(self):
        """ Compact text form used in DOT annotations. """
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, Distribution) or other.kind != self.kind:
            return NotImplemented
        return self.describe() == other.describe()

    def __hash__(self):
        return hash((self.kind, self.describe()))


class Categorical(Distribution):
    """ Probability distribution over a finite set of characters.

    Parameters
    ----------
    probs : `dict` [`str`, `float`]
        Un-normalized weights keyed by character. Weights are normalized
        to sum to one, unless they are all zero.
    """
    kind = CATEGORICAL

    def __init__(self, probs):
        if not probs:
            raise ValueError("A categorical distribution needs at least one character.")
        self._symbols = tuple(probs.keys())
        values = np.asarray([float(probs[k]) for k in self._symbols], dtype=float)
        if np.any(values < 0):
            raise ValueError("Probabilities must be non-negative.")
        total = values.sum()
        self._probs = values / total if total > 0 else values

    @classmethod
    def from_counts(cls, chars):
        """ Empirical distribution of an iterable of characters. """
        return cls(Counter(chars))

    @property
    def symbols(self):
        return self._symbols

    @property
    def probs(self):
        """ Probabilities as a `numpy.ndarray`, ordered as ``symbols``. """
        return self._probs.copy()

    def __getitem__(self, symbol):
        try:
            return float(self._probs[self._symbols.index(symbol)])
        except ValueError:
            return 0.

    def __repr__(self):
        return f"Categorical({self.to_dict()})"

    def to_dict(self):
        return dict(zip(self._symbols, self._probs.tolist()))

    def mode(self):
        """ Most probable character, the first listed wins ties. """
        return self._symbols[int(np.argmax(self._probs))]

    def describe(self):
        return " ".join(f"{k}:{p:.0e}" for k, p in zip(self._symbols, self._probs))


class GaussianMixture(Distribution):
    """ Mixture of univariate Gaussians for continuous character states.

    Parameters
    ----------
    means, variances, weights : array_like
        Component parameters, all of the same length.
    """
    kind = MIXTURE

    def __init__(self, means, variances, weights=None):
        self.means = np.atleast_1d(np.asarray(means, dtype=float))
        self.variances = np.atleast_1d(np.asarray(variances, dtype=float))
        if weights is None:
            weights = np.ones_like(self.means)
        weights = np.atleast_1d(np.asarray(weights, dtype=float))
        if not (self.means.shape == self.variances.shape == weights.shape):
            raise ValueError("means, variances and weights must have the same length.")
        if np.any(self.variances <= 0):
            raise ValueError("Variances must be positive.")
        self.weights = weights / weights.sum()

    def __repr__(self):
        return f"GaussianMixture(means={self.means.tolist()}, variances={self.variances.tolist()}, weights={self.weights.tolist()})"

    def mean(self):
        return float(np.dot(self.weights, self.means))

    def mode(self):
        """ Mean of the heaviest component. """
        return float(self.means[int(np.argmax(self.weights))])

    def describe(self):
        return " ".join(f"N({m:.4g},{v:.4g})*{w:.4g}"
                        for m, v, w in zip(self.means, self.variances, self.weights))


class PointEstimate(Distribution):
    """ A single inferred value (character or number). """
    kind = POINT

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"PointEstimate({self.value!r})"

    def mode(self):
        return self.value

    def describe(self):
        return f"={self.value}"


def parse_distribution(text):
    """ Parse the text form written by :meth:`Distribution.describe`.

    Parameters
    ----------
    text : `str`
        The annotation, e.g. ``"A:5e-01 C:5e-01"``, ``"N(0,1)*1"`` or ``"=3.2"``.

    Returns
    -------
    dist : {`Distribution`, `None`}
        `None` if ``text`` is empty.
    """
    text = text.strip()
    if not text:
        return None

    if text.startswith('='):
        value = text[1:]
        try:
            value = float(value)
        except ValueError:
            pass
        return PointEstimate(value)

    tokens = text.split()
    if all(_MIXTURE_TOKEN.match(t) for t in tokens):
        params = np.array([[float(g) for g in _MIXTURE_TOKEN.match(t).groups()] for t in tokens])
        return GaussianMixture(params[:, 0], params[:, 1], params[:, 2])

    probs = {}
    for token in tokens:
        symbol, sep, prob = token.rpartition(':')
        if not sep or len(symbol) != 1:
            raise ValueError(f"Unrecognized distribution token {token!r}.")
        probs[symbol] = float(prob)
    return Categorical(probs)
