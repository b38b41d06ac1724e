"""
Descriptor: values of a representation together with the index tables
describing its rows (samples) and columns (features), and optional
gradients.

"""

import copy
import warnings
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .exceptions import InternalFault, InvalidParameterError
from .indexes import Indexes, IndexKind, as_indexes

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


class Descriptor(object):
    """
    Container for the output of a calculator.

    Class Attributes:

      samples            Indexes with one row per row of `values`
      features           Indexes with one row per column of `values`
                         and `gradients`
      values             (samples.count, features.count) float array
      gradient_samples   Indexes with one row per row of `gradients`,
                         or None
      gradients          (gradient_samples.count, features.count) float
                         array, or None

    A new descriptor is empty: all tables have no rows and no columns.
    Contents are only ever replaced as a whole.
    """

    def __init__(self):
        self._set(Indexes.empty(), Indexes.empty(), np.zeros((0, 0)))

    def __str__(self):
        ostr = "Descriptor with {} samples [{}] and {} features [{}]".format(
            self.samples.count, ", ".join(self.samples.names),
            self.features.count, ", ".join(self.features.names))
        if self.gradients is not None:
            ostr += ", {} gradient samples".format(self.gradient_samples.count)
        return ostr

    def __repr__(self):
        return self.__str__()

    def _set(self, samples, features, values, gradient_samples=None,
             gradients=None):
        if values.shape != (samples.count, features.count):
            raise InternalFault(
                "values have shape {}, expected ({}, {})".format(
                    values.shape, samples.count, features.count))
        if gradients is not None:
            if gradient_samples is None or gradients.shape != (
                    gradient_samples.count, features.count):
                raise InternalFault(
                    "gradients have shape {}, which does not match the "
                    "gradient samples and features".format(gradients.shape))
        self.samples = samples
        self.features = features
        self.values = values
        self.gradient_samples = gradient_samples
        self.gradients = gradients

    def prepare(self, samples: Indexes, features: Indexes):
        """
        Replace the contents with zero-initialized values of the right
        shape, without gradients.

        """
        self._set(samples, features,
                  np.zeros((samples.count, features.count)))

    def prepare_gradients(self, samples: Indexes, gradient_samples: Indexes,
                          features: Indexes):
        if gradient_samples.names[-1:] != ("spatial",):
            raise InvalidParameterError(
                "the last gradient samples index must be 'spatial'")
        self._set(samples, features,
                  np.zeros((samples.count, features.count)),
                  gradient_samples,
                  np.zeros((gradient_samples.count, features.count)))

    def clear(self):
        """
        Release all data, going back to the empty state.
        """
        self.__init__()

    def copy(self):
        return copy.deepcopy(self)

    def indexes(self, kind: IndexKind) -> Optional[Indexes]:
        kind = IndexKind(kind)
        if kind == IndexKind.FEATURES:
            return self.features
        elif kind == IndexKind.SAMPLES:
            return self.samples
        else:
            return self.gradient_samples

    def to_dataframe(self, gradients=False) -> pd.DataFrame:
        """
        Values (or gradients) as a DataFrame, with the samples (or gradient
        samples) as row MultiIndex and the features as column MultiIndex.

        """
        if gradients:
            if self.gradients is None:
                raise InvalidParameterError(
                    "this descriptor does not contain gradients")
            return pd.DataFrame(self.gradients,
                                index=self.gradient_samples.to_multiindex(),
                                columns=self.features.to_multiindex())
        return pd.DataFrame(self.values,
                            index=self.samples.to_multiindex(),
                            columns=self.features.to_multiindex())

    def densify(self, variables: Sequence[str], requested=None):
        """
        Move the given sample `variables` into the features.

        For every distinct set of values taken by `variables` in the
        samples (sorted), the old features are repeated as one block of
        new features, with `variables` as leading feature columns.  Samples
        that only differed in `variables` are merged, and combinations
        missing from the original samples are filled with zeros.
        Gradients are transformed the same way.

        Arguments:
          variables  names of sample columns to move
          requested  (optional) 2-d array with one row per set of values
                     of `variables` to use as new feature blocks, instead
                     of the values present in the samples.  Values present
                     in the samples but not requested are dropped.

        Moved columns keep their names, so a variable with the same name
        as one of the feature columns is rejected with
        InvalidParameterError instead of being renamed.  The descriptor is
        left unchanged when an error is raised.

        Example: samples (structure, species) and features (n,):

            structure species | n=0          species     1  6  8
                0        1    |  1          n           0  0  0
                0        8    |  2    -->   structure
                1        6    |  3              0       1  0  2
                1        8    |  4              1       0  3  4

        """
        variables = list(variables)
        if len(variables) == 0 or self.features.size == 0:
            return

        for v in variables:
            if v in self.features.names:
                raise InvalidParameterError(
                    "can not densify along '{}' which is already one of the "
                    "features: [{}]".format(v, ", ".join(self.features.names)))
        if len(set(variables)) != len(variables):
            raise InvalidParameterError(
                "densify variables must be unique, got [{}]".format(
                    ", ".join(variables)))

        new_samples, sample_values, sample_map = _remove_variables(
            self.samples, variables)
        if self.gradients is not None:
            new_gradient_samples, gradient_values, gradient_map = \
                _remove_variables(self.gradient_samples, variables)

        observed = _unique_sorted(sample_values)
        if requested is not None:
            blocks = _unique_sorted(
                as_indexes(variables, requested, "requested values").values)
            wanted = set(map(tuple, blocks.tolist()))
            for value in map(tuple, observed.tolist()):
                if value not in wanted:
                    warnings.warn(
                        "{} takes the value ({}) in this descriptor, but it "
                        "is not part of the requested features".format(
                            _fmt(variables),
                            ", ".join(str(v) for v in value)))
        else:
            blocks = observed

        n_old = self.features.count
        block_of = {tuple(b): k for k, b in enumerate(blocks.tolist())}

        feature_rows = []
        for block in blocks.tolist():
            for feature in self.features:
                feature_rows.append(tuple(block) + feature)
        new_features = Indexes(variables + list(self.features.names),
                               feature_rows)

        values = _scatter(self.values, new_samples.count, new_features.count,
                          n_old, sample_map, sample_values, block_of)

        if self.gradients is not None:
            gradients = _scatter(self.gradients, new_gradient_samples.count,
                                 new_features.count, n_old, gradient_map,
                                 gradient_values, block_of)
            self._set(new_samples, new_features, values,
                      new_gradient_samples, gradients)
        else:
            self._set(new_samples, new_features, values)

    def dot(self, other: "Descriptor", reduce_across: Sequence[str] = (),
            normalize: bool = False, gradients: bool = False):
        """
        Dot product between the values of `self` and `other`.

        The result is a new descriptor whose samples are the samples of
        `self` and whose features are the samples of `other`, after both
        have been densified along `reduce_across` using the union of the
        values taken on both sides.

        Arguments:
          other          descriptor with the same features as `self`
          reduce_across  sample variables to sum over
          normalize      divide by the norms of the rows, giving a cosine
                         kernel
          gradients      also compute the dot product of the gradients
                         of `self` with the values of `other`

        """
        if self.features != other.features:
            raise InvalidParameterError(
                "descriptors have different features, the dot product "
                "between them is not well defined")
        if gradients and self.gradients is None:
            raise InvalidParameterError(
                "the left hand side descriptor does not contain gradient "
                "data, but the dot product requested it")

        reduce_across = list(reduce_across)
        lhs = self.copy()
        rhs = other.copy()
        if not gradients:
            lhs.gradients = None
            lhs.gradient_samples = None
        rhs.gradients = None
        rhs.gradient_samples = None

        if len(reduce_across) > 0:
            for name, d in (("left", lhs), ("right", rhs)):
                missing = [v for v in reduce_across
                           if v not in d.samples.names]
                if len(missing) > 0:
                    raise InvalidParameterError(
                        "'{}' does not appear in the {} hand side samples "
                        "for this dot product".format(missing[0], name))
            requested = np.concatenate([
                np.stack([d.samples.column(v) for v in reduce_across],
                         axis=1)
                for d in (lhs, rhs)])
            lhs.densify(reduce_across, requested)
            rhs.densify(reduce_across, requested)

        values = lhs.values @ rhs.values.T
        output = Descriptor()
        if gradients:
            output_gradients = lhs.gradients @ rhs.values.T
        if normalize:
            norm_lhs = np.linalg.norm(lhs.values, axis=1)
            norm_rhs = np.linalg.norm(rhs.values, axis=1)
            values /= np.outer(norm_lhs, norm_rhs)
            if gradients:
                # gradient samples end with (atom/neighbor, spatial)
                size = lhs.gradient_samples.size - 2
                rows = [lhs.samples.position(g[:size])
                        for g in lhs.gradient_samples]
                output_gradients /= np.outer(norm_lhs[rows], norm_rhs)

        if gradients:
            output._set(lhs.samples, rhs.samples, values,
                        lhs.gradient_samples, output_gradients)
        else:
            output._set(lhs.samples, rhs.samples, values)
        return output


def _fmt(variables):
    if len(variables) == 1:
        return variables[0]
    return "({})".format(", ".join(variables))


def _unique_sorted(values):
    if len(values) == 0:
        return values.reshape(0, values.shape[1] if values.ndim == 2 else 0)
    return np.unique(values, axis=0)


def _remove_variables(samples, variables):
    """
    Remove `variables` from the `samples`.

    Returns:
      tuple (new_samples, moved, mapping) where `moved[i]` are the values
      taken by the variables in old sample i, and `mapping[i]` is the
      position of old sample i in `new_samples`.
    """
    positions = []
    for v in variables:
        if v not in samples.names:
            raise InvalidParameterError(
                "can not densify along '{}' which is not present in the "
                "samples: [{}]".format(v, ", ".join(samples.names)))
        positions.append(samples.names.index(v))

    kept = [i for i in range(samples.size) if i not in positions]
    if len(kept) == 0:
        raise InvalidParameterError(
            "can not densify along all the sample variables: [{}]".format(
                ", ".join(samples.names)))
    moved = samples.values[:, positions]
    remaining = samples.values[:, kept]

    new_samples = Indexes([samples.names[i] for i in kept], remaining)
    mapping = np.array([new_samples.position(row) for row in remaining],
                       dtype=int)
    return new_samples, moved, mapping


def _scatter(old, n_rows, n_cols, n_old, mapping, moved, block_of):
    new = np.zeros((n_rows, n_cols))
    for old_i, (new_i, value) in enumerate(zip(mapping, moved.tolist())):
        k = block_of.get(tuple(value))
        if k is None:
            continue
        new[new_i, k*n_old:(k + 1)*n_old] = old[old_i]
    return new
