#!/usr/bin/env python

"""
Half neighbor list for isolated and periodic structures.

Each unordered pair of atoms closer than the cutoff is reported once,
using the shortest periodic image.

"""

import numpy as np
from scipy.spatial import cKDTree

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


EPS = 100.0*np.finfo(float).eps


class NeighborList(object):

    def __init__(self, coordinates, lattice_vectors=None,
                 interaction_range=None):
        """
        coordinates       Nx3 2-dimensional array with the Cartesian
                          coordinates
        lattice_vectors   3x3 2-dimensional array whose rows are
                          the lattice vectors; if no lattice vectors are
                          specified, or if they are all zero, the
                          structure is treated as isolated
        interaction_range cutoff radius; only pairs strictly closer than
                          this distance are kept
        """

        if interaction_range is None or not interaction_range > 0.0:
            raise ValueError(
                "invalid interaction range: {}".format(interaction_range))

        self._coo = np.array(coordinates, dtype=float).reshape(-1, 3)
        self._ncoo = len(self._coo)
        self._range = float(interaction_range)

        if lattice_vectors is None or not np.any(lattice_vectors):
            self._pbc = False
            self._avec = None
        else:
            self._pbc = True
            self._avec = np.array(lattice_vectors, dtype=float)
            if abs(np.linalg.det(self._avec)) < EPS:
                raise ValueError("lattice vectors are linearly dependent")

        if self._pbc:
            self._T_latt = np.array(
                [[0, 0, 0]] + self.star_setup(self._avec, self._range))
        else:
            self._T_latt = np.array([[0, 0, 0]])

        self._build_neighbor_list()

    def __str__(self):
        ostr = "\n Instance of the NeighborList class\n\n"
        ostr += " interaction range          : {}\n".format(self._range)
        ostr += " periodic                   : {}\n".format(self._pbc)
        ostr += " lattice translations       : {}\n".format(
            len(self._T_latt))
        ostr += " total number of atoms      : {}\n".format(self.num_coords)
        ostr += " number of pairs            : {}\n".format(self.num_pairs)
        return ostr

    def __repr__(self):
        return self.__str__()

    @property
    def coords(self):
        """
        List of all coordinates.
        """
        return self._coo

    @property
    def interaction_range(self):
        """
        Interaction range.
        """
        return self._range

    @property
    def lattice_vectors(self):
        """
        Matrix of lattice vectors (in rows), None for isolated structures.
        """
        return self._avec

    @property
    def num_coords(self):
        """
        Total number of coordinates (= len(coo)).
        """
        return self._ncoo

    @property
    def num_pairs(self):
        return len(self._first)

    @property
    def pairs(self):
        """
        Tuple (first, second, vectors) of arrays, sorted by (first,
        second), with first < second.
        """
        return (self._first, self._second, self._vectors)

    def pairs_containing(self, i):
        """
        Indices (into the arrays of `pairs`) of all pairs containing
        coordinate i.
        """
        return self._containing[i]

    def cart2frac(self, cart_coords, avec=None):
        """
        Convert Cartesian coordinates to fractional lattice coordinates.

        Arguments:
          cart_coords[i,j]  j-th component of the Cartesian coordinates of
                            the i-th particle
          avec[i,j]         j-th component of the i-th lattice vector;
                            if no lattice vectors are given, self._avec
                            will be used

        Returns:
          frac_coords  ndarray with the fractional coordinates
        """

        if avec is None:
            avec = self._avec

        bvec = np.linalg.inv(avec)
        frac_coords = np.dot(np.array(cart_coords), bvec)

        return frac_coords

    def frac2cart(self, frac_coords, avec=None):
        """
        Convert fractional lattice coordinates to Cartesian coordinates.
        """

        if avec is None:
            avec = self._avec

        cart_coords = np.dot(np.array(frac_coords), avec)

        return cart_coords

    def star_setup(self, lattice_vectors, interaction_range):
        """
        Determine all translation vectors that can bring a periodic
        image within the interaction range of an atom in the home cell.

        Arguments:
          lattice_vectors    2-d ndarray with the lattice vectors as rows
          interaction_range  the range of the interaction

        Returns:
          A list containing the translation vectors, without (0, 0, 0).

        """

        # the distance between lattice planes is 1/|b_i|, with b_i the
        # columns of the inverse lattice matrix
        bvec = np.linalg.inv(lattice_vectors)
        blen = np.linalg.norm(bvec, axis=0)
        n = np.array(np.ceil(interaction_range*blen), dtype=int) + 1

        star = []
        for ix in range(-n[0], n[0]+1):
            for iy in range(-n[1], n[1]+1):
                for iz in range(-n[2], n[2]+1):
                    if (ix, iy, iz) == (0, 0, 0):
                        continue
                    star.append((ix, iy, iz))

        return star

    def _build_neighbor_list(self):
        if self._pbc:
            first, second, vectors = self._periodic_pairs()
        else:
            first, second, vectors = self._isolated_pairs()

        order = np.lexsort((second, first))
        self._first = first[order]
        self._second = second[order]
        self._vectors = vectors[order]

        self._containing = [[] for _ in range(self._ncoo)]
        for k, (i, j) in enumerate(zip(self._first, self._second)):
            self._containing[i].append(k)
            self._containing[j].append(k)

    def _isolated_pairs(self):
        if self._ncoo < 2:
            return _no_pairs()
        tree = cKDTree(self._coo)
        ij = tree.query_pairs(self._range, output_type='ndarray')
        if len(ij) == 0:
            return _no_pairs()
        ij = np.sort(ij, axis=1)
        vectors = self._coo[ij[:, 1]] - self._coo[ij[:, 0]]
        d2 = np.sum(vectors*vectors, axis=1)
        keep = d2 < self._range**2
        return ij[keep, 0], ij[keep, 1], vectors[keep]

    def _periodic_pairs(self):
        if self._ncoo < 2:
            return _no_pairs()

        frac = self.cart2frac(self._coo)
        # wrap all coordinates to the [0:1[ interval
        frac -= np.floor(frac)
        home = self.frac2cart(frac)

        # periodic images, translation-major: image k is atom k % N
        # translated by T_latt[k // N]
        images = (frac[np.newaxis, :, :]
                  + self._T_latt[:, np.newaxis, :]).reshape(-1, 3)
        images = self.frac2cart(images)
        tree = cKDTree(images)

        # shortest image for every unordered pair (i, j), i < j
        shortest = {}
        for i, neighbors in enumerate(
                tree.query_ball_point(home, self._range)):
            for k in neighbors:
                j = k % self._ncoo
                if j <= i:
                    continue
                vector = images[k] - home[i]
                d2 = np.dot(vector, vector)
                if d2 >= self._range**2:
                    continue
                if (i, j) not in shortest or d2 < shortest[(i, j)][0]:
                    shortest[(i, j)] = (d2, vector)

        if len(shortest) == 0:
            return _no_pairs()

        keys = list(shortest.keys())
        first = np.array([k[0] for k in keys], dtype=int)
        second = np.array([k[1] for k in keys], dtype=int)
        vectors = np.array([shortest[k][1] for k in keys])
        return first, second, vectors


def _no_pairs():
    return (np.zeros(0, dtype=int), np.zeros(0, dtype=int),
            np.zeros((0, 3)))
