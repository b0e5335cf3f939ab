#!/usr/bin/env python3

import pytest
import numpy as np

from pyglycoensemble.superimpy import superpose_rot_trans, rmsd
from pytest import approx

def rotation(axis, degrees):
    axis = np.asarray(axis, dtype=float) / np.linalg.norm(axis)
    theta = np.radians(degrees)
    K = np.array([
        [0, -axis[2], axis[1]],
        [axis[2], 0, -axis[0]],
        [-axis[1], axis[0], 0],
    ])
    return np.eye(3) + np.sin(theta) * K + (1 - np.cos(theta)) * K @ K

@pytest.fixture
def points():
    return np.random.default_rng(1).normal(scale=5, size=(20, 3))

@pytest.mark.parametrize(
        'axis, degrees, T', [
            ([0, 0, 1], 30, [0, 0, 0]),
            ([1, 1, 0], 120, [10, -4, 2.5]),
            ([1, -2, 3], 179, [-30, 0, 7]),
        ],
)
def test_recover_transform(points, axis, degrees, T):
    R0 = rotation(axis, degrees)
    Y = points @ R0 + T

    R, T_fit = superpose_rot_trans(points, Y)

    assert R == approx(R0, abs=1e-9)
    assert T_fit == approx(np.array(T, dtype=float), abs=1e-9)
    assert rmsd(points @ R + T_fit, Y) == approx(0, abs=1e-9)

def test_identity(points):
    R, T = superpose_rot_trans(points, points)
    assert R == approx(np.eye(3))
    assert T == approx(np.zeros(3))

def test_no_reflection(points):
    mirror = points * [1, 1, -1]
    R, T = superpose_rot_trans(points, mirror)

    assert np.linalg.det(R) == approx(1)
    assert rmsd(points @ R + T, mirror) > 0

def test_rmsd():
    X = np.zeros((4, 3))
    Y = np.array([[1, 0, 0], [0, 1, 0], [0, 0, 1], [0, 0, 0]], dtype=float)
    assert rmsd(X, Y) == approx(np.sqrt(3 / 4))
