from numpy import array, eye, dot, linalg, sqrt, around, asarray, diag

def superpose_rot_trans(X,Y):
    """Takes the N x 3 numpy array coordinates of X and Y, aligns X onto Y, and returns the rotation matrix and translation vector

    The transform is applied to row vectors: aligned = dot(X, R) + T.

    Least-squares rigid fit (Kabsch): both point sets are centered on their
    centroids, the SVD of the 3 x 3 cross-covariance matrix gives the
    rotation, and the sign of the last singular vector is flipped when the
    result would be a reflection.
    """
    X, Y = asarray(X, dtype=float), asarray(Y, dtype=float)
    assert X.shape == Y.shape and X.ndim == 2 and X.shape[1] == 3, 'Expected two N x 3 arrays, got %s and %s' % (X.shape, Y.shape)
    assert len(X) > 0, 'Cannot superpose empty coordinate sets'

    EYE = eye(3)
    if (X == Y).all():
        return EYE, array([0.,0.,0.])

    Xmean, Ymean = X.mean(0), Y.mean(0)
    Xc = X - Xmean
    Yc = Y - Ymean

    H = dot(Xc.T, Yc)
    U, S, Vt = linalg.svd(H)

    ## Correct for reflection
    d = 1.0 if linalg.det(dot(U, Vt)) >= 0 else -1.0
    R = dot(dot(U, diag([1.0, 1.0, d])), Vt)
    T = Ymean - dot(Xmean, R)

    R = around(R, decimals=12)
    T = around(T, decimals=12)
    return R, T

def rmsd(X, Y):
    """Root-mean-square deviation between two corresponding N x 3 coordinate sets"""
    X, Y = asarray(X, dtype=float), asarray(Y, dtype=float)
    return float(sqrt(((X - Y)**2).sum(1).mean()))
