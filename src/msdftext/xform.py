## vector, quaternion and 4x4 matrix operations for msdfText

## Copyright (c) 2021 msdfText contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import sqrt, sin, cos, pi

## Vectors are plain (x, y, z) tuples and quaternions are (x, y, z, w)
## tuples, so that every value handed out by this module is immutable
## and can be stored in frozen dataclasses or used as cache keys.

## A matrix is represented as a list of four row lists. As in the
## rest of the package we assume that operations like Mx imply a
## column vector. Matrices are mutable; the constructors at the bottom
## of this module always return fresh instances.

epsilon = 0.000005

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n,bool)) and isinstance(n,(int,float))

def close(a,b):
    """ are two scalars the same within epsilon
    """
    return abs(a-b) < epsilon

## 3 vector operations
## -------------------

def vec3(x=0.0,y=0.0,z=0.0):
    return (float(x),float(y),float(z))

def add(a,b):
    """ 3 vector, ``a + b``"""
    return (a[0]+b[0],a[1]+b[1],a[2]+b[2])

def sub(a,b):
    """ 3 vector, ``a - b``"""
    return (a[0]-b[0],a[1]-b[1],a[2]-b[2])

def scale(a,c):
    """ 3 vector ``a`` multiplied by scalar ``c``"""
    return (a[0]*c,a[1]*c,a[2]*c)

def dot(a,b):
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(dot(a,a))

def normalize(a):
    m = mag(a)
    if m < epsilon:
        raise ValueError('cannot normalize zero-length vector: {}'.format(a))
    return scale(a,1.0/m)

def project_on(a,b):
    """ project 3 vector ``a`` onto the direction of ``b``"""
    denom = dot(b,b)
    if denom == 0.0:
        return (0.0,0.0,0.0)
    return scale(b,dot(a,b)/denom)

def vmin(a,b):
    """ componentwise minimum of two 3 vectors"""
    return (min(a[0],b[0]),min(a[1],b[1]),min(a[2],b[2]))

## quaternion operations
## ---------------------

IDENTITY_QUAT = (0.0,0.0,0.0,1.0)

def quat_from_axis_angle(axis,angle):
    """ quaternion for a rotation of ``angle`` radians about ``axis``"""
    u = normalize(axis)
    half = angle/2.0
    s = sin(half)
    return (u[0]*s,u[1]*s,u[2]*s,cos(half))

def quat_conjugate(q):
    return (-q[0],-q[1],-q[2],q[3])

def quat_mul(a,b):
    """ Hamilton product ``ab``; the result applies ``b`` first, then ``a``"""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return (ax*bw + aw*bx + ay*bz - az*by,
            ay*bw + aw*by + az*bx - ax*bz,
            az*bw + aw*bz + ax*by - ay*bx,
            aw*bw - ax*bx - ay*by - az*bz)

def quat_rotate(q,v):
    """ rotate 3 vector ``v`` by unit quaternion ``q``"""
    qx, qy, qz, qw = q
    x, y, z = v[0], v[1], v[2]

    ix = qw*x + qy*z - qz*y
    iy = qw*y + qz*x - qx*z
    iz = qw*z + qx*y - qy*x
    iw = -qx*x - qy*y - qz*z

    return (ix*qw + iw*-qx + iy*-qz - iz*-qy,
            iy*qw + iw*-qy + iz*-qx - ix*-qz,
            iz*qw + iw*-qz + ix*-qy - iy*-qx)

def quat_close(a,b):
    """ do two unit quaternions describe the same rotation"""
    d = abs(a[0]*b[0]+a[1]*b[1]+a[2]*b[2]+a[3]*b[3])
    return close(d,1.0)

def quat_from_matrix(m):
    """ rotation quaternion from the upper 3x3 of matrix ``m``. Column
    scale is divided out first, so scaled parents are handled."""
    cols = []
    for j in range(3):
        c = (m.get(0,j),m.get(1,j),m.get(2,j))
        s = mag(c)
        if s < epsilon:
            raise ValueError('degenerate rotation matrix: {}'.format(m))
        cols.append(scale(c,1.0/s))

    m11, m12, m13 = cols[0][0], cols[1][0], cols[2][0]
    m21, m22, m23 = cols[0][1], cols[1][1], cols[2][1]
    m31, m32, m33 = cols[0][2], cols[1][2], cols[2][2]

    trace = m11 + m22 + m33
    if trace > 0:
        s = 0.5/sqrt(trace + 1.0)
        return ((m32-m23)*s, (m13-m31)*s, (m21-m12)*s, 0.25/s)
    elif m11 > m22 and m11 > m33:
        s = 2.0*sqrt(1.0 + m11 - m22 - m33)
        return (0.25*s, (m12+m21)/s, (m13+m31)/s, (m32-m23)/s)
    elif m22 > m33:
        s = 2.0*sqrt(1.0 + m22 - m11 - m33)
        return ((m12+m21)/s, 0.25*s, (m23+m32)/s, (m13-m31)/s)
    else:
        s = 2.0*sqrt(1.0 + m33 - m11 - m22)
        return ((m13+m31)/s, (m23+m32)/s, 0.25*s, (m21-m12)/s)


class Matrix:
    """4x4 transformation matrix class for transforming homogeneous 3D coordinates"""

    def __init__(self,a=None,trans=False):
        self.m = [[1.0,0.0,0.0,0.0],
                  [0.0,1.0,0.0,0.0],
                  [0.0,0.0,1.0,0.0],
                  [0.0,0.0,0.0,1.0]]
        self.trans = False

        if isinstance(a,Matrix):
            for i in range(4):
                self.setrow(i,a.getrow(i))
        elif isinstance(a,(tuple,list)):
            if len(a) == 4 and all(isinstance(r,(tuple,list)) and len(r) == 4
                                   for r in a):
                for i in range(4):
                    for j in range(4):
                        self.set(i,j,a[i][j])
            elif len(a) == 16:
                for i in range(4):
                    for j in range(4):
                        self.set(i,j,a[i*4+j])
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        elif a is not None:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        self.trans = trans

    def __repr__(self):
        return "Matrix({},{},{},{},{})".format(self.m[0],self.m[1],
                                               self.m[2],self.m[3],self.trans)

    def __eq__(self,other):
        if not isinstance(other,Matrix):
            return NotImplemented
        return all(self.getrow(i) == other.getrow(i) for i in range(4))

    #return value indexed by i,j
    def get(self,i,j):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to get: {},{}'.format(i,j))
        if self.trans:
            return self.m[j][i]
        else:
            return self.m[i][j]

    #set value indexed by i,j
    def set(self,i,j,x):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to set: {},{}'.format(i,j))
        if not isgoodnum(x):
            raise ValueError('bad value passed to set: {}'.format(x))
        if self.trans:
            self.m[j][i] = float(x)
        else:
            self.m[i][j] = float(x)

    def getrow(self,i):
        if i < 0 or i > 3:
            raise ValueError('bad row passed to getrow: {}'.format(i))
        return [self.get(i,j) for j in range(4)]

    def getcol(self,j):
        if j < 0 or j > 3:
            raise ValueError('bad column passed to getcol: {}'.format(j))
        return [self.get(i,j) for i in range(4)]

    def setrow(self,i,x):
        if len(x) != 4:
            raise ValueError('bad non-vector passed to setrow: {}'.format(x))
        for j in range(4):
            self.set(i,j,x[j])

    # matrix multiply.  If x is a matrix, compute MX.  If x is a 3 or 4
    # vector, compute Mx (3 vectors are treated as points, w=1). If x
    # is a scalar, compute xM.  Respects transpose flag.
    def mul(self,x):
        if isinstance(x,Matrix):
            result = Matrix()
            for i in range(4):
                row = self.getrow(i)
                for j in range(4):
                    col = x.getcol(j)
                    result.set(i,j,sum(row[k]*col[k] for k in range(4)))
            return result
        elif isinstance(x,(tuple,list)) and len(x) in (3,4):
            v = list(x) if len(x) == 4 else [x[0],x[1],x[2],1.0]
            result = [sum(r*c for r, c in zip(self.getrow(i),v))
                      for i in range(4)]
            return tuple(result[:len(x)])
        elif isgoodnum(x):
            return Matrix([[e*x for e in self.getrow(i)] for i in range(4)])

        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def position(self):
        """ translation component as a 3 vector"""
        return (self.get(0,3),self.get(1,3),self.get(2,3))

    def quaternion(self):
        return quat_from_matrix(self)

    def inverse_rigid(self):
        """ inverse of a rotation+translation matrix, computed analytically"""
        result = Matrix()
        for i in range(3):
            for j in range(3):
                result.set(i,j,self.get(j,i))
        t = self.position()
        for i in range(3):
            result.set(i,3,-(result.get(i,0)*t[0] +
                             result.get(i,1)*t[1] +
                             result.get(i,2)*t[2]))
        return result

    def column_major(self):
        """ flatten in column-major order, as OpenGL uniforms expect"""
        return tuple(self.get(i,j) for j in range(4) for i in range(4))


def Compose(position,quaternion=IDENTITY_QUAT,scl=1.0):
    """ matrix applying scale, then rotation, then translation"""
    if isgoodnum(scl):
        sx = sy = sz = float(scl)
    else:
        sx, sy, sz = scl
    x, y, z, w = quaternion
    x2, y2, z2 = x+x, y+y, z+z
    xx, xy, xz = x*x2, x*y2, x*z2
    yy, yz, zz = y*y2, y*z2, z*z2
    wx, wy, wz = w*x2, w*y2, w*z2

    return Matrix([[(1.0-(yy+zz))*sx, (xy-wz)*sy, (xz+wy)*sz, position[0]],
                   [(xy+wz)*sx, (1.0-(xx+zz))*sy, (yz-wx)*sz, position[1]],
                   [(xz-wy)*sx, (yz+wx)*sy, (1.0-(xx+yy))*sz, position[2]],
                   [0.0,0.0,0.0,1.0]])

# return the generalized 4x4 arbitrary axis rotation matrix, angle in degrees
def Rotation(axis,angle,inverse=False):
    if inverse:
        angle *= -1.0
    rad = (angle%360.0)*pi/180.0
    return Compose((0.0,0.0,0.0),quat_from_axis_angle(axis,rad))

def Translation(delta,inverse=False):
    if inverse:
        delta = scale(delta,-1.0)
    return Compose(delta)

def Scale(x,y=None,z=None,inverse=False):
    if isgoodnum(x):
        if isgoodnum(y) and isgoodnum(z):
            s = (x,y,z)
        else:
            s = (x,x,x)
    elif isinstance(x,(tuple,list)) and len(x) >= 3:
        s = (x[0],x[1],x[2])
    else:
        raise ValueError('bad scaling values passed to Scale')

    if inverse:
        s = (1.0/s[0],1.0/s[1],1.0/s[2])
    return Compose((0.0,0.0,0.0),IDENTITY_QUAT,s)
