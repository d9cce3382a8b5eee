import numpy as np

from mphe.utils import DEBUG_LEVEL, TERM, check

"""
NOTE: Reference ring engine for Z_q[X]/(X^N + 1). Polynomials are numpy int64
vectors with coefficients in [0, q). Multiplication goes through a negacyclic
NTT (vectorized per stage), so q must be a prime with 2N | q - 1. Products of two
reduced coefficients must fit in an int64, hence q < 2^31.
"""

MAX_MODULUS = 2**31

class Poly():
    def __init__(self, N, q):
        self.q = q
        self.coeffs = np.zeros(N, dtype=np.int64)

    @property
    def degree(self):
        return self.coeffs.shape[0]

    # Returns a deep copy of the polynomial
    def copy(self):
        p = Poly(self.degree, self.q)
        p.coeffs[:] = self.coeffs
        return p

    # Sets every coefficient to zero (in place)
    def zero(self):
        self.coeffs.fill(0)

    def is_zero(self):
        return not self.coeffs.any()

    def equal(self, other):
        return self.q == other.q and np.array_equal(self.coeffs, other.coeffs)

    def __eq__(self, other):
        if not isinstance(other, Poly):
            return NotImplemented
        return self.equal(other)

    __hash__ = None

    def __repr__(self):
        return 'Poly(N={}, q={})'.format(self.degree, self.q)

### Helper Functions ###

# Deterministic Miller-Rabin for n < 3,215,031,751
def _is_prime(n):
    if n < 2:
        return False
    for p in (2, 3, 5, 7):
        if n % p == 0:
            return n == p

    d, r = n - 1, 0
    while d % 2 == 0:
        d //= 2
        r += 1

    for a in (2, 3, 5, 7):
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(r - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True

# Distinct prime factors of n
def _factorize(n):
    factors = []
    p = 2
    while p * p <= n:
        if n % p == 0:
            factors.append(p)
            while n % p == 0:
                n //= p
        p += 1 if p == 2 else 2
    if n > 1:
        factors.append(n)
    return factors

# Smallest generator of Z_q^* (q prime)
def _find_generator(q):
    phi = q - 1
    primes = _factorize(phi)
    for g in range(2, q):
        if all(pow(g, phi // p, q) != 1 for p in primes):
            return g

def _bit_reverse(N):
    logN = N.bit_length() - 1
    rev = np.zeros(N, dtype=np.int64)
    for i in range(N):
        x, r = i, 0
        for _ in range(logN):
            r = (r << 1) | (x & 1)
            x >>= 1
        rev[i] = r
    return rev

# Powers w^0, ..., w^(n-1) mod q
def _powers(w, n, q):
    pows = np.empty(n, dtype=np.int64)
    acc = 1
    for i in range(n):
        pows[i] = acc
        acc = (acc * w) % q
    return pows

class Ring():
    def __init__(self, N, q):
        check(isinstance(N, (int, np.integer)) and N >= 2 and N & (N - 1) == 0,
            'ring degree must be a power of two >= 2 (got {})', N)
        check(isinstance(q, (int, np.integer)) and 2 < q < MAX_MODULUS,
            'modulus must be an integer in (2, 2^31) (got {})', q)
        check(_is_prime(q), 'modulus {} is not prime', q)
        check((q - 1) % (2 * N) == 0, 'modulus {} is not NTT friendly for N={} (2N must divide q-1)', q, N)

        self.N = int(N)
        self.q = int(q)

        # psi: primitive 2N-th root of unity, omega = psi^2
        g = _find_generator(self.q)
        psi = pow(g, (self.q - 1) // (2 * self.N), self.q)
        psi_inv = pow(psi, self.q - 2, self.q)
        omega = (psi * psi) % self.q
        omega_inv = pow(omega, self.q - 2, self.q)
        N_inv = pow(self.N, self.q - 2, self.q)

        self.psi = psi

        # Negacyclic twist (the inverse twist also carries N^-1)
        self.psi_pows = _powers(psi, self.N, self.q)
        self.psi_inv_pows = (_powers(psi_inv, self.N, self.q) * N_inv) % self.q

        self.rev = _bit_reverse(self.N)

        # Per stage twiddles of the iterative (DIT) transform
        self.stage_roots = []
        self.stage_roots_inv = []

        m = 2
        while m <= self.N:
            half = m >> 1
            self.stage_roots.append(_powers(pow(omega, self.N // m, self.q), half, self.q))
            self.stage_roots_inv.append(_powers(pow(omega_inv, self.N // m, self.q), half, self.q))
            m <<= 1

        TERM.trace(DEBUG_LEVEL.ALL, 'Ring: N={} q={} psi={}'.format(self.N, self.q, self.psi))

    def __repr__(self):
        return 'Ring(N={}, q={})'.format(self.N, self.q)

    def new_poly(self):
        return Poly(self.N, self.q)

    # Builds a polynomial from (possibly signed) integer coefficients
    def from_coeffs(self, coeffs):
        coeffs = np.asarray(coeffs, dtype=np.int64)
        check(coeffs.ndim == 1 and coeffs.shape[0] <= self.N,
            'expected at most {} coefficients (got shape {})', self.N, coeffs.shape)

        p = self.new_poly()
        p.coeffs[:coeffs.shape[0]] = coeffs % self.q
        return p

    # Contract check: every operand must belong to this ring
    def check_polys(self, *polys):
        for p in polys:
            check(isinstance(p, Poly), 'expected a Poly (got {})', type(p).__name__)
            check(p.degree == self.N and p.q == self.q,
                'polynomial {} does not belong to {}', p, self)

    ### Domain transforms ###

    def _transform(self, a, roots):
        q = self.q
        a = a[self.rev]

        for stage in roots:
            half = stage.shape[0]
            blocks = a.reshape(-1, 2 * half)

            even = blocks[:, :half]
            odd = (blocks[:, half:] * stage) % q

            a = np.concatenate(((even + odd) % q, (even - odd) % q), axis=1).reshape(self.N)

        return a

    # Coefficient domain -> NTT domain (p1 may alias p)
    def ntt(self, p, p1):
        self.check_polys(p, p1)
        twisted = (p.coeffs * self.psi_pows) % self.q
        p1.coeffs[:] = self._transform(twisted, self.stage_roots)

    # NTT domain -> coefficient domain (p1 may alias p)
    def inv_ntt(self, p, p1):
        self.check_polys(p, p1)
        a = self._transform(p.coeffs, self.stage_roots_inv)
        p1.coeffs[:] = (a * self.psi_inv_pows) % self.q

    ### Elementwise arithmetic (all in-place safe) ###

    def add(self, p1, p2, p3):
        self.check_polys(p1, p2, p3)
        np.add(p1.coeffs, p2.coeffs, out=p3.coeffs)
        np.remainder(p3.coeffs, self.q, out=p3.coeffs)

    def sub(self, p1, p2, p3):
        self.check_polys(p1, p2, p3)
        np.subtract(p1.coeffs, p2.coeffs, out=p3.coeffs)
        np.remainder(p3.coeffs, self.q, out=p3.coeffs)

    def neg(self, p1, p2):
        self.check_polys(p1, p2)
        np.subtract(self.q, p1.coeffs, out=p2.coeffs)
        np.remainder(p2.coeffs, self.q, out=p2.coeffs)

    def copy(self, p1, p2):
        self.check_polys(p1, p2)
        p2.coeffs[:] = p1.coeffs

    # Multiplies every coefficient by an integer scalar
    def mul_scalar(self, p1, scalar, p2):
        self.check_polys(p1, p2)
        p2.coeffs[:] = (p1.coeffs * (int(scalar) % self.q)) % self.q

    ### NTT domain products ###

    # p3 = p1 * p2 (pointwise)
    def mul_coeffs(self, p1, p2, p3):
        self.check_polys(p1, p2, p3)
        p3.coeffs[:] = (p1.coeffs * p2.coeffs) % self.q

    # p3 += p1 * p2 (pointwise)
    def mul_coeffs_and_add(self, p1, p2, p3):
        self.check_polys(p1, p2, p3)
        p3.coeffs[:] = (p3.coeffs + (p1.coeffs * p2.coeffs) % self.q) % self.q

    # Full ring product of two coefficient domain polynomials
    def mul_poly(self, p1, p2, p3):
        a = self.new_poly()
        b = self.new_poly()
        self.ntt(p1, a)
        self.ntt(p2, b)
        self.mul_coeffs(a, b, p3)
        self.inv_ntt(p3, p3)

    # Signed representative of every coefficient, in (-q/2, q/2]
    def centered(self, p):
        self.check_polys(p)
        c = p.coeffs.copy()
        c[c > self.q // 2] -= self.q
        return c

### Samplers ###

class GaussianSampler():
    def __init__(self, ring, prng, sigma, bound):
        check(sigma >= 0, 'standard deviation must be non-negative (got {})', sigma)
        check(bound >= 0, 'truncation bound must be non-negative (got {})', bound)

        self.ring = ring
        self.prng = prng
        self.sigma = float(sigma)
        self.bound = int(bound)

    # Rounded normal draws, resampled until every |x| <= bound
    def draw(self):
        N = self.ring.N

        if self.sigma == 0 or self.bound == 0:
            return np.zeros(N, dtype=np.int64)

        x = np.rint(self.prng.normal(0.0, self.sigma, N)).astype(np.int64)
        rejected = np.abs(x) > self.bound

        while rejected.any():
            x[rejected] = np.rint(self.prng.normal(0.0, self.sigma, int(rejected.sum()))).astype(np.int64)
            rejected = np.abs(x) > self.bound

        return x

    def sample(self, pol):
        self.ring.check_polys(pol)
        pol.coeffs[:] = self.draw() % self.ring.q

    def sample_new(self):
        pol = self.ring.new_poly()
        self.sample(pol)
        return pol

class TernarySampler():
    def __init__(self, ring, prng):
        self.ring = ring
        self.prng = prng

    # Coefficients in {-1, 0, 1}: P(0) = 1 - p, P(1) = P(-1) = p / 2
    def sample(self, p, pol):
        check(0.0 <= p <= 1.0, 'ternary density must be in [0, 1] (got {})', p)
        self.ring.check_polys(pol)

        r = self.prng.random(self.ring.N)

        pol.zero()
        pol.coeffs[r < p / 2] = 1
        pol.coeffs[(r >= p / 2) & (r < p)] = self.ring.q - 1

    # Same distribution, output left in the NTT domain
    def sample_ntt(self, p, pol):
        self.sample(p, pol)
        self.ring.ntt(pol, pol)

class UniformSampler():
    def __init__(self, ring, prng):
        self.ring = ring
        self.prng = prng

    def sample(self, pol):
        self.ring.check_polys(pol)
        pol.coeffs[:] = self.prng.integers(0, self.ring.q, self.ring.N, dtype=np.int64)

    def sample_new(self):
        pol = self.ring.new_poly()
        self.sample(pol)
        return pol
