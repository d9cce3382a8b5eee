import numpy as np

from mphe.utils import DEBUG_LEVEL, TERM, check
from mphe.ring import Ring, GaussianSampler, TernarySampler, UniformSampler

"""
NOTE: Minimal BFV-style scheme used as the context of the multiparty protocols.
Keys live in the NTT domain, ciphertexts in the coefficient domain, and a
ciphertext [c0, c1] decrypts under s as round(t * (c0 + c1 * s) / q) mod t.
"""

# Truncation of the standard noise distribution, in standard deviations
NOISE_BOUND_FACTOR = 6

# Nonzero density of freshly generated secret keys (uniform ternary)
SECRET_KEY_DENSITY = 2.0 / 3.0

class Params:
    def __init__(self, logN, q, t, sigma=3.2, seed=None):
        check(isinstance(logN, int) and logN >= 1, 'logN must be an integer >= 1 (got {})', logN)
        check(isinstance(t, int) and 2 <= t < q, 'plaintext modulus must be in [2, q) (got {})', t)
        check(sigma >= 0, 'sigma must be non-negative (got {})', sigma)

        self.logN = logN
        self.q = q
        self.t = t
        self.sigma = sigma
        self.seed = seed

    @property
    def N(self):
        return 1 << self.logN

    def copy(self, **kwargs):
        fields = dict(logN=self.logN, q=self.q, t=self.t, sigma=self.sigma, seed=self.seed)
        fields.update(kwargs)
        return Params(**fields)

    def __repr__(self):
        return 'Params(logN={}, q={}, t={}, sigma={}, seed={})'.format(self.logN, self.q, self.t, self.sigma, self.seed)

# N = 1024, 30-bit NTT prime (119 * 2^23 + 1)
PN10QP30 = Params(logN=10, q=998244353, t=16, sigma=3.2)

class Context:
    def __init__(self, params):
        self.params = params
        self._ring = Ring(params.N, params.q)
        self.delta = params.q // params.t

        # Single randomness source shared by every sampler of the context
        self.prng = np.random.default_rng(params.seed)

        self._gaussian_sampler = GaussianSampler(self._ring, self.prng, params.sigma, int(NOISE_BOUND_FACTOR * params.sigma))
        self._ternary_sampler = TernarySampler(self._ring, self.prng)
        self._uniform_sampler = UniformSampler(self._ring, self.prng)

        TERM.trace(DEBUG_LEVEL.ALL, 'Context: {}'.format(params))

    def ring(self):
        return self._ring

    def gaussian_sampler(self):
        return self._gaussian_sampler

    def ternary_sampler(self):
        return self._ternary_sampler

    def uniform_sampler(self):
        return self._uniform_sampler

    def new_ciphertext(self):
        return Ciphertext([ self._ring.new_poly(), self._ring.new_poly() ])

    # Encodes an integer vector (length <= N) as a plaintext polynomial mod t
    def encode(self, values):
        values = np.asarray(values, dtype=np.int64)
        check(values.ndim == 1 and values.shape[0] <= self.params.N,
            'plaintext must be a vector of at most {} values', self.params.N)

        m = np.zeros(self.params.N, dtype=np.int64)
        m[:values.shape[0]] = values % self.params.t
        return m

### Keys and ciphertexts ###

class SecretKey:
    def __init__(self, value):
        self.value = value  # NTT domain

    def get(self):
        return self.value

class PublicKey:
    def __init__(self, value):
        self.value = value  # [pk0, pk1], NTT domain

    def get(self):
        return self.value

class Ciphertext:
    def __init__(self, value):
        self._value = value # [c0, c1], coefficient domain

    def value(self):
        return self._value

    def __getitem__(self, i):
        return self._value[i]

    def copy(self):
        return Ciphertext([ p.copy() for p in self._value ])

### Key generation / encryption / decryption ###

class KeyGenerator:
    def __init__(self, context):
        self.context = context
        self.ring = context.ring()

    def gen_secret_key(self):
        sk = self.ring.new_poly()
        self.context.ternary_sampler().sample_ntt(SECRET_KEY_DENSITY, sk)
        return SecretKey(sk)

    # pk = (-(a * s) + e, a)
    def gen_public_key(self, sk):
        ring = self.ring

        a = self.context.uniform_sampler().sample_new()  # uniform in either domain
        pk0 = ring.new_poly()
        ring.mul_coeffs(a, sk.get(), pk0)
        ring.inv_ntt(pk0, pk0)
        ring.neg(pk0, pk0)

        e = self.context.gaussian_sampler().sample_new()
        ring.add(pk0, e, pk0)
        ring.ntt(pk0, pk0)

        return PublicKey([ pk0, a ])

    def gen_key_pair(self):
        sk = self.gen_secret_key()
        return sk, self.gen_public_key(sk)

    # Independent party keys together with their sum (the collective key)
    def gen_secret_key_shares(self, n):
        check(n >= 1, 'need at least one party (got {})', n)

        shares = [ self.gen_secret_key() for _ in range(n) ]

        collective = self.ring.new_poly()
        for share in shares:
            self.ring.add(collective, share.get(), collective)

        return shares, SecretKey(collective)

class Encryptor:
    def __init__(self, context, pk):
        self.context = context
        self.ring = context.ring()
        self.pk = pk

    # [delta * m + u * pk0 + e0, u * pk1 + e1]
    def encrypt(self, values, ct_out=None):
        ring = self.ring
        pk0, pk1 = self.pk.get()

        ct = self.context.new_ciphertext() if ct_out is None else ct_out
        c0, c1 = ct.value()

        u = ring.new_poly()
        self.context.ternary_sampler().sample_ntt(SECRET_KEY_DENSITY, u)

        ring.mul_coeffs(u, pk0, c0)
        ring.mul_coeffs(u, pk1, c1)
        ring.inv_ntt(c0, c0)
        ring.inv_ntt(c1, c1)

        e = ring.new_poly()
        self.context.gaussian_sampler().sample(e)
        ring.add(c0, e, c0)
        self.context.gaussian_sampler().sample(e)
        ring.add(c1, e, c1)

        m = ring.from_coeffs(self.context.encode(values))
        ring.mul_scalar(m, self.context.delta, m)
        ring.add(c0, m, c0)

        return ct

class Decryptor:
    def __init__(self, context, sk):
        self.context = context
        self.ring = context.ring()
        self.sk = sk

    # c0 + c1 * s (coefficient domain)
    def _phase(self, ct):
        ring = self.ring
        c0, c1 = ct.value()

        p = ring.new_poly()
        ring.ntt(c1, p)
        ring.mul_coeffs(p, self.sk.get(), p)
        ring.inv_ntt(p, p)
        ring.add(p, c0, p)
        return p

    def decrypt(self, ct):
        p = self._phase(ct)
        q, t = self.context.params.q, self.context.params.t

        # round(t * x / q) with exact integer arithmetic
        x = p.coeffs.astype(object)
        m = (x * t * 2 + q) // (2 * q)
        return np.array([ int(v) % t for v in m ], dtype=np.int64)

    # Infinity norm of the decryption error against the expected plaintext
    def noise(self, ct, values):
        p = self._phase(ct)
        m = self.ring.from_coeffs(self.context.encode(values))
        self.ring.mul_scalar(m, self.context.delta, m)
        self.ring.sub(p, m, p)
        return int(np.max(np.abs(self.ring.centered(p))))
