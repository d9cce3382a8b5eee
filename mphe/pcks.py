from mphe.utils import DEBUG_LEVEL, TERM, check
from mphe.ring import GaussianSampler

"""
NOTE: Collective public key switching (PCKS). Every party holds an additive
share s_i of the key s = sum(s_i) under which a ciphertext ct = [c0, c1] is
decryptable. In a single round, each party publishes

    [s_i * c1 + u_i * pk0 + e0_i, u_i * pk1 + e1_i]

and the sum of all N shares turns ct into an encryption of the same message
under the target public key pk = [pk0, pk1]. Nobody learns s or any s_i.

A protocol instance owns a scratch polynomial that is reused by every call:
one instance must not be used from several threads at the same time.
"""

# Smudging noise is truncated at this many standard deviations
SMUDGING_BOUND_FACTOR = 6

# Nonzero density of the ephemeral mask u_i
TERNARY_DENSITY = 0.5

class PCKSShare:
    def __init__(self, h0, h1):
        self.value = [ h0, h1 ]

    def __getitem__(self, i):
        return self.value[i]

    def __len__(self):
        return 2

    def __iter__(self):
        return iter(self.value)

    def equal(self, other):
        return self.value[0].equal(other[0]) and self.value[1].equal(other[1])

    def __eq__(self, other):
        if not isinstance(other, PCKSShare):
            return NotImplemented
        return self.equal(other)

    __hash__ = None

class PCKSProtocol:
    def __init__(self, context, sigma_smudging):
        check(isinstance(sigma_smudging, (int, float)) and sigma_smudging >= 0,
            'smudging standard deviation must be non-negative (got {})', sigma_smudging)

        self.ring = context.ring()
        self.sigma_smudging = float(sigma_smudging)

        # Wide noise of the protocol, standard noise and mask samplers of the scheme
        self.gaussian_sampler_smudge = GaussianSampler(self.ring, context.prng, self.sigma_smudging,
            int(SMUDGING_BOUND_FACTOR * self.sigma_smudging))
        self.gaussian_sampler = context.gaussian_sampler()
        self.ternary_sampler = context.ternary_sampler()

        self.tmp = self.ring.new_poly()

        TERM.trace(DEBUG_LEVEL.ALL, 'PCKS: {} sigma_smudging={}'.format(self.ring, self.sigma_smudging))

    def allocate_share(self):
        return PCKSShare(self.ring.new_poly(), self.ring.new_poly())

    def _check_share(self, *shares):
        for share in shares:
            check(isinstance(share, PCKSShare), 'expected a PCKSShare (got {})', type(share).__name__)
            self.ring.check_polys(share[0], share[1])

    # Computes this party's share and writes it to share_out:
    #
    #   [s_i * c1 + u_i * pk0 + e0_i, u_i * pk1 + e1_i]
    #
    # The result is safe to broadcast to the other parties.
    def gen_share(self, sk, pk, ct, share_out):
        ring = self.ring
        pk0, pk1 = pk.get()
        c0, c1 = ct.value()

        self._check_share(share_out)
        ring.check_polys(sk.get(), pk0, pk1, c0, c1)

        # u_i (NTT)
        self.ternary_sampler.sample_ntt(TERNARY_DENSITY, self.tmp)

        # h0 = u_i * pk0, h1 = u_i * pk1 (NTT)
        ring.mul_coeffs(self.tmp, pk0, share_out[0])
        ring.mul_coeffs(self.tmp, pk1, share_out[1])

        # h0 += s_i * c1 (NTT)
        ring.ntt(c1, self.tmp)
        ring.mul_coeffs_and_add(sk.get(), self.tmp, share_out[0])

        ring.inv_ntt(share_out[0], share_out[0])
        ring.inv_ntt(share_out[1], share_out[1])

        # h0 += e0_i (smudging noise)
        self.gaussian_sampler_smudge.sample(self.tmp)
        ring.add(share_out[0], self.tmp, share_out[0])

        # h1 += e1_i
        self.gaussian_sampler.sample(self.tmp)
        ring.add(share_out[1], self.tmp, share_out[1])

        self.tmp.zero()

        TERM.trace(DEBUG_LEVEL.ALL, 'PCKS: generated share')

        return share_out

    # share_out = share1 + share2. Accumulating in place (share_out is share1) is fine.
    def aggregate_shares(self, share1, share2, share_out):
        self._check_share(share1, share2, share_out)

        self.ring.add(share1[0], share2[0], share_out[0])
        self.ring.add(share1[1], share2[1], share_out[1])

        return share_out

    # Sequential fold of every share into a new one
    def aggregate_all(self, shares):
        shares = list(shares)
        check(len(shares) > 0, 'nothing to aggregate')

        combined = self.allocate_share()
        for share in shares:
            self.aggregate_shares(combined, share, combined)

        return combined

    # ct_out = [c0 + h0, h1], where [h0, h1] must be the sum of the shares of ALL parties
    def key_switch(self, combined, ct, ct_out):
        c0, c1 = ct.value()
        out0, out1 = ct_out.value()

        self._check_share(combined)
        self.ring.check_polys(c0, c1, out0, out1)

        self.ring.add(c0, combined[0], out0)
        self.ring.copy(combined[1], out1)

        return ct_out
