import numpy as np
import pytest

from mphe import utils
from mphe.scheme import Params, Context, KeyGenerator, Encryptor, Decryptor


SMUDGING_SIGMA = 2.0**10


class Round:
    """Keys, message and input ciphertext of one PCKS round."""

    def __init__(self, context, num_parties):
        self.context = context
        self.ring = context.ring()

        keygen = KeyGenerator(context)
        self.sk_shares, self.collective_sk = keygen.gen_secret_key_shares(num_parties)
        self.collective_pk = keygen.gen_public_key(self.collective_sk)
        self.target_sk, self.target_pk = keygen.gen_key_pair()

        self.message = context.prng.integers(0, context.params.t, context.params.N)
        self.ct = Encryptor(context, self.collective_pk).encrypt(self.message)

    def decrypt(self, ct):
        return Decryptor(self.context, self.target_sk).decrypt(ct)

    def decrypts_to_message(self, ct):
        return np.array_equal(self.decrypt(ct), self.message)


@pytest.fixture
def params():
    return Params(logN=6, q=998244353, t=16, sigma=3.2, seed=utils.SEED)


@pytest.fixture
def context(params):
    return Context(params)


@pytest.fixture
def make_round(context):
    def _make(num_parties, ctx=None):
        return Round(ctx if ctx is not None else context, num_parties)

    return _make
