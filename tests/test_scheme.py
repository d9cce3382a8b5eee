import pickle

import numpy as np
import pytest

from mphe.utils import ParameterError
from mphe.scheme import Params, PN10QP30, Context, KeyGenerator, Encryptor, Decryptor, SecretKey


class TestParams:
    def test_default_preset(self):
        assert PN10QP30.N == 1024
        assert (PN10QP30.q - 1) % (2 * PN10QP30.N) == 0

    def test_copy_overrides(self):
        params = PN10QP30.copy(seed=5, logN=4)
        assert params.seed == 5 and params.N == 16
        assert PN10QP30.seed is None

    @pytest.mark.parametrize("kwargs", [
        dict(logN=0, q=998244353, t=16),
        dict(logN=4, q=998244353, t=1),
        dict(logN=4, q=998244353, t=16, sigma=-1.0),
    ])
    def test_rejects_bad_params(self, kwargs):
        with pytest.raises(ParameterError):
            Params(**kwargs)

    def test_context_rejects_malformed_ring(self):
        with pytest.raises(ParameterError):
            Context(Params(logN=4, q=91, t=4))


class TestEncryption:
    def test_encrypt_decrypt(self, context):
        sk, pk = KeyGenerator(context).gen_key_pair()
        message = np.arange(context.params.N) % context.params.t

        ct = Encryptor(context, pk).encrypt(message)
        decryptor = Decryptor(context, sk)

        assert np.array_equal(decryptor.decrypt(ct), message)
        assert decryptor.noise(ct, message) < context.delta // 2

    def test_short_message_is_zero_padded(self, context):
        sk, pk = KeyGenerator(context).gen_key_pair()

        ct = Encryptor(context, pk).encrypt([3, 1, 4])
        decrypted = Decryptor(context, sk).decrypt(ct)

        assert decrypted[:3].tolist() == [3, 1, 4]
        assert not decrypted[3:].any()

    def test_wrong_key_does_not_decrypt(self, context):
        keygen = KeyGenerator(context)
        _, pk = keygen.gen_key_pair()
        other_sk, _ = keygen.gen_key_pair()
        message = context.prng.integers(0, context.params.t, context.params.N)

        ct = Encryptor(context, pk).encrypt(message)

        assert not np.array_equal(Decryptor(context, other_sk).decrypt(ct), message)

    def test_public_key_is_minus_a_s_plus_small_error(self, context):
        ring = context.ring()
        sk, pk = KeyGenerator(context).gen_key_pair()
        pk0, a = pk.get()

        # pk0 + a * s = e (NTT domain)
        e = ring.new_poly()
        ring.mul_coeffs(a, sk.get(), e)
        ring.add(e, pk0, e)
        ring.inv_ntt(e, e)

        bound = int(6 * context.params.sigma)
        assert 0 < np.max(np.abs(ring.centered(e))) <= bound

    def test_key_shares_sum_to_collective_key(self, context):
        ring = context.ring()
        shares, collective = KeyGenerator(context).gen_secret_key_shares(4)

        acc = ring.new_poly()
        for share in shares:
            ring.add(acc, share.get(), acc)

        assert len(shares) == 4
        assert acc.equal(collective.get())

    def test_collective_key_decrypts(self, context):
        keygen = KeyGenerator(context)
        _, collective = keygen.gen_secret_key_shares(3)
        pk = keygen.gen_public_key(collective)
        message = context.prng.integers(0, context.params.t, context.params.N)

        ct = Encryptor(context, pk).encrypt(message)

        assert np.array_equal(Decryptor(context, collective).decrypt(ct), message)

    def test_ciphertext_survives_pickling(self, context):
        sk, pk = KeyGenerator(context).gen_key_pair()
        ct = pickle.loads(pickle.dumps(Encryptor(context, pk).encrypt([1, 2, 3])))
        assert Decryptor(context, sk).decrypt(ct)[:3].tolist() == [1, 2, 3]

    def test_seeded_contexts_agree(self, params):
        sk1 = KeyGenerator(Context(params)).gen_secret_key()
        sk2 = KeyGenerator(Context(params)).gen_secret_key()
        assert isinstance(sk1, SecretKey)
        assert sk1.get().equal(sk2.get())
