import sys, os, csv, time

import numpy as np

from mphe import utils
from mphe.utils import DEBUG_LEVEL, TERM, STATUS
from mphe.scheme import PN10QP30, Context, KeyGenerator, Encryptor, Decryptor
from mphe.pcks import PCKSProtocol

"""
NOTE: Simulates PCKS rounds between N parties in a single process. Shares go
through utils.simulate_network_comm, which stands in for the transport layer.
Each party runs its own protocol instance (instances are not thread safe).
"""

# One participant of the round
class Party():
    def __init__(self, idx, context, secret_key, sigma_smudging):
        self.idx = idx
        self.secret_key = secret_key
        self.protocol = PCKSProtocol(context, sigma_smudging)

    def gen_pcks_share(self, target_pk, ct):
        share = self.protocol.allocate_share()
        return self.protocol.gen_share(self.secret_key, target_pk, ct, share)

# Aggregates the parties' shares and switches the ciphertext
class Combiner():
    def __init__(self, context, sigma_smudging):
        self.context = context
        self.protocol = PCKSProtocol(context, sigma_smudging)

    def col_key_switch(self, ct, pcks_shares):
        combined = self.protocol.aggregate_all(pcks_shares)

        ct_out = self.context.new_ciphertext()
        return self.protocol.key_switch(combined, ct, ct_out)

class Simulation():
    def __init__(self, num_parties, sigma_smudging, params=PN10QP30, seed=utils.SEED):
        self.params = params.copy(seed=seed)
        self.context = Context(self.params)
        self.sigma_smudging = sigma_smudging

        keygen = KeyGenerator(self.context)

        # Additive shares of the input key + target key pair
        sk_shares, self.collective_sk = keygen.gen_secret_key_shares(num_parties)
        self.collective_pk = keygen.gen_public_key(self.collective_sk)
        self.target_sk, self.target_pk = keygen.gen_key_pair()

        self.parties = [ Party(i, self.context, sk, sigma_smudging) for i, sk in enumerate(sk_shares) ]
        self.combiner = Combiner(self.context, sigma_smudging)

        self.encryptor = Encryptor(self.context, self.collective_pk)
        self.decryptor = Decryptor(self.context, self.target_sk)

    # Runs a single round, returns (status, noise)
    def run_round(self):
        message = self.context.prng.integers(0, self.params.t, self.params.N)
        ct = self.encryptor.encrypt(message)

        # Network Communication (1)
        ct = utils.simulate_network_comm(ct)
        target_pk = utils.simulate_network_comm(self.target_pk)

        pcks_shares = []
        for party in self.parties:
            pcks_shares.append(party.gen_pcks_share(target_pk, ct))

        # Network Communication (2)
        pcks_shares = utils.simulate_network_comm(pcks_shares)

        ct_out = self.combiner.col_key_switch(ct, pcks_shares)

        noise = self.decryptor.noise(ct_out, message)
        decrypted = self.decryptor.decrypt(ct_out)

        if not np.array_equal(decrypted, message):
            return STATUS.FAILURE, noise

        return STATUS.SUCCESS, noise

    def run(self, rounds, csv_path=None):
        results = []

        for i in range(rounds):
            if utils.debug_level >= DEBUG_LEVEL.INFO:
                TERM.write_info('Round {}: {} parties, sigma_smudging={}'.format(i, len(self.parties), self.sigma_smudging))

            start = time.time()
            status, noise = self.run_round()
            elapsed = time.time() - start

            if STATUS.failed(status):
                if utils.debug_level >= DEBUG_LEVEL.ERRORS:
                    TERM.write_failure('Round {}: decryption under the target key failed (noise {})'.format(i, noise))
            elif utils.debug_level >= DEBUG_LEVEL.INFO:
                TERM.write_success('Round {}: switched in {:0.3f}s (log2 noise {:0.2f})'.format(i, elapsed, np.log2(max(noise, 1))))

            results.append([ len(self.parties), self.sigma_smudging, noise, int(STATUS.success(status)) ])

        if csv_path is not None:
            directory = os.path.dirname(csv_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(csv_path, 'a', newline='') as csv_file:
                writer = csv.writer(csv_file)
                writer.writerows(results)

        return results


### MAIN CODE ###

if __name__ == '__main__':
    num_parties = int(sys.argv[1]) if len(sys.argv) > 1 else 3
    sigma_smudging = float(sys.argv[2]) if len(sys.argv) > 2 else utils.DEFAULT_SMUDGING_SIGMA
    rounds = int(sys.argv[3]) if len(sys.argv) > 3 else 5
    csv_path = sys.argv[4] if len(sys.argv) > 4 else './noise_curves/pcks.csv'

    TERM.write_info('Simulating {} PCKS round(s) with {} parties...'.format(rounds, num_parties))

    results = Simulation(num_parties, sigma_smudging).run(rounds, csv_path)
    failures = sum(1 for r in results if not r[3])

    if failures:
        TERM.write_failure('{} of {} round(s) failed.'.format(failures, rounds))
        sys.exit(1)

    TERM.write_success('All rounds succeeded. Results appended to {}'.format(csv_path))
